"""Public URLs for short links."""


def _join(base_url: str, path_prefix: str, *segments: str) -> str:
    parts = [base_url.rstrip("/")]
    prefix = path_prefix.strip("/")
    if prefix:
        parts.append(prefix)
    parts.extend(segments)
    return "/".join(parts)


def build_short_url(short_code: str, base_url: str, path_prefix: str = "") -> str:
    """``https://host[/prefix]/<code>``, the URL that redirects."""
    return _join(base_url, path_prefix, short_code)


def build_qr_url(short_code: str, base_url: str, path_prefix: str = "") -> str:
    """URL of the QR code image endpoint for a short code."""
    return _join(base_url, path_prefix, "api", "qr", short_code)
