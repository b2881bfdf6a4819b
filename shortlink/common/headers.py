"""Reverse-proxy header handling.

The service usually runs behind a proxy that terminates TLS and may mount
it under a path prefix. These helpers recover the public scheme, host,
prefix and client address from ``X-Forwarded-*`` headers. Each proxy in a
chain appends to these headers, so only the first (client-side) value of a
comma-separated list is used.
"""

from typing import Dict, Mapping, Optional


def _first_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name and value:
            return value.split(",")[0].strip() or None
    return None


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Return ``forwarded_proto``, ``forwarded_host`` and ``forwarded_for`` (first hop each)."""
    return {
        "forwarded_proto": _first_value(headers, "x-forwarded-proto"),
        "forwarded_host": _first_value(headers, "x-forwarded-host"),
        "forwarded_for": _first_value(headers, "x-forwarded-for"),
    }


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Public ``scheme://host`` of this service, without a trailing slash.

    A forwarded host wins (with the forwarded scheme if given, else the
    request's), then the request's own scheme and Host header, then the
    configured base URL.
    """
    forwarded = extract_forwarded_headers(headers)

    if forwarded["forwarded_host"]:
        scheme = forwarded["forwarded_proto"] or request_scheme or "http"
        return f"{scheme}://{forwarded['forwarded_host']}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def get_forwarded_path_prefix(headers: Mapping[str, str]) -> str:
    """Mount path from ``X-Forwarded-Prefix`` as ``/s`` (no trailing slash), or ''."""
    prefix = (_first_value(headers, "x-forwarded-prefix") or "").strip("/")
    return f"/{prefix}" if prefix else ""


def get_client_address(headers: Mapping[str, str], peer_host: Optional[str]) -> str:
    """First ``X-Forwarded-For`` hop, else the socket peer, else ``unknown``."""
    return extract_forwarded_headers(headers)["forwarded_for"] or peer_host or "unknown"
