"""Tests for QR code rendering."""

import base64

from shortlink.qr import generate_qr_data_url, generate_qr_png, generate_qr_svg

SHORT_URL = "https://sho.rt/abc123"


def test_png():
    content = generate_qr_png(SHORT_URL)
    assert content.startswith(b"\x89PNG\r\n\x1a\n")


def test_svg():
    content = generate_qr_svg(SHORT_URL)
    assert "<svg" in content
    assert "</svg>" in content


def test_data_url_embeds_png():
    data_url = generate_qr_data_url(SHORT_URL)

    prefix = "data:image/png;base64,"
    assert data_url.startswith(prefix)
    assert base64.b64decode(data_url[len(prefix):]).startswith(b"\x89PNG")
