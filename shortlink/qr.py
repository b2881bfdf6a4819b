"""QR code rendering for short URLs."""

import base64
from io import BytesIO

import qrcode
import qrcode.image.svg
from qrcode.constants import ERROR_CORRECT_M

SUPPORTED_FORMATS = ("png", "svg", "json")


def _build(data: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None, box_size=10, border=2,
        error_correction=ERROR_CORRECT_M
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr


def generate_qr_png(data: str) -> bytes:
    img = _build(data).make_image(fill_color="black", back_color="white")

    buf = BytesIO()
    img.save(buf)
    return buf.getvalue()


def generate_qr_svg(data: str) -> str:
    img = _build(data).make_image(image_factory=qrcode.image.svg.SvgPathImage)
    return img.to_string(encoding="unicode")


def generate_qr_data_url(data: str) -> str:
    """PNG QR code as a data URL, for embedding in HTML."""
    encoded = base64.b64encode(generate_qr_png(data)).decode()
    return f"data:image/png;base64,{encoded}"
