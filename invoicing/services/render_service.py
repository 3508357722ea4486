"""
Invoice rendering and export.

Draws the delivery-label style invoice on a fixed 70 cm x 50 cm canvas and
exports it as JPEG or single-page PDF. Layout coordinates are expressed on
an 827 x 591 design grid and scaled to the print resolution.
"""

import base64
import io
from typing import Any, Dict, Optional

from PIL import Image, ImageDraw, ImageFont

from invoicing.config import settings
from invoicing.utils.logging import get_logger

logger = get_logger(__name__)

PRINT_WIDTH_CM = 70
PRINT_HEIGHT_CM = 50
DEFAULT_DPI = 300

DESIGN_WIDTH = 827
DESIGN_HEIGHT = 591
MARGIN = 24
LOGO_BOX = (280, 170)
MAX_ADDRESS_LINES = 3

TEXT_COLOR = (26, 26, 26)
BACKGROUND_COLOR = (255, 255, 255)

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "jpeg": "image/jpeg",
}
FILE_EXTENSIONS = {
    "pdf": "pdf",
    "jpeg": "jpg",
}


def print_size_px(dpi: int = DEFAULT_DPI) -> tuple[int, int]:
    """Canvas size in pixels for the fixed print size at ``dpi``."""
    return (
        round(PRINT_WIDTH_CM / 2.54 * dpi),
        round(PRINT_HEIGHT_CM / 2.54 * dpi),
    )


def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype(settings.INVOICE_FONT_PATH, size)
    except OSError:
        return ImageFont.load_default(size=size)


def _decode_logo(logo: str) -> Optional[Image.Image]:
    """Decode a data:image/...;base64 URI; None if it cannot be read."""
    try:
        _, encoded = logo.split(",", 1)
        image = Image.open(io.BytesIO(base64.b64decode(encoded)))
        image.load()
        return image.convert("RGBA")
    except Exception as e:
        logger.warning(f"Skipping unreadable logo: {e}")
        return None


class _Canvas:
    """Drawing helper that works in design-grid units."""

    def __init__(self, dpi: int):
        self.width, self.height = print_size_px(dpi)
        self.scale = self.width / DESIGN_WIDTH
        self.image = Image.new("RGB", (self.width, self.height), BACKGROUND_COLOR)
        self.draw = ImageDraw.Draw(self.image)

    def px(self, value: float) -> int:
        return round(value * self.scale)

    def text(self, text: str, y: float, size: int, align: str = "left") -> float:
        """Draw one line at design-grid ``y``; return the y below it."""
        font = _load_font(self.px(size))
        text_width = self.draw.textlength(text, font=font)

        if align == "center":
            x = (self.width - text_width) / 2
        elif align == "right":
            x = self.width - self.px(MARGIN) - text_width
        else:
            x = self.px(MARGIN)

        self.draw.text((x, self.px(y)), text, font=font, fill=TEXT_COLOR)
        return y + size * 1.3

    def paste_logo(self, logo: Image.Image) -> None:
        """Fit the logo into the top-right box, keeping its aspect ratio."""
        box_width, box_height = self.px(LOGO_BOX[0]), self.px(LOGO_BOX[1])
        ratio = min(box_width / logo.width, box_height / logo.height)
        fitted = logo.resize(
            (max(1, round(logo.width * ratio)), max(1, round(logo.height * ratio))),
            Image.Resampling.LANCZOS,
        )
        x = self.width - self.px(MARGIN) - box_width + (box_width - fitted.width) // 2
        y = self.px(MARGIN - 14) + (box_height - fitted.height) // 2
        self.image.paste(fitted, (x, max(y, 0)), fitted)


def render_invoice_image(
    invoice: Dict[str, Any],
    logo: Optional[str] = None,
    dpi: int = DEFAULT_DPI,
) -> Image.Image:
    """
    Draw an invoice record onto a print-size RGB image.

    Args:
        invoice: Invoice record (snake_case columns as stored)
        logo: Optional brand logo data URI
        dpi: Print resolution; the physical size is always 70 x 50 cm
    """
    canvas = _Canvas(dpi)

    # Header: number and date top left, logo top right
    y = canvas.text(f"INVOICE {invoice['invoice_number']}", MARGIN, 20)
    canvas.text(f"DATE: {invoice['date']}", y + 4, 20)

    if logo:
        logo_image = _decode_logo(logo)
        if logo_image is not None:
            canvas.paste_logo(logo_image)

    # Delivery details block
    y = canvas.text("DELIVERY DETAILS", 170, 38, align="center") + 10
    y = canvas.text(invoice["customer_name"], y, 32, align="center") + 6
    y = canvas.text(invoice["customer_phone"], y, 32, align="center") + 6

    address_lines = [
        line.strip()
        for line in (invoice.get("customer_address") or "").split("\n")
        if line.strip()
    ][:MAX_ADDRESS_LINES]
    for line in address_lines:
        y = canvas.text(line, y, 32, align="center") + 4

    # Footer, laid out bottom-up from the bottom margin
    footer_y = DESIGN_HEIGHT - MARGIN - 20 * 1.3
    canvas.text(
        f"Thank you for shopping with {settings.BUSINESS_NAME}!",
        footer_y, 20, align="center"
    )
    footer_y -= 20 * 1.3 + 8
    canvas.text("*" * 48, footer_y, 20, align="center")

    pre_code = invoice.get("pre_code")
    if pre_code:
        footer_y -= 28 * 1.3 + 8
        canvas.text(f"PRE{pre_code}", footer_y, 28, align="right")

    return canvas.image


def render_invoice(
    invoice: Dict[str, Any],
    logo: Optional[str],
    fmt: str,
    dpi: int = DEFAULT_DPI,
) -> bytes:
    """
    Render an invoice and encode it for download.

    Args:
        invoice: Invoice record
        logo: Optional brand logo data URI
        fmt: "pdf" or "jpeg"
        dpi: Print resolution

    Returns:
        Encoded file bytes

    Raises:
        ValueError: If ``fmt`` is not a supported export format
    """
    if fmt not in MEDIA_TYPES:
        raise ValueError(f"Unsupported export format '{fmt}'")

    image = render_invoice_image(invoice, logo, dpi)
    buffer = io.BytesIO()

    if fmt == "jpeg":
        image.save(buffer, format="JPEG", quality=95, dpi=(dpi, dpi))
    else:
        # Page size follows from pixel size and resolution: 70 x 50 cm
        image.save(buffer, format="PDF", resolution=float(dpi))

    data = buffer.getvalue()
    logger.info(
        f"Rendered invoice {invoice['invoice_number']} as {fmt} "
        f"({image.width}x{image.height}px, {len(data)} bytes)"
    )
    return data


def export_filename(invoice_number: str, fmt: str) -> str:
    """Download filename for an export, e.g. ``BLH#2800.pdf``."""
    return f"{invoice_number}.{FILE_EXTENSIONS[fmt]}"
