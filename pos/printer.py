"""Receipt rendering to images, exported as PDF or sent to a USB thermal printer."""

from __future__ import annotations

import os
from pathlib import Path

from pos.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
    RECEIPT_EXPORT_DIR,
)
from pos.receipt import ReceiptDocument, ReceiptItemRow, ReceiptTotalRow, receipt_filename

_SEPARATOR_HEIGHT_PX = 12
_SEPARATOR_THICKNESS_PX = 2
_LINE_EXTRA_PX = 8
_SECTION_GAP_PX = 6
# Right edges of the qty / unit price / subtotal columns.
_QTY_RIGHT_PX = 170
_UNIT_RIGHT_PX = 270
_SUBTOTAL_RIGHT_PX = PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX
_NAME_MAX_WIDTH_PX = 120
_PDF_RESOLUTION_DPI = 203.0
_FONT_OVERRIDE_ENV = "RECEIPT_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)


def resolve_printer_font_path() -> str:
    """
    Resolve a printer font path with macOS default behavior preserved.

    Resolution order:
    1. RECEIPT_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise RuntimeError(
        f"No usable printer font found. Set {_FONT_OVERRIDE_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont
        font_path = resolve_printer_font_path()
        ImageFont.truetype(font_path, PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer deps unavailable: {exc}")
    return (True, "Printer ready")


def load_receipt_fonts() -> tuple[object, object]:
    """Return (body font, title font) from the resolved TrueType file."""
    from PIL import ImageFont

    font_path = resolve_printer_font_path()
    body = ImageFont.truetype(font_path, PRINTER_FONT_SIZE)
    title = ImageFont.truetype(font_path, PRINTER_FONT_SIZE + 10)
    return body, title


def _text_size(text: str, font: object) -> tuple[int, int, int, int]:
    from PIL import Image, ImageDraw

    probe = Image.new("1", (1, 1), color=1)
    return ImageDraw.Draw(probe).textbbox((0, 0), text, font=font)


def _line_canvas(font: object, probe_text: str = "Hg") -> tuple[object, object, int]:
    from PIL import Image, ImageDraw

    bbox = _text_size(probe_text, font)
    text_height = bbox[3] - bbox[1]
    canvas_height = max(12, text_height + _LINE_EXTRA_PX)
    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    # Offset by bbox top so descenders (g, y, p, etc.) are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]
    return img, ImageDraw.Draw(img), y


def _fit_text_to_px(text: str, font: object, max_width_px: int) -> str:
    if _text_size(text, font)[2] <= max_width_px:
        return text
    ellipsis = "..."
    trimmed = text
    while trimmed:
        candidate = f"{trimmed}{ellipsis}"
        if _text_size(candidate, font)[2] <= max_width_px:
            return candidate
        trimmed = trimmed[:-1]
    return ellipsis


def _right_x(text: str, font: object, right_edge: int) -> int:
    bbox = _text_size(text, font)
    return right_edge - (bbox[2] - bbox[0]) - bbox[0]


def _render_line(text: str, font: object, align: str = "left") -> object:
    img, draw, y = _line_canvas(font)
    usable = PRINTER_WIDTH_PX - (PRINTER_LEFT_INDENT_PX * 2)
    text = _fit_text_to_px(text, font, usable)
    if align == "center":
        bbox = _text_size(text, font)
        x = (PRINTER_WIDTH_PX - (bbox[2] - bbox[0])) // 2 - bbox[0]
    else:
        x = PRINTER_LEFT_INDENT_PX
    draw.text((x, y), text, font=font, fill=0)
    return img


def _render_item_row(row: ReceiptItemRow, font: object) -> object:
    img, draw, y = _line_canvas(font)
    name = _fit_text_to_px(row.name, font, _NAME_MAX_WIDTH_PX)
    draw.text((PRINTER_LEFT_INDENT_PX, y), name, font=font, fill=0)
    draw.text((_right_x(row.quantity, font, _QTY_RIGHT_PX), y), row.quantity, font=font, fill=0)
    draw.text((_right_x(row.unit_price, font, _UNIT_RIGHT_PX), y), row.unit_price, font=font, fill=0)
    draw.text((_right_x(row.subtotal, font, _SUBTOTAL_RIGHT_PX), y), row.subtotal, font=font, fill=0)
    return img


def _render_total_row(row: ReceiptTotalRow, font: object) -> object:
    img, draw, y = _line_canvas(font)
    label = row.label.upper() if row.emphasized else row.label
    draw.text((PRINTER_LEFT_INDENT_PX, y), label, font=font, fill=0)
    draw.text((_right_x(row.amount, font, _SUBTOTAL_RIGHT_PX), y), row.amount, font=font, fill=0)
    return img


def _render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def _render_section_separator() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _SEPARATOR_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    top = max(0, (_SEPARATOR_HEIGHT_PX - _SEPARATOR_THICKNESS_PX) // 2)
    bottom = min(_SEPARATOR_HEIGHT_PX - 1, top + _SEPARATOR_THICKNESS_PX - 1)
    draw.rectangle((PRINTER_LEFT_INDENT_PX, top, PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX - 1, bottom), fill=0)
    return img


def render_receipt_images(document: ReceiptDocument, font: object, title_font: object | None = None) -> list[object]:
    """Render the receipt as a list of 1-bit strips, top to bottom."""
    title_font = title_font or font
    images: list[object] = []

    for idx, header_line in enumerate(document.header):
        images.append(_render_line(header_line, title_font if idx == 0 else font, align="center"))
    images.append(_render_section_separator())

    for meta_line in document.meta_lines:
        images.append(_render_line(meta_line, font))
    images.append(_render_section_separator())

    images.append(_render_item_row(ReceiptItemRow("ITEM", "QTY", "HARGA", "SUBTOTAL"), font))
    for row in document.items:
        images.append(_render_item_row(row, font))
    images.append(_render_section_separator())

    for total in document.totals:
        images.append(_render_total_row(total, title_font if total.emphasized else font))

    images.append(_render_spacer(_SECTION_GAP_PX * 2))
    images.append(_render_line(document.closing_message, font, align="center"))
    return images


def _stack_images(images: list[object]) -> object:
    from PIL import Image

    height = sum(img.height for img in images)
    page = Image.new("1", (PRINTER_WIDTH_PX, max(1, height)), color=1)
    y = 0
    for img in images:
        page.paste(img, (0, y))
        y += img.height
    return page


def export_receipt_pdf(
    document: ReceiptDocument,
    directory: str | Path = RECEIPT_EXPORT_DIR,
    font: object | None = None,
    title_font: object | None = None,
) -> Path:
    """Write ``receipt-<transaction number>.pdf`` and return its path."""
    if font is None:
        font, title_font = load_receipt_fonts()

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / receipt_filename(document.transaction_number)
    page = _stack_images(render_receipt_images(document, font, title_font))
    page.convert("L").save(path, "PDF", resolution=_PDF_RESOLUTION_DPI)
    return path


def print_receipt(document: ReceiptDocument) -> None:
    """Print the receipt strip by strip and cut the ticket at the end."""
    try:
        from escpos.printer import Usb
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    font, title_font = load_receipt_fonts()
    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    for img in render_receipt_images(document, font, title_font):
        printer.image(img)
    # Extra tail so the closing line clears the tear bar.
    printer.image(_render_spacer(PRINTER_TAIL_SPACER_PX))
    printer.cut()
