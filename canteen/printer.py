"""Thermal invoice printing over USB ESC/POS."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from canteen.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_HEADER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_RIGHT_GUTTER_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from canteen.invoice import invoice_lines

_SEPARATOR_HEIGHT_PX = 14
_SEPARATOR_THICKNESS_PX = 3
_ROW_EXTRA_PX = 10
_COLUMN_GAP_PX = 12
_FONT_OVERRIDE_ENV = "CANTEEN_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)
# Rows 0-4 are the heading block; the canteen name gets the large font.
_HEADING_ROWS = 5


def resolve_printer_font_path() -> str:
    """
    Resolve a printer font path.

    Resolution order:
    1. CANTEEN_PRINTER_FONT_PATH (if set)
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

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer deps unavailable: {exc}")
    return (True, "Printer ready")


def _load_fonts() -> tuple[Any, Any]:
    from PIL import ImageFont

    font_path = resolve_printer_font_path()
    return (
        ImageFont.truetype(font_path, PRINTER_FONT_SIZE),
        ImageFont.truetype(font_path, PRINTER_HEADER_FONT_SIZE),
    )


def _fit_text_to_px(text: str, font: Any, max_width_px: int) -> str:
    from PIL import Image, ImageDraw

    probe = Image.new("1", (1, 1), color=1)
    draw = ImageDraw.Draw(probe)
    if draw.textbbox((0, 0), text, font=font)[2] <= max_width_px:
        return text
    ellipsis = "..."
    trimmed = text
    while trimmed:
        candidate = f"{trimmed}{ellipsis}"
        if draw.textbbox((0, 0), candidate, font=font)[2] <= max_width_px:
            return candidate
        trimmed = trimmed[:-1]
    return ellipsis


def _render_row(left: str, right: str, font: Any, centered: bool = False) -> Any:
    """Render one invoice row: left text, optional right-aligned amount."""
    from PIL import Image, ImageDraw

    probe = Image.new("1", (1, 1), color=1)
    probe_draw = ImageDraw.Draw(probe)
    right_bbox = probe_draw.textbbox((0, 0), right, font=font) if right else (0, 0, 0, 0)
    right_width = right_bbox[2] - right_bbox[0]
    usable = PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX - PRINTER_RIGHT_GUTTER_PX
    left = _fit_text_to_px(left, font, usable - (right_width + _COLUMN_GAP_PX if right else 0))
    left_bbox = probe_draw.textbbox((0, 0), left, font=font)
    text_height = max(left_bbox[3] - left_bbox[1], right_bbox[3] - right_bbox[1])
    canvas_height = text_height + _ROW_EXTRA_PX

    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - left_bbox[1]
    if centered:
        x = max(0, (PRINTER_WIDTH_PX - (left_bbox[2] - left_bbox[0])) // 2)
    else:
        x = PRINTER_LEFT_INDENT_PX
    draw.text((x, y), left, font=font, fill=0)
    if right:
        right_x = PRINTER_WIDTH_PX - PRINTER_RIGHT_GUTTER_PX - right_width - right_bbox[0]
        draw.text((right_x, y), right, font=font, fill=0)
    return img


def _render_spacer(height_px: int) -> Any:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def _render_separator() -> Any:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _SEPARATOR_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    top = (_SEPARATOR_HEIGHT_PX - _SEPARATOR_THICKNESS_PX) // 2
    draw.rectangle((0, top, PRINTER_WIDTH_PX - 1, top + _SEPARATOR_THICKNESS_PX - 1), fill=0)
    return img


def render_invoice_images(order: dict[str, Any], font: Any, header_font: Any) -> list[Any]:
    """Render the invoice as a top-to-bottom list of 1-bit images."""
    rows = invoice_lines(order)
    heading, body = rows[:_HEADING_ROWS], rows[_HEADING_ROWS:]
    footer_start = len(body) - 2
    images = [_render_row(heading[0][0], "", header_font, centered=True)]
    images.extend(_render_row(left, right, font) for left, right in heading[1:])
    images.append(_render_separator())
    for idx, (left, right) in enumerate(body):
        if idx == footer_start - 1:
            images.append(_render_separator())
        images.append(_render_row(left, right, font, centered=idx >= footer_start))
    images.append(_render_spacer(PRINTER_TAIL_SPACER_PX))
    return images


def print_invoice(order: dict[str, Any], printer: Any = None) -> None:
    """Print the invoice for ``order`` and cut the ticket at the end."""
    font, header_font = _load_fonts()
    images = render_invoice_images(order, font, header_font)
    if printer is None:
        try:
            from escpos.printer import Usb
        except Exception as exc:
            raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc
        printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    for img in images:
        printer.image(img)
    printer.cut()
