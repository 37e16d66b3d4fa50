"""
Pixel primitives used by the citation layout.

All helpers clip silently: anything that falls outside the canvas is dropped
rather than raising.
"""
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont


def _square(draw: ImageDraw.ImageDraw, x: int, y: int, size: int, colour: Sequence[int]) -> None:
    draw.rectangle([x, y, x + size - 1, y + size - 1], fill=tuple(colour))


def dotted_row(
    canvas: Image.Image,
    colour: Sequence[int],
    y: int,
    x_start: int,
    x_end: int,
    size: int,
    gap: int,
) -> None:
    """
    Draw ``size`` x ``size`` squares along row ``y``, one every ``size + gap`` pixels
    from ``x_start`` while the square origin is <= ``x_end``.
    """
    if size <= 0:
        return
    draw = ImageDraw.Draw(canvas)
    for x in range(x_start, x_end + 1, size + gap):
        _square(draw, x, y, size, colour)


def dotted_column(
    canvas: Image.Image,
    colour: Sequence[int],
    x: int,
    y_start: int,
    y_end: int,
    size: int,
    gap: int,
) -> None:
    """Column counterpart of dotted_row."""
    if size <= 0:
        return
    draw = ImageDraw.Draw(canvas)
    for y in range(y_start, y_end + 1, size + gap):
        _square(draw, x, y, size, colour)


def solid_columns(canvas: Image.Image, colour: Sequence[int], count: int) -> None:
    """Fill the rightmost ``count`` columns over the full canvas height."""
    width, height = canvas.size
    count = min(count, width)
    if count <= 0 or height <= 0:
        return
    ImageDraw.Draw(canvas).rectangle([width - count, 0, width - 1, height - 1], fill=tuple(colour))


def overlay(canvas: Image.Image, layer: Image.Image, x: int, y: int) -> None:
    """Source-over composite ``layer`` onto ``canvas`` at (x, y), in place."""
    left, top = max(x, 0), max(y, 0)
    right = min(x + layer.width, canvas.width)
    bottom = min(y + layer.height, canvas.height)
    if right <= left or bottom <= top:
        return
    visible = layer.crop((left - x, top - y, right - x, bottom - y))
    canvas.alpha_composite(visible, dest=(left, top))


def draw_text(
    canvas: Image.Image,
    colour: Sequence[int],
    x: int,
    y: int,
    text: str,
    font: ImageFont.FreeTypeFont,
) -> None:
    if not text:
        return
    ImageDraw.Draw(canvas).text((x, y), text, font=font, fill=tuple(colour))


def text_width(text: str, font: ImageFont.FreeTypeFont) -> int:
    """Ink width of ``text`` in whole pixels."""
    if not text:
        return 0
    bbox = font.getbbox(text)
    return int(bbox[2] - bbox[0])
