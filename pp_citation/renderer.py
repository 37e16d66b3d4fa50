import dataclasses
import logging
from typing import Optional, Sequence

from PIL import Image, ImageFont

from . import defaults, drawing
from .assets import CitationAssets, get_assets
from .colour import Colour, ColourLike, tint_mask
from .settings import settings

logger = logging.getLogger(__name__)

# Fixed layout (pixels)
DOT_SIZE = 2
DOT_GAP = 2
BORDER_COLUMNS = 2
SEPARATOR_X_START = 16
SEPARATOR_X_END = 344
HEADER_SEPARATOR_Y = 34
VIOLATION_SEPARATOR_Y = 114
STAMP_OFFSET = (150, 88)
BARCODE_OFFSET = (316, 6)
SIDE_COLUMN_XS = (4, 352)
SIDE_COLUMN_Y_START = 6
SIDE_COLUMN_Y_END = 150
SIDE_DOT_SIZE = 6
SIDE_DOT_GAP = 12
TEXT_X = 22
HEADER_Y = 8
VIOLATION_Y = 44
VIOLATION_LINE_PITCH = 18
PUNISHMENT_CENTRE_X = 66
PUNISHMENT_Y = 130
# Punishment line width is measured at this size, not at font_size, unless measure_at_draw_size is set.
PUNISHMENT_MEASURE_SIZE = 2.0


@dataclasses.dataclass(frozen=True)
class CitationData:
    width: int = defaults.WIDTH
    height: int = defaults.HEIGHT
    bg_colour: ColourLike = Colour(*defaults.BG_COLOUR)
    fg_colour: ColourLike = Colour(*defaults.FG_COLOUR)
    decoration_colour: ColourLike = Colour(*defaults.DECORATION_COLOUR)
    font: Optional[ImageFont.FreeTypeFont] = None
    font_size: float = defaults.FONT_SIZE
    header_text: str = defaults.HEADER_TEXT
    violation_text: Sequence[Optional[str]] = defaults.VIOLATION_TEXT
    punishment_text: str = defaults.PUNISHMENT_TEXT

    def __post_init__(self) -> None:
        for name in ("bg_colour", "fg_colour", "decoration_colour"):
            object.__setattr__(self, name, Colour.coerce(getattr(self, name)))
        violations = tuple(self.violation_text)
        if len(violations) > defaults.MAX_VIOLATION_LINES:
            raise ValueError(
                f"at most {defaults.MAX_VIOLATION_LINES} violation lines are supported, got {len(violations)}"
            )
        object.__setattr__(self, "violation_text", violations)


def violation_line_y(index: int) -> int:
    """Top of violation slot ``index``; empty slots still reserve their row."""
    return VIOLATION_Y + VIOLATION_LINE_PITCH * index


class CitationRenderer:
    """Composites a citation card from a CitationData using a shared asset store."""

    def __init__(
        self,
        assets: Optional[CitationAssets] = None,
        measure_at_draw_size: Optional[bool] = None,
    ) -> None:
        self.assets = assets if assets is not None else get_assets()
        if measure_at_draw_size is None:
            measure_at_draw_size = settings.MEASURE_AT_DRAW_SIZE
        self.measure_at_draw_size = measure_at_draw_size

    def _fonts(self, config: CitationData) -> tuple[ImageFont.FreeTypeFont, ImageFont.FreeTypeFont]:
        measure_size = config.font_size if self.measure_at_draw_size else PUNISHMENT_MEASURE_SIZE
        if config.font is None:
            return self.assets.font_at(config.font_size), self.assets.font_at(measure_size)
        font = config.font
        if float(font.size) != float(config.font_size):
            font = font.font_variant(size=config.font_size)
        return font, config.font.font_variant(size=measure_size)

    def punishment_x(self, text: str, measure_font: ImageFont.FreeTypeFont) -> int:
        return PUNISHMENT_CENTRE_X - (drawing.text_width(text, measure_font) // 2)

    def render(self, config: CitationData) -> Image.Image:
        """Render ``config`` into a new RGBA image of config.width x config.height."""
        width, height = config.width, config.height
        bg, fg, deco = config.bg_colour, config.fg_colour, config.decoration_colour
        font, measure_font = self._fonts(config)

        img = Image.new("RGBA", (width, height), tuple(bg))

        # Top dotted edge, then the bottom one shifted right by one dot
        drawing.dotted_row(img, deco, 0, 0, width - 2, DOT_SIZE, DOT_GAP)
        drawing.dotted_row(img, deco, height - 2, 2, width - 2, DOT_SIZE, DOT_GAP)

        # Solid right border
        drawing.solid_columns(img, deco, BORDER_COLUMNS)

        # Header separator
        drawing.dotted_row(
            img, fg, HEADER_SEPARATOR_Y, SEPARATOR_X_START, SEPARATOR_X_END, DOT_SIZE, DOT_GAP
        )

        drawing.overlay(img, tint_mask(self.assets.stamp, deco), *STAMP_OFFSET)

        # Side indents
        for x in SIDE_COLUMN_XS:
            drawing.dotted_column(
                img, deco, x, SIDE_COLUMN_Y_START, SIDE_COLUMN_Y_END, SIDE_DOT_SIZE, SIDE_DOT_GAP
            )

        drawing.overlay(img, tint_mask(self.assets.barcode, fg), *BARCODE_OFFSET)

        # Violation separator
        drawing.dotted_row(
            img, fg, VIOLATION_SEPARATOR_Y, SEPARATOR_X_START, SEPARATOR_X_END, DOT_SIZE, DOT_GAP
        )

        drawing.draw_text(img, fg, TEXT_X, HEADER_Y, config.header_text, font)

        for idx, line in enumerate(config.violation_text):
            if line is None:
                continue
            drawing.draw_text(img, fg, TEXT_X, violation_line_y(idx), line, font)

        punishment_x = self.punishment_x(config.punishment_text, measure_font)
        logger.debug(
            "punishment text measured at %spt, drawn at %spt, x=%s",
            measure_font.size,
            font.size,
            punishment_x,
        )
        drawing.draw_text(img, fg, punishment_x, PUNISHMENT_Y, config.punishment_text, font)

        return img


def render_citation(config: CitationData, assets: Optional[CitationAssets] = None) -> Image.Image:
    return CitationRenderer(assets=assets).render(config)


def generate(config: Optional[CitationData] = None) -> Image.Image:
    """Render ``config`` (or the default citation) with the process-wide assets."""
    return render_citation(config if config is not None else CitationData())
