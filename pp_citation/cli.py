import argparse
import logging
import re
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from PIL import ImageColor

from . import defaults
from .animation import AnimationEncodeError, render_gif
from .assets import AssetLoadError, load_assets
from .colour import Colour
from .renderer import CitationData, CitationRenderer
from .settings import Settings

logger = logging.getLogger(__name__)

_CHANNEL_LIST = re.compile(r"^\s*[\[(]?\s*(\d+\s*(?:,\s*\d+\s*){2,3})[\])]?\s*$")


def parse_colour(value: str) -> Colour:
    """
    Parse ``[r, g, b]`` / ``(r, g, b, a)`` / ``r,g,b`` channel lists (alpha defaults
    to 255) or any CSS colour known to Pillow's ImageColor.
    """
    match = _CHANNEL_LIST.match(value)
    if match:
        channels = [int(part) for part in match.group(1).split(",")]
        if any(c > 255 for c in channels):
            raise argparse.ArgumentTypeError(f"colour channel out of range in {value!r}")
        return Colour(*channels)
    try:
        rgba = ImageColor.getcolor(value.strip(), "RGBA")
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"could not parse colour {value!r}") from exc
    return Colour(*rgba)


def split_violations(values: Optional[List[str]]) -> List[str]:
    if values is None:
        return [line for line in defaults.VIOLATION_TEXT if line is not None]
    lines: List[str] = []
    for value in values:
        lines.extend(part.strip() for part in value.split(",") if part.strip())
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a Papers Please style citation.")
    parser.add_argument("-g", "--gif", action="store_true", help="Write an animated gif of the citation sliding up.")
    parser.add_argument("--header", default=defaults.HEADER_TEXT, help="Citation header.")
    parser.add_argument(
        "-v",
        "--violations",
        nargs="*",
        default=None,
        help="Up to 4 violation lines; each argument (or comma separated part) is one line.",
    )
    parser.add_argument("-p", "--punishment", default=defaults.PUNISHMENT_TEXT, help="Punishment line.")
    parser.add_argument("-o", "--output-file", required=True, type=Path, help="File to write; format is guessed from the extension.")
    parser.add_argument("-b", "--bg-colour", type=parse_colour, default=Colour(*defaults.BG_COLOUR))
    parser.add_argument("-f", "--fg-colour", type=parse_colour, default=Colour(*defaults.FG_COLOUR))
    parser.add_argument("-d", "--decoration-colour", type=parse_colour, default=Colour(*defaults.DECORATION_COLOUR))
    parser.add_argument("--font-size", type=float, default=defaults.FONT_SIZE)
    parser.add_argument(
        "--measure-at-draw-size",
        action="store_true",
        default=None,
        help="Centre the punishment line using its real width instead of the 2.0 reference size.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from PP_CITATION_LOG_LEVEL).")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    cfg = Settings()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, (args.log_level or cfg.LOG_LEVEL).upper(), logging.INFO),
        format="%(message)s",
    )

    violations = split_violations(args.violations)
    if len(violations) > defaults.MAX_VIOLATION_LINES:
        parser.error(f"at most {defaults.MAX_VIOLATION_LINES} violation lines are supported")
    violations += [None] * (defaults.MAX_VIOLATION_LINES - len(violations))

    config = CitationData(
        bg_colour=args.bg_colour,
        fg_colour=args.fg_colour,
        decoration_colour=args.decoration_colour,
        font_size=args.font_size,
        header_text=args.header,
        violation_text=violations,
        punishment_text=args.punishment,
    )
    measure = args.measure_at_draw_size if args.measure_at_draw_size is not None else cfg.MEASURE_AT_DRAW_SIZE
    out_path: Path = args.output_file

    try:
        renderer = CitationRenderer(assets=load_assets(cfg.ASSETS_DIR), measure_at_draw_size=measure)
        if args.gif:
            if out_path.suffix and out_path.suffix.lower() != ".gif":
                logger.warning("Exporting gif into a non-gif file extension: %s", out_path)
            out_path.write_bytes(render_gif(config, renderer=renderer))
        else:
            renderer.render(config).save(out_path)
    except (AssetLoadError, AnimationEncodeError, OSError, ValueError):
        logger.exception("Failed to write citation to %s", out_path)
        return 1

    logger.info("Wrote %s", out_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
