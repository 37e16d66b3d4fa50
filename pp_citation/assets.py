"""
Bundled stamp/barcode masks and font.

The store is built once per process (guarded by a lock) and handed to the
renderer as an immutable dependency. Masks are never modified after loading.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from PIL import Image, ImageFont

from . import defaults
from .settings import settings

logger = logging.getLogger(__name__)

_ASSETS_LOCK = threading.Lock()
_ASSETS: Optional["CitationAssets"] = None


class AssetLoadError(RuntimeError):
    """A bundled mask or font could not be decoded."""


class CitationAssets:
    def __init__(
        self,
        stamp: Image.Image,
        barcode: Image.Image,
        font: ImageFont.FreeTypeFont,
    ) -> None:
        self.stamp = stamp
        self.barcode = barcode
        self.font = font
        self._variants: dict[float, ImageFont.FreeTypeFont] = {float(font.size): font}
        self._variants_lock = threading.Lock()

    def font_at(self, size: float) -> ImageFont.FreeTypeFont:
        """Return the bundled font at ``size`` points, memoised per size."""
        key = float(size)
        with self._variants_lock:
            variant = self._variants.get(key)
            if variant is None:
                variant = self.font.font_variant(size=key)
                self._variants[key] = variant
        return variant


def _load_mask(path: Path) -> Image.Image:
    with Image.open(path) as im:
        mask = im.convert("L")
    mask.load()
    return mask


def load_assets(assets_dir: Optional[Path] = None) -> CitationAssets:
    """
    Decode the stamp mask, barcode mask and font from ``assets_dir``.

    Raises AssetLoadError if any resource is missing or corrupt; nothing is
    returned in that case.
    """
    base = Path(assets_dir) if assets_dir is not None else defaults.ASSETS_DIR
    stamp_path = base / defaults.STAMP_IMAGE.relative_to(defaults.ASSETS_DIR)
    barcode_path = base / defaults.BARCODE_IMAGE.relative_to(defaults.ASSETS_DIR)
    font_path = base / defaults.FONT_PATH.relative_to(defaults.ASSETS_DIR)
    try:
        stamp = _load_mask(stamp_path)
        barcode = _load_mask(barcode_path)
        font = ImageFont.truetype(str(font_path), defaults.FONT_SIZE)
    except OSError as exc:
        # PIL.UnidentifiedImageError is an OSError too
        raise AssetLoadError(f"failed to load bundled citation assets from {base}: {exc}") from exc
    logger.info(
        "Loaded citation assets from %s (stamp=%sx%s barcode=%sx%s font=%s)",
        base,
        stamp.width,
        stamp.height,
        barcode.width,
        barcode.height,
        font_path.name,
    )
    return CitationAssets(stamp=stamp, barcode=barcode, font=font)


def get_assets() -> CitationAssets:
    """Process-wide asset store, created exactly once."""
    global _ASSETS
    with _ASSETS_LOCK:
        if _ASSETS is None:
            _ASSETS = load_assets(settings.ASSETS_DIR)
        return _ASSETS


def reset_assets() -> None:
    global _ASSETS
    with _ASSETS_LOCK:
        _ASSETS = None


def get_stamp_mask() -> Image.Image:
    return get_assets().stamp


def get_barcode_mask() -> Image.Image:
    return get_assets().barcode


def get_font() -> ImageFont.FreeTypeFont:
    return get_assets().font
