"""
Colour value type and mask tinting.

A mask is a single-channel image whose intensity is used as opacity. Tinting
keeps the target RGB and scales the target alpha by the mask intensity, so a
single grayscale asset can be recoloured into any theme colour.
"""
from typing import NamedTuple, Sequence, Union

import numpy as np
from PIL import Image


class Colour(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def coerce(cls, value: Union["Colour", Sequence[int]]) -> "Colour":
        if isinstance(value, Colour):
            return value
        return cls(*(int(c) for c in value))

    def __str__(self) -> str:
        return f"rgba({self.r},{self.g},{self.b},{self.a})"


ColourLike = Union[Colour, Sequence[int]]


def tint(intensity: int, colour: ColourLike) -> Colour:
    """Recolour a single mask pixel: RGB from ``colour``, alpha scaled by ``intensity / 255``."""
    r, g, b, a = Colour.coerce(colour)
    alpha = int(a * intensity / 255.0 + 0.5)
    return Colour(r, g, b, alpha)


def tint_mask(mask: Image.Image, colour: ColourLike) -> Image.Image:
    """
    Return a new RGBA image the size of ``mask`` filled with ``colour``, its alpha
    channel being the colour's alpha scaled by the mask intensity (rounded half up).
    The mask itself is left untouched.
    """
    r, g, b, a = Colour.coerce(colour)
    intensity = np.asarray(mask.convert("L"), dtype=np.float32)
    h, w = intensity.shape
    out = np.empty((h, w, 4), dtype=np.uint8)
    out[..., 0] = r
    out[..., 1] = g
    out[..., 2] = b
    alpha = np.floor(a * intensity / 255.0 + 0.5)
    out[..., 3] = np.clip(alpha, 0, 255).astype(np.uint8)
    return Image.fromarray(out)
