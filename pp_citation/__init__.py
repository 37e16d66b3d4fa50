from .animation import AnimationEncodeError, generate_gif, render_gif
from .assets import AssetLoadError, CitationAssets, get_assets, load_assets
from .colour import Colour, tint, tint_mask
from .renderer import CitationData, CitationRenderer, generate, render_citation

__all__ = [
    "AnimationEncodeError",
    "AssetLoadError",
    "CitationAssets",
    "CitationData",
    "CitationRenderer",
    "Colour",
    "generate",
    "generate_gif",
    "get_assets",
    "load_assets",
    "render_citation",
    "render_gif",
    "tint",
    "tint_mask",
]
