"""
Texture Pack Filters

Pixel-transform engine behind the filtered texture packs: grayscale, invert,
saturation, error-diffusion dithering, uniform average, 8-bit posterize and
k-means recoloring of RGBA textures.
"""

__version__ = "0.1.0"

from .config import FilterConfig, FilterKind
from .errors import TexturePackError, InvalidArgumentError, ConfigurationError, FilterError
from .filters import TextureFilter, apply_filter, transform_images
from .log import setup_logging

__all__ = [
    "FilterConfig",
    "FilterKind",
    "TexturePackError",
    "InvalidArgumentError",
    "ConfigurationError",
    "FilterError",
    "TextureFilter",
    "apply_filter",
    "transform_images",
    "setup_logging",
]
