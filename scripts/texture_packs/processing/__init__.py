"""
Pixel algorithms: HSV conversion, k-means quantization and error-diffusion dithering.
"""

from .color_space import rgb_to_hsv, hsv_to_rgb, normalize_hue, saturate
from .quantizer import ColorQuantizer, QuantizerConfig, k_means, closest, dist_sq, nearest_indices
from .disperser import ErrorDiffusionDisperser, dither_reduce, posterize, reduce_color

__all__ = [
    "rgb_to_hsv",
    "hsv_to_rgb",
    "normalize_hue",
    "saturate",
    "ColorQuantizer",
    "QuantizerConfig",
    "k_means",
    "closest",
    "dist_sq",
    "nearest_indices",
    "ErrorDiffusionDisperser",
    "dither_reduce",
    "posterize",
    "reduce_color",
]
