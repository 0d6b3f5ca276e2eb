"""
Image helpers shared by the texture filters.
"""

import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

SUPPORTED_MODES = ('RGB', 'RGBA')


class ImageUtils:
    """Utility class for moving textures between Pillow and numpy."""

    @staticmethod
    def load_image(data: Union[bytes, str, Path, Image.Image]) -> Image.Image:
        """
        Load image from various sources.

        Args:
            data: Image data as bytes, file path, or PIL Image

        Returns:
            PIL Image object

        Raises:
            ValueError: If data cannot be loaded as image
        """
        if isinstance(data, Image.Image):
            return data
        elif isinstance(data, bytes):
            try:
                image = Image.open(io.BytesIO(data))
                image.load()
                return image
            except Exception as e:
                raise ValueError(f"Cannot load image from bytes: {e}")
        elif isinstance(data, (str, Path)):
            try:
                with Image.open(data) as image:
                    image.load()
                    return image.copy()
            except Exception as e:
                raise ValueError(f"Cannot load image from path '{data}': {e}")
        else:
            raise ValueError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def ensure_supported_mode(image: Image.Image) -> Image.Image:
        """Keep RGB and RGBA images as they are, convert anything else to RGBA."""
        if image.mode not in SUPPORTED_MODES:
            return image.convert('RGBA')
        return image

    @staticmethod
    def has_alpha(image: Image.Image) -> bool:
        return image.mode == 'RGBA'

    @staticmethod
    def to_array(image: Image.Image) -> np.ndarray:
        """Copy an RGB/RGBA image into a (height, width, channels) uint8 array."""
        image = ImageUtils.ensure_supported_mode(image)
        return np.array(image, dtype=np.uint8)

    @staticmethod
    def from_array(pixels: np.ndarray) -> Image.Image:
        """Build an RGB or RGBA image from a (height, width, channels) array."""
        # Mode is inferred from the channel count: 3 -> RGB, 4 -> RGBA
        return Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))

    @staticmethod
    def opaque_mask(pixels: np.ndarray) -> np.ndarray:
        """
        Boolean (height, width) mask of pixels with alpha > 0.

        Images without an alpha channel are fully opaque.
        """
        if pixels.shape[-1] == 4:
            return pixels[..., 3] > 0
        return np.ones(pixels.shape[:2], dtype=bool)
