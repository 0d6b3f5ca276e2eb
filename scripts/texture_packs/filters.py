"""
Texture filters applied by the pack builder, one image at a time.
"""

import logging
from typing import Callable, Dict, Iterable, Iterator, Optional, Union
from pathlib import Path

import numpy as np
from PIL import Image, ImageChops

from .config import FilterConfig, FilterKind
from .errors import ConfigurationError, FilterError, TexturePackError
from .processing.color_space import saturate
from .processing.disperser import ErrorDiffusionDisperser
from .processing.quantizer import ColorQuantizer
from .utils.image import ImageUtils

logger = logging.getLogger(__name__)

ImageSource = Union[Image.Image, bytes, str, Path]


class TextureFilter:
    """Applies one configured filter to decoded textures."""

    def __init__(self, config: Optional[FilterConfig] = None):
        """
        Initialize filter with configuration.

        Raises:
            ConfigurationError: If the configuration does not validate
        """
        self.config = config or FilterConfig()
        errors = self.config.validate()
        if errors:
            raise ConfigurationError(f"Invalid filter configuration: {'; '.join(errors)}", errors)

        self.kind = self.config.filter_kind
        self.disperser = ErrorDiffusionDisperser()
        self._transforms: Dict[FilterKind, Callable[[Image.Image], Image.Image]] = {
            FilterKind.GRAYSCALE: self.grayscale,
            FilterKind.INVERT: self.invert,
            FilterKind.SATURATE: self.saturate,
            FilterKind.DITHER: self.dither,
            FilterKind.AVERAGE: self.average,
            FilterKind.POSTERIZE: self.posterize,
            FilterKind.KMEANS: self.kmeans,
        }

    def apply(self, image_data: ImageSource) -> Image.Image:
        """
        Transform one image with the configured filter.

        Args:
            image_data: PIL Image, encoded bytes or a file path

        Returns:
            New image with the same size; RGB and RGBA keep their mode,
            other modes come back as RGBA

        Raises:
            FilterError: If the image cannot be loaded or transformed
        """
        try:
            image = ImageUtils.ensure_supported_mode(ImageUtils.load_image(image_data))
            return self._transforms[self.kind](image)
        except TexturePackError:
            raise
        except Exception as e:
            raise FilterError(f"Filter {self.kind.key} failed: {str(e)}", kind=self.kind.key) from e

    def grayscale(self, image: Image.Image) -> Image.Image:
        """Replace RGB with ITU-R 601-2 luma, alpha preserved."""
        luma = image.convert('L')
        bands = [luma, luma, luma]
        if ImageUtils.has_alpha(image):
            bands.append(image.getchannel('A'))
        return Image.merge(image.mode, bands)

    def invert(self, image: Image.Image) -> Image.Image:
        """Replace each color channel c by 255 - c, alpha preserved."""
        if not ImageUtils.has_alpha(image):
            return ImageChops.invert(image)

        r, g, b, a = image.split()
        rgb = ImageChops.invert(Image.merge('RGB', (r, g, b)))
        return Image.merge('RGBA', (*rgb.split(), a))

    def saturate(self, image: Image.Image) -> Image.Image:
        """Scale HSV saturation of every pixel, alpha preserved."""
        pixels = ImageUtils.to_array(image)
        flat = pixels.reshape(-1, pixels.shape[-1])
        lookup = {}

        for i, color in enumerate(flat.tolist()):
            rgb = tuple(color[:3])
            mapped = lookup.get(rgb)
            if mapped is None:
                mapped = saturate(rgb, self.config.saturation_factor)
                lookup[rgb] = mapped
            flat[i, :3] = mapped

        return ImageUtils.from_array(pixels)

    def dither(self, image: Image.Image) -> Image.Image:
        """Reduce channel depth with error diffusion."""
        return ImageUtils.from_array(self.disperser.reduce(ImageUtils.to_array(image)))

    def average(self, image: Image.Image) -> Image.Image:
        """
        Paint every visible pixel with the mean color of the visible pixels.

        Fully transparent pixels are left out of the mean and left untouched.
        An image with no visible pixel is returned unchanged.
        """
        pixels = ImageUtils.to_array(image)
        mask = ImageUtils.opaque_mask(pixels)
        count = int(mask.sum())
        if count == 0:
            return image.copy()

        totals = pixels[mask][:, :3].astype(np.int64).sum(axis=0)
        mean = totals // count
        pixels[mask, :3] = mean.astype(np.uint8)

        return ImageUtils.from_array(pixels)

    def posterize(self, image: Image.Image) -> Image.Image:
        """Snap every pixel to the reduced channel grid, alpha preserved."""
        return ImageUtils.from_array(self.disperser.posterize(ImageUtils.to_array(image)))

    def kmeans(self, image: Image.Image) -> Image.Image:
        """
        Recolor visible pixels with a palette learned by k-means.

        Every pixel's RGB feeds the clustering, transparent ones included;
        only pixels with alpha > 0 are recolored.
        """
        pixels = ImageUtils.to_array(image)
        flat = pixels.reshape(-1, pixels.shape[-1])

        quantizer = ColorQuantizer(self.config.quantizer_config())
        palette = quantizer.fit(flat)
        logger.debug(f"Learned {len(palette)} color palette for {image.size[0]}x{image.size[1]} image")

        if not palette:
            return image.copy()

        mask = ImageUtils.opaque_mask(pixels).reshape(-1)
        remapped = quantizer.remap(flat, mask)

        return ImageUtils.from_array(remapped.reshape(pixels.shape))


def apply_filter(image_data: ImageSource, config: Union[FilterConfig, FilterKind, str],
                 **overrides) -> Image.Image:
    """
    Apply a single filter to one image.

    Args:
        image_data: PIL Image, encoded bytes or a file path
        config: A FilterConfig, or a filter kind / name to use with defaults
        **overrides: FilterConfig fields to set when config is a kind or name

    Returns:
        Transformed image
    """
    if not isinstance(config, FilterConfig):
        config = FilterConfig(kind=FilterKind.from_name(config), **overrides)
    return TextureFilter(config).apply(image_data)


def transform_images(images: Iterable[ImageSource], config: FilterConfig) -> Iterator[Image.Image]:
    """
    Apply one filter to a stream of images, yielding results in order.

    Raises:
        FilterError: Naming the filter and the index of the image that failed
    """
    texture_filter = TextureFilter(config)
    count = 0

    for index, image_data in enumerate(images):
        try:
            result = texture_filter.apply(image_data)
        except TexturePackError as e:
            raise FilterError(
                f"Filter {texture_filter.kind.key} failed on image {index}: {e.message}",
                kind=texture_filter.kind.key,
                index=index,
            ) from e
        count += 1
        yield result

    logger.info(f"Filter {texture_filter.kind.key} transformed {count} images")
