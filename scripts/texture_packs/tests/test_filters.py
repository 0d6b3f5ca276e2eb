"""
Tests for the texture filters.
"""

import io
import os
import tempfile
import unittest

import numpy as np
import pytest
from PIL import Image

from ..config import FilterConfig, FilterKind
from ..errors import ConfigurationError, FilterError, InvalidArgumentError
from ..filters import TextureFilter, apply_filter, transform_images, logger as filters_logger


def make_texture(mode: str = 'RGBA', size: tuple[int, int] = (8, 8)) -> Image.Image:
    """Create a texture with a color gradient and a transparent border."""
    width, height = size
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            pixels[y, x] = (x * 30 % 256, y * 30 % 256, (x + y) * 15 % 256, 255)
    pixels[0, :, 3] = 0
    image = Image.fromarray(pixels)
    return image if mode == 'RGBA' else image.convert(mode)


class TestTextureFilter(unittest.TestCase):
    """Test cases common to every filter."""

    def test_size_and_mode_preserved(self):
        """Test each filter keeps the size and mode of RGB and RGBA input."""
        for kind in FilterKind:
            for mode in ('RGBA', 'RGB'):
                image = make_texture(mode, (7, 5))
                result = TextureFilter(FilterConfig(kind=kind, seed=1, max_iterations=50)).apply(image)
                self.assertEqual(result.size, (7, 5), kind)
                self.assertEqual(result.mode, mode, kind)

    def test_input_not_mutated(self):
        image = make_texture()
        before = np.array(image).copy()
        for kind in FilterKind:
            TextureFilter(FilterConfig(kind=kind, seed=1, max_iterations=50)).apply(image)
        np.testing.assert_array_equal(np.array(image), before)

    def test_palette_image_converted_to_rgba(self):
        image = make_texture('RGB').convert('P')
        result = TextureFilter(FilterConfig(kind=FilterKind.INVERT)).apply(image)
        self.assertEqual(result.mode, 'RGBA')

    def test_accepts_png_bytes(self):
        buffer = io.BytesIO()
        make_texture().save(buffer, format='PNG')

        result = TextureFilter(FilterConfig(kind='posterize')).apply(buffer.getvalue())

        self.assertEqual(result.size, (8, 8))

    def test_accepts_path(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, 'stone.png')
            make_texture().save(path)

            result = TextureFilter(FilterConfig(kind='grayscale')).apply(path)

        self.assertEqual(result.mode, 'RGBA')

    def test_bad_bytes_raise_filter_error(self):
        with self.assertRaises(FilterError) as ctx:
            TextureFilter(FilterConfig(kind='invert')).apply(b'not a png')
        self.assertEqual(ctx.exception.kind, 'invert')

    def test_invalid_config_raises(self):
        with self.assertRaises(ConfigurationError) as ctx:
            TextureFilter(FilterConfig(kind='kmeans', k=0))
        self.assertTrue(any('k must be' in e for e in ctx.exception.errors))

    def test_unknown_kind_raises(self):
        with self.assertRaises(ConfigurationError):
            TextureFilter(FilterConfig(kind='sepia'))


class TestGrayscale(unittest.TestCase):
    """Test cases for the grayscale filter."""

    def test_channels_equal_and_alpha_kept(self):
        image = make_texture()
        result = np.array(apply_filter(image, FilterKind.GRAYSCALE))

        np.testing.assert_array_equal(result[..., 0], result[..., 1])
        np.testing.assert_array_equal(result[..., 1], result[..., 2])
        np.testing.assert_array_equal(result[..., 3], np.array(image)[..., 3])

    def test_extremes(self):
        image = Image.fromarray(np.array([[[0, 0, 0, 255], [255, 255, 255, 10]]], dtype=np.uint8))
        result = np.array(apply_filter(image, 'grayscale'))
        np.testing.assert_array_equal(result, np.array([[[0, 0, 0, 255], [255, 255, 255, 10]]]))


class TestInvert(unittest.TestCase):
    """Test cases for the invert filter."""

    def test_inverts_color_keeps_alpha(self):
        image = Image.fromarray(np.array([[[0, 100, 255, 30]]], dtype=np.uint8))
        result = np.array(apply_filter(image, 'invert'))
        np.testing.assert_array_equal(result, np.array([[[255, 155, 0, 30]]]))

    def test_involution(self):
        """Test inverting twice restores the original exactly."""
        for mode in ('RGBA', 'RGB'):
            image = make_texture(mode)
            twice = apply_filter(apply_filter(image, 'invert'), 'invert')
            np.testing.assert_array_equal(np.array(twice), np.array(image))


class TestSaturate(unittest.TestCase):
    """Test cases for the saturation filter."""

    def test_saturates_and_keeps_alpha(self):
        image = Image.fromarray(np.array([[[200, 100, 100, 42], [50, 50, 50, 255]]], dtype=np.uint8))
        result = np.array(apply_filter(image, 'saturate'))

        self.assertIn(result[0, 0, 0], (199, 200))
        self.assertEqual(result[0, 0, 1], 0)
        self.assertEqual(result[0, 0, 2], 0)
        self.assertEqual(result[0, 0, 3], 42)
        # Gray has no saturation to scale
        self.assertEqual(result[0, 1, 0], result[0, 1, 1])
        self.assertEqual(result[0, 1, 3], 255)

    def test_zero_factor_desaturates(self):
        image = Image.fromarray(np.array([[[255, 0, 0, 255]]], dtype=np.uint8))
        result = np.array(apply_filter(image, 'saturate', saturation_factor=0.0))
        self.assertEqual(result[0, 0, 0], result[0, 0, 1])


class TestAverage(unittest.TestCase):
    """Test cases for the uniform average filter."""

    def test_two_colors_average(self):
        """Test equal counts of two colors average with truncation and skip transparent pixels."""
        pixels = np.array([[
            [255, 0, 0, 255],
            [1, 0, 0, 255],
            [255, 0, 0, 128],
            [1, 0, 0, 1],
            [9, 9, 9, 0],
        ]], dtype=np.uint8)

        result = np.array(apply_filter(Image.fromarray(pixels), 'average'))

        np.testing.assert_array_equal(result, np.array([[
            [128, 0, 0, 255],
            [128, 0, 0, 255],
            [128, 0, 0, 128],
            [128, 0, 0, 1],
            [9, 9, 9, 0],
        ]]))

    def test_fully_transparent_unchanged(self):
        pixels = np.array([[[10, 20, 30, 0], [40, 50, 60, 0]]], dtype=np.uint8)
        result = np.array(apply_filter(Image.fromarray(pixels), 'average'))
        np.testing.assert_array_equal(result, pixels)

    def test_rgb_image_uses_every_pixel(self):
        pixels = np.array([[[0, 10, 20], [100, 11, 40]]], dtype=np.uint8)
        result = np.array(apply_filter(Image.fromarray(pixels), 'average'))
        np.testing.assert_array_equal(result, np.array([[[50, 10, 30], [50, 10, 30]]]))


class TestPosterizeAndDither(unittest.TestCase):
    """Test cases for the 8bit and 1-bit filters."""

    def test_posterize_idempotent(self):
        image = make_texture()
        once = apply_filter(image, 'posterize')
        twice = apply_filter(once, 'posterize')
        np.testing.assert_array_equal(np.array(once), np.array(twice))

    def test_posterize_keeps_alpha(self):
        image = make_texture()
        result = np.array(apply_filter(image, '8bit'))
        np.testing.assert_array_equal(result[..., 3], np.array(image)[..., 3])

    def test_dither_diffuses_error(self):
        pixels = np.array([[[60, 0, 0, 255], [20, 0, 0, 255]]], dtype=np.uint8)
        result = np.array(apply_filter(Image.fromarray(pixels), FilterKind.DITHER))
        np.testing.assert_array_equal(result, np.array([[[32, 0, 0, 255], [32, 0, 0, 255]]]))


class TestKMeansFilter(unittest.TestCase):
    """Test cases for the k-means recolor filter."""

    def test_single_cluster_recolors_visible_pixels(self):
        """Test transparent pixels feed the palette but are not recolored."""
        pixels = np.array([[[200, 0, 0, 255], [0, 0, 0, 0]]], dtype=np.uint8)

        result = np.array(apply_filter(Image.fromarray(pixels), 'kmeans', k=1, seed=3))

        np.testing.assert_array_equal(result, np.array([[[100, 0, 0, 255], [0, 0, 0, 0]]]))

    def test_palette_size_bounded_by_k(self):
        image = make_texture(size=(12, 12))
        result = np.array(apply_filter(image, 'kmeans', k=3, seed=8, max_iterations=100))

        visible = result[result[..., 3] > 0][:, :3]
        self.assertLessEqual(len({tuple(p) for p in visible.tolist()}), 3)
        np.testing.assert_array_equal(result[..., 3], np.array(image)[..., 3])


class TestApplyFilter:
    """Tests for the functional entry points."""

    def test_unknown_name(self):
        with pytest.raises(InvalidArgumentError):
            apply_filter(make_texture(), 'sepia')

    def test_config_object(self):
        result = apply_filter(make_texture(), FilterConfig(kind=FilterKind.INVERT))
        assert result.size == (8, 8)

    def test_transform_images_in_order(self):
        images = [make_texture(size=(4, 4)), make_texture(size=(6, 2))]
        results = list(transform_images(images, FilterConfig(kind='invert')))

        assert [r.size for r in results] == [(4, 4), (6, 2)]

    def test_transform_images_reports_index(self):
        images = [make_texture(), b'garbage']
        stream = transform_images(images, FilterConfig(kind='grayscale'))

        assert next(stream).size == (8, 8)
        with pytest.raises(FilterError) as exc_info:
            next(stream)
        assert exc_info.value.index == 1
        assert exc_info.value.kind == 'grayscale'

    def test_transform_images_logs_count(self, caplog):
        with caplog.at_level('INFO', logger=filters_logger.name):
            list(transform_images([make_texture()], FilterConfig(kind='average')))
        assert 'transformed 1 images' in caplog.text


if __name__ == '__main__':
    unittest.main()
