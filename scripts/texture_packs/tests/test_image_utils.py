"""
Tests for image utilities.
"""

import io
import unittest

import numpy as np
from PIL import Image

from ..utils.image import ImageUtils


class TestImageUtils(unittest.TestCase):
    """Test cases for ImageUtils."""

    def test_load_image_passthrough(self):
        image = Image.new('RGBA', (2, 2))
        self.assertIs(ImageUtils.load_image(image), image)

    def test_load_image_bytes(self):
        buffer = io.BytesIO()
        Image.new('RGB', (3, 2), (1, 2, 3)).save(buffer, format='PNG')

        image = ImageUtils.load_image(buffer.getvalue())

        self.assertEqual(image.size, (3, 2))
        self.assertEqual(image.getpixel((0, 0)), (1, 2, 3))

    def test_load_image_errors(self):
        with self.assertRaises(ValueError):
            ImageUtils.load_image(b'nope')
        with self.assertRaises(ValueError):
            ImageUtils.load_image('/nonexistent/texture.png')
        with self.assertRaises(ValueError):
            ImageUtils.load_image(42)

    def test_ensure_supported_mode(self):
        rgb = Image.new('RGB', (1, 1))
        self.assertIs(ImageUtils.ensure_supported_mode(rgb), rgb)
        self.assertEqual(ImageUtils.ensure_supported_mode(Image.new('LA', (1, 1))).mode, 'RGBA')
        self.assertEqual(ImageUtils.ensure_supported_mode(Image.new('L', (1, 1))).mode, 'RGBA')

    def test_array_round_trip(self):
        pixels = np.arange(2 * 3 * 4, dtype=np.uint8).reshape(2, 3, 4)

        image = ImageUtils.from_array(pixels)

        self.assertEqual(image.mode, 'RGBA')
        self.assertEqual(image.size, (3, 2))
        np.testing.assert_array_equal(ImageUtils.to_array(image), pixels)

    def test_from_array_rgb(self):
        image = ImageUtils.from_array(np.zeros((4, 5, 3), dtype=np.uint8))
        self.assertEqual(image.mode, 'RGB')
        self.assertFalse(ImageUtils.has_alpha(image))

    def test_opaque_mask(self):
        pixels = np.array([[[0, 0, 0, 0], [0, 0, 0, 1]]], dtype=np.uint8)
        np.testing.assert_array_equal(ImageUtils.opaque_mask(pixels), [[False, True]])
        np.testing.assert_array_equal(
            ImageUtils.opaque_mask(np.zeros((1, 2, 3), dtype=np.uint8)), [[True, True]]
        )


if __name__ == '__main__':
    unittest.main()
