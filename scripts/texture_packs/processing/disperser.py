"""
Bit-depth reduction with Floyd-Steinberg style error diffusion.
"""

import logging
from typing import Sequence, Tuple

import numpy as np

from ..errors import InvalidArgumentError

logger = logging.getLogger(__name__)

# Red and green snap to multiples of 32, blue to multiples of 64, alpha is kept
CHANNEL_STEPS: Tuple[int, ...] = (32, 32, 64, 1)

# (dx, dy, numerator, denominator); every target lies later in row-major order
FLOYD_STEINBERG: Tuple[Tuple[int, int, int, int], ...] = (
    (1, 0, 7, 16),
    (-1, 1, 3, 16),
    (0, 1, 5, 16),
    (1, 1, 1, 16),
)


def _trunc_div(value: int, divisor: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(value) // divisor
    return q if value >= 0 else -q


def reduce_color(color: Sequence[int], steps: Sequence[int] = CHANNEL_STEPS) -> Tuple[int, ...]:
    """Truncate each channel to a multiple of its step."""
    return tuple(_trunc_div(int(c), step) * step for c, step in zip(color, steps))


def posterize(pixels: np.ndarray, steps: Sequence[int] = CHANNEL_STEPS) -> np.ndarray:
    """
    Snap every pixel to the reduced channel grid without error diffusion.

    Args:
        pixels: uint8 array of shape (height, width, channels)

    Returns:
        New uint8 array of the same shape
    """
    _check_channels(pixels)
    channels = pixels.shape[-1]
    step = np.array(steps[:channels], dtype=np.uint8)
    return (pixels // step) * step


def dither_reduce(pixels: np.ndarray, steps: Sequence[int] = CHANNEL_STEPS,
                  weights: Sequence[Tuple[int, int, int, int]] = FLOYD_STEINBERG) -> np.ndarray:
    """
    Reduce channel depth while diffusing the rounding error to unvisited neighbours.

    Pixels are visited left to right, top to bottom on a signed working copy.
    Each pixel is snapped to its channel grid and the difference is pushed to
    the neighbours in weights, truncating each term separately. Targets outside
    the image are skipped. Channels are clamped to 0-255 once all pixels are
    done.

    Args:
        pixels: uint8 array of shape (height, width, channels), 3 or 4 channels
        steps: Per-channel grid step
        weights: Diffusion table of (dx, dy, numerator, denominator)

    Returns:
        New uint8 array of the same shape
    """
    _check_channels(pixels)
    height, width, channels = pixels.shape
    steps = tuple(steps[:channels])
    work = pixels.astype(np.int32).tolist()

    for y in range(height):
        row = work[y]
        for x in range(width):
            old = row[x]
            new = list(reduce_color(old, steps))
            error = [o - n for o, n in zip(old, new)]
            row[x] = new

            if not any(error):
                continue

            for dx, dy, numerator, denominator in weights:
                nx = x + dx
                ny = y + dy
                if nx < 0 or nx >= width or ny >= height:
                    continue
                target = work[ny][nx]
                for c in range(channels):
                    target[c] += _trunc_div(error[c] * numerator, denominator)

    return np.clip(np.array(work, dtype=np.int32).reshape(pixels.shape), 0, 255).astype(np.uint8)


class ErrorDiffusionDisperser:
    """Error-diffusion color reducer with a fixed step grid and weight table."""

    def __init__(self, steps: Sequence[int] = CHANNEL_STEPS,
                 weights: Sequence[Tuple[int, int, int, int]] = FLOYD_STEINBERG):
        self.steps = tuple(steps)
        self.weights = tuple(weights)

    def reduce(self, pixels: np.ndarray) -> np.ndarray:
        logger.debug(f"Dithering {pixels.shape[1]}x{pixels.shape[0]} pixel grid")
        return dither_reduce(pixels, self.steps, self.weights)

    def posterize(self, pixels: np.ndarray) -> np.ndarray:
        return posterize(pixels, self.steps)


def _check_channels(pixels: np.ndarray) -> None:
    if pixels.ndim != 3 or pixels.shape[-1] not in (3, 4):
        raise InvalidArgumentError(
            f"Expected a (height, width, 3|4) pixel array, got shape {pixels.shape}"
        )
