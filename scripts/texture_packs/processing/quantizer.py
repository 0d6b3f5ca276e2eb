"""
K-means color quantization and nearest-centroid lookup.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..errors import InvalidArgumentError

logger = logging.getLogger(__name__)

Color = Tuple[int, ...]

# Chance that an empty cluster is respawned at a random color instead of dropped
RESPAWN_PROBABILITY = 0.25


@dataclass
class QuantizerConfig:
    """Configuration for k-means quantization."""
    k: int = 4
    max_iterations: Optional[int] = None  # None runs until convergence
    seed: Optional[int] = None


def dist_sq(p1: Sequence[int], p2: Sequence[int]) -> int:
    """Squared Euclidean distance between the RGB parts of two colors."""
    dr = p1[0] - p2[0]
    dg = p1[1] - p2[1]
    db = p1[2] - p2[2]
    return dr * dr + dg * dg + db * db


def random_color(rng: random.Random) -> Color:
    """Draw a color with each channel uniform over 0-255."""
    return (rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255))


def closest(point: Sequence[int], palette: Sequence[Color]) -> Color:
    """
    Find the palette entry nearest to point.

    Args:
        point: Color to classify (only RGB is compared)
        palette: Candidate centroids, scanned in order

    Returns:
        The first palette entry with the minimum squared distance

    Raises:
        InvalidArgumentError: If palette is empty
    """
    if len(palette) == 0:
        raise InvalidArgumentError("Cannot classify a color against an empty palette")

    point = (int(point[0]), int(point[1]), int(point[2]))
    best = palette[0]
    best_dist = dist_sq(point, best)
    for candidate in palette[1:]:
        d = dist_sq(point, candidate)
        if d < best_dist:
            best_dist = d
            best = candidate
    return best


def _rgb_array(points) -> np.ndarray:
    """Signed (N, 3) copy of the RGB part of a color sequence."""
    arr = np.asarray(points, dtype=np.int64)
    if arr.size == 0:
        return np.empty((0, 3), dtype=np.int64)
    return arr.reshape(len(arr), -1)[:, :3]


def nearest_indices(points: Sequence[Sequence[int]], centroids: Sequence[Sequence[int]],
                    batch_size: int = 5000) -> np.ndarray:
    """
    Index of the nearest centroid for every point.

    Batched version of closest(): the same first-minimum rule, computed by
    broadcasting one block of points against all centroids at a time.

    Args:
        points: Colors of shape (N, C) with C >= 3
        centroids: Non-empty sequence of colors
        batch_size: Rows per distance block, bounding the (batch, k) temporary

    Returns:
        int array of shape (N,); ties go to the lowest index

    Raises:
        InvalidArgumentError: If centroids is empty
    """
    if len(centroids) == 0:
        raise InvalidArgumentError("Cannot classify colors against an empty palette")

    pts = _rgb_array(points)
    cents = _rgb_array(centroids)
    labels = np.empty(len(pts), dtype=np.intp)

    for start in range(0, len(pts), batch_size):
        batch = pts[start:start + batch_size]
        distances = ((batch[:, np.newaxis, :] - cents[np.newaxis, :, :]) ** 2).sum(axis=2)
        # argmin returns the first minimum
        labels[start:start + batch_size] = distances.argmin(axis=1)

    return labels


def calculate_centroid(points: Sequence[Sequence[int]], rng: random.Random) -> Optional[Color]:
    """
    Compute the truncated mean color of a cluster.

    An empty cluster has no mean: it is respawned at a random color with
    probability RESPAWN_PROBABILITY, otherwise None is returned and the
    cluster is dropped.
    """
    if len(points) == 0:
        if rng.random() < RESPAWN_PROBABILITY:
            return random_color(rng)
        return None

    # int64 sums so large uint8 populations cannot wrap
    totals = _rgb_array(points).sum(axis=0)
    r, g, b = (totals // len(points)).tolist()
    return (r, g, b)


def k_means(k: int, points: Sequence[Sequence[int]],
            rng: Optional[random.Random] = None,
            max_iterations: Optional[int] = None) -> List[Color]:
    """
    Cluster colors into at most k representative colors.

    Centroids start at random colors. Each iteration assigns every point to
    its nearest centroid, replaces each centroid by the mean of its cluster
    and applies the empty-cluster respawn/drop rule to clusters that got no
    points. The loop stops once an iteration reproduces the previous
    centroid sequence exactly. Because empty clusters may be dropped the
    result can hold fewer than k colors.

    Args:
        k: Number of clusters, at least 1
        points: Colors to cluster; only the first three channels are used
        rng: Random source for initialisation and the empty-cluster rule
        max_iterations: Optional cap on iterations; None loops until convergence

    Returns:
        Final centroid sequence

    Raises:
        InvalidArgumentError: If k < 1 or max_iterations < 1
    """
    if k < 1:
        raise InvalidArgumentError(f"k-means needs at least one cluster, got k={k}")
    if max_iterations is not None and max_iterations < 1:
        raise InvalidArgumentError(f"max_iterations must be positive, got {max_iterations}")

    rng = rng or random.Random()
    # Signed copy so uint8 input cannot wrap in the distance and sum arithmetic
    pts = _rgb_array(points)
    centroids = [random_color(rng) for _ in range(k)]
    iterations = 0

    while True:
        iterations += 1

        # With no centroids left nothing can be assigned; every bucket is empty
        if centroids:
            labels = nearest_indices(pts, centroids)
        else:
            labels = np.full(len(pts), -1, dtype=np.intp)

        new_centroids = []
        for j in range(k):
            centroid = calculate_centroid(pts[labels == j], rng)
            if centroid is not None:
                new_centroids.append(centroid)

        # An empty palette only counts as converged for an empty population
        if new_centroids == centroids and (centroids or len(pts) == 0):
            logger.debug(f"k-means converged after {iterations} iterations "
                         f"with {len(centroids)} centroids")
            return centroids

        centroids = new_centroids

        if max_iterations is not None and iterations >= max_iterations:
            logger.warning(f"k-means stopped after {iterations} iterations without converging "
                           f"({len(centroids)} centroids)")
            return centroids


class ColorQuantizer:
    """Learns a palette from an image's colors and maps pixels onto it."""

    def __init__(self, config: Optional[QuantizerConfig] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize quantizer.

        Args:
            config: Quantizer configuration
            rng: Random source; defaults to one seeded from config.seed
        """
        self.config = config or QuantizerConfig()
        if self.config.k < 1:
            raise InvalidArgumentError(f"k-means needs at least one cluster, got k={self.config.k}")
        self.rng = rng or random.Random(self.config.seed)
        self.palette: List[Color] = []

    def fit(self, points: Sequence[Sequence[int]]) -> List[Color]:
        """Run k-means over points and keep the resulting palette."""
        self.palette = k_means(self.config.k, points, self.rng, self.config.max_iterations)
        return self.palette

    def closest(self, point: Sequence[int]) -> Color:
        """Nearest palette color for point."""
        return closest(point, self.palette)

    def remap(self, pixels: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Replace the RGB of each pixel by its nearest palette color.

        Args:
            pixels: Array of shape (N, C) with C >= 3
            mask: Optional boolean array of shape (N,); only True rows are remapped

        Returns:
            New array with the same shape and dtype

        Raises:
            InvalidArgumentError: If rows are selected but the palette is empty
        """
        result = pixels.copy()
        rows = slice(None) if mask is None else np.asarray(mask, dtype=bool)
        selected = result[rows, :3]
        if len(selected) == 0:
            return result

        # Textures repeat colors heavily, classify each distinct one once
        colors, inverse = np.unique(selected, axis=0, return_inverse=True)
        palette = _rgb_array(self.palette)
        mapped = palette[nearest_indices(colors, palette)]
        result[rows, :3] = mapped[inverse.reshape(-1)].astype(result.dtype)

        return result
