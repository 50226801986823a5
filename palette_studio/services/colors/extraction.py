"""
Palette extraction for decoded bitmaps.

This module implements the fixed-grid quantization heuristic used to pick
representative colors: sample the bitmap on a regular grid, drop
near-transparent samples, group the rest into coarse color buckets, rank the
buckets by frequency and read each winner's color back from the first pixel
that landed in it.
"""

import numbers
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from loguru import logger

from palette_studio.config import config
from palette_studio.errors import InvalidBitmap, InvalidSampleStride
from palette_studio.schemas import Swatch, SwatchFields
from palette_studio.utils.ids import generate_swatch_id
from ..observability import performance_monitor
from .bitmap import Bitmap, get_pixel


@dataclass
class QuantizationBucket:
    """Frequency and first sampled coordinate of one quantized color."""
    key: int
    count: int
    x: int
    y: int

    @property
    def quantized_rgb(self) -> tuple:
        return ((self.key >> 16) & 0xFF, (self.key >> 8) & 0xFF, self.key & 0xFF)


def default_sample_stride(width: int, height: int, divisor: Optional[int] = None) -> int:
    """Grid step used when the caller does not pick one: max(1, min(w, h) // 50)."""
    divisor = config.STRIDE_DIVISOR if divisor is None else divisor
    if divisor < 1:
        raise ValueError(f"Stride divisor must be at least 1, got {divisor}")
    return max(1, min(width, height) // divisor)


def quantize_keys(rgb: np.ndarray, bucket_width: int) -> np.ndarray:
    """
    Pack quantized RGB triples into integer bucket keys.

    Args:
        rgb: (N, 3) channel values
        bucket_width: Channel step; each channel becomes (c // w) * w

    Returns:
        (N,) int64 keys laid out as 0xRRGGBB
    """
    q = (rgb.astype(np.int64) // bucket_width) * bucket_width
    return (q[:, 0] << 16) | (q[:, 1] << 8) | q[:, 2]


def rank_buckets(bitmap: Bitmap, sample_stride: int,
                 bucket_width: Optional[int] = None,
                 alpha_threshold: Optional[int] = None) -> List[QuantizationBucket]:
    """
    Sample the bitmap on a grid and rank quantization buckets by hit count.

    Samples are visited row by row. Each bucket remembers the first sampled
    coordinate that fell into it. Buckets with equal counts keep the order in
    which they were first encountered.

    Returns:
        Buckets ordered by count descending
    """
    bucket_width = config.BUCKET_WIDTH if bucket_width is None else bucket_width
    if not config.validate_bucket_width(bucket_width):
        raise ValueError(f"Invalid bucket width: {bucket_width}")
    alpha_threshold = config.ALPHA_THRESHOLD if alpha_threshold is None else alpha_threshold

    grid = bitmap.pixels[::sample_stride, ::sample_stride]
    grid_width = grid.shape[1]
    samples = grid.reshape(-1, 4)

    opaque = samples[:, 3] >= alpha_threshold
    sample_index = np.flatnonzero(opaque)
    logger.debug(f"Sampled {samples.shape[0]} grid pixels, {sample_index.size} opaque "
                 f"(stride={sample_stride})")
    if sample_index.size == 0:
        return []

    keys = quantize_keys(samples[opaque, :3], bucket_width)
    unique_keys, first_seen, counts = np.unique(keys, return_index=True, return_counts=True)

    # Primary: count descending, secondary: first encounter ascending
    ranking = np.lexsort((first_seen, -counts))

    buckets = []
    for i in ranking:
        grid_y, grid_x = divmod(int(sample_index[first_seen[i]]), grid_width)
        buckets.append(QuantizationBucket(
            key=int(unique_keys[i]),
            count=int(counts[i]),
            x=grid_x * sample_stride,
            y=grid_y * sample_stride
        ))
    return buckets


def swatch_at(bitmap: Bitmap, x: int, y: int) -> Swatch:
    """Build a new swatch from the authentic pixel at (x, y)."""
    pixel = get_pixel(bitmap, x, y)
    return SwatchFields.from_rgb(x, y, pixel.r, pixel.g, pixel.b).assign(generate_swatch_id())


def extract_palette(bitmap: Bitmap,
                    sample_stride: Optional[int] = None,
                    max_colors: Optional[int] = None,
                    rng: Optional[np.random.Generator] = None) -> List[Swatch]:
    """
    Extract a ranked palette of exactly ``max_colors`` swatches.

    Args:
        bitmap: Decoded bitmap to sample
        sample_stride: Grid step in both axes (defaults to default_sample_stride)
        max_colors: Number of swatches to return (defaults to config.MAX_COLORS)
        rng: Random source for padding; defaults to a generator seeded
            with config.RNG_SEED

    Returns:
        Swatches from the most frequent buckets, padded with randomly placed
        swatches when fewer buckets than ``max_colors`` were found

    Raises:
        InvalidBitmap: if ``bitmap`` is not a usable Bitmap
        InvalidSampleStride: if the stride is not an integer >= 1
        ValueError: if max_colors is not an integer >= 1
    """
    if not isinstance(bitmap, Bitmap):
        raise InvalidBitmap(f"Expected a Bitmap, got {type(bitmap).__name__}")

    if sample_stride is None:
        sample_stride = default_sample_stride(bitmap.width, bitmap.height)
    elif isinstance(sample_stride, bool) or not isinstance(sample_stride, numbers.Integral) or sample_stride < 1:
        raise InvalidSampleStride(f"Sample stride must be an integer >= 1, got {sample_stride!r}")
    sample_stride = int(sample_stride)

    max_colors = config.MAX_COLORS if max_colors is None else max_colors
    if isinstance(max_colors, bool) or not isinstance(max_colors, numbers.Integral) or max_colors < 1:
        raise ValueError(f"max_colors must be an integer >= 1, got {max_colors!r}")
    max_colors = int(max_colors)

    if rng is None:
        rng = np.random.default_rng(config.RNG_SEED)

    with performance_monitor("palette_extraction", width=bitmap.width, height=bitmap.height,
                             sample_stride=sample_stride, max_colors=max_colors):
        buckets = rank_buckets(bitmap, sample_stride)
        palette = [swatch_at(bitmap, bucket.x, bucket.y) for bucket in buckets[:max_colors]]

        padded = 0
        while len(palette) < max_colors:
            x = int(rng.integers(0, bitmap.width))
            y = int(rng.integers(0, bitmap.height))
            palette.append(swatch_at(bitmap, x, y))
            padded += 1

    if padded:
        logger.info(f"Only {len(buckets)} color buckets found, padded palette with {padded} random samples")
    logger.info(f"Extracted {len(palette)} colors from {bitmap!r}: {[s.color for s in palette]}")
    return palette
