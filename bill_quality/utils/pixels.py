"""
Pixel-level metric extraction.

All metrics are computed on a flat RGBA8 buffer with numpy; no per-pixel
Python objects are created. Results depend only on the buffer contents, so
the same buffer always produces the same numbers.
"""

from typing import Tuple

import numpy as np

from bill_quality.schemas.metrics import BYTES_PER_PIXEL
from bill_quality.utils import clamp


# ITU-R BT.601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

# Brightness/contrast use every 4th pixel of the flattened image
LUMINANCE_SAMPLE_STRIDE = 4

# Laplacian is evaluated on a 10px grid, never closer than 10px to an edge
LAPLACIAN_GRID_STRIDE = 10
LAPLACIAN_EDGE_MARGIN = 10

# A luminance stddev of 128 (on the 0-255 scale) maps to contrast 1.0
CONTRAST_NORMALIZER = 128.0


def _as_pixels(data: bytes) -> np.ndarray:
    """View the buffer as an (n, 4) uint8 array without copying."""
    flat = np.frombuffer(data, dtype=np.uint8)
    usable = len(flat) - len(flat) % BYTES_PER_PIXEL
    return flat[:usable].reshape(-1, BYTES_PER_PIXEL)


def _luminance(pixels: np.ndarray) -> np.ndarray:
    """Luminance on the 0-255 scale for an (n, 4) RGBA array."""
    rgb = pixels[:, :3].astype(np.float64)
    return rgb[:, 0] * LUMA_R + rgb[:, 1] * LUMA_G + rgb[:, 2] * LUMA_B


def sample_luminance(data: bytes) -> np.ndarray:
    """Luminance (0-255) of every LUMINANCE_SAMPLE_STRIDE-th pixel."""
    pixels = _as_pixels(data)[::LUMINANCE_SAMPLE_STRIDE]
    return _luminance(pixels)


def compute_brightness(samples: np.ndarray) -> float:
    """Mean relative luminance in [0, 1]; 0 when nothing was sampled."""
    if samples.size == 0:
        return 0.0
    return clamp(float(samples.mean()) / 255.0, 0.0, 1.0)


def compute_contrast(samples: np.ndarray) -> float:
    """Population stddev of luminance, normalised by 128 and clamped to [0, 1]."""
    if samples.size == 0:
        return 0.0
    return clamp(float(samples.std()) / CONTRAST_NORMALIZER, 0.0, 1.0)


def compute_blur_score(data: bytes, width: int, height: int) -> float:
    """
    Mean squared response of the 3x3 Laplacian kernel

        [[0,  1, 0],
         [1, -4, 1],
         [0,  1, 0]]

    sampled on a coarse grid over the grayscale image. Higher is sharper.
    Returns 0 when the grid is empty (images of roughly 20x20 or smaller).
    """
    if width <= 0 or height <= 0:
        return 0.0

    ys = np.arange(LAPLACIAN_EDGE_MARGIN, height - LAPLACIAN_EDGE_MARGIN, LAPLACIAN_GRID_STRIDE)
    xs = np.arange(LAPLACIAN_EDGE_MARGIN, width - LAPLACIAN_EDGE_MARGIN, LAPLACIAN_GRID_STRIDE)
    if ys.size == 0 or xs.size == 0:
        return 0.0

    gray = _luminance(_as_pixels(data)).reshape(height, width)

    center = gray[np.ix_(ys, xs)]
    laplacian = (
        gray[np.ix_(ys - 1, xs)]
        + gray[np.ix_(ys + 1, xs)]
        + gray[np.ix_(ys, xs - 1)]
        + gray[np.ix_(ys, xs + 1)]
        - 4.0 * center
    )
    return float(np.mean(laplacian ** 2))


def extract_pixel_metrics(data: bytes, width: int, height: int) -> Tuple[float, float, float]:
    """
    Compute the raw pixel signals for an RGBA8 buffer.

    Args:
        data: Row-major RGBA bytes, `width * height * 4` long
        width: Buffer width in pixels
        height: Buffer height in pixels

    Returns:
        (brightness, contrast, blur_score)
    """
    samples = sample_luminance(data)
    return (
        compute_brightness(samples),
        compute_contrast(samples),
        compute_blur_score(data, width, height),
    )
