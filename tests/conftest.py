"""
Shared fixtures: synthetic RGBA buffers and image files.
"""

import numpy as np
import pytest
from PIL import Image

from bill_quality.schemas.metrics import PixelBuffer, RawMetrics


def uniform_pixels(width: int, height: int, rgba=(128, 128, 128, 255)) -> np.ndarray:
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :] = rgba
    return pixels


def striped_pixels(width: int, height: int, low: int = 64, high: int = 192) -> np.ndarray:
    """Horizontal one-pixel stripes: even rows `low`, odd rows `high`."""
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[0::2, :, :3] = low
    pixels[1::2, :, :3] = high
    pixels[:, :, 3] = 255
    return pixels


def to_buffer(pixels: np.ndarray, file_size_bytes: int = None) -> PixelBuffer:
    height, width = pixels.shape[:2]
    return PixelBuffer(
        data=pixels.tobytes(),
        width=width,
        height=height,
        file_size_bytes=file_size_bytes,
    )


@pytest.fixture
def uniform_array():
    return uniform_pixels


@pytest.fixture
def striped_array():
    return striped_pixels


@pytest.fixture
def uniform_buffer():
    """Factory for flat-colour buffers."""
    def factory(width=100, height=100, rgba=(128, 128, 128, 255), file_size_bytes=None):
        return to_buffer(uniform_pixels(width, height, rgba), file_size_bytes)
    return factory


@pytest.fixture
def striped_buffer():
    """Factory for high-contrast, sharp striped buffers."""
    def factory(width=1920, height=1080, low=64, high=192, file_size_bytes=2_000_000):
        return to_buffer(striped_pixels(width, height, low, high), file_size_bytes)
    return factory


@pytest.fixture
def good_metrics():
    """Metrics that classify as good on every dimension."""
    return RawMetrics(
        brightness=0.5,
        contrast=0.4,
        blur_score=350.0,
        width=1920,
        height=1080,
        megapixels=1920 * 1080 / 1_000_000,
        file_size_bytes=2_000_000,
    )


@pytest.fixture
def image_file(tmp_path):
    """Factory writing a PNG to tmp_path and returning its path."""
    def factory(pixels: np.ndarray, name: str = "bill.png"):
        path = tmp_path / name
        Image.fromarray(pixels).save(path)
        return path
    return factory
