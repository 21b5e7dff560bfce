"""
Tests for pixel metric extraction.
"""

import numpy as np
import pytest

from bill_quality.exceptions import MetricExtractionError
from bill_quality.schemas.metrics import PixelBuffer
from bill_quality.stages.extraction import extract_raw_metrics
from bill_quality.utils.pixels import (
    compute_blur_score,
    compute_brightness,
    compute_contrast,
    extract_pixel_metrics,
    sample_luminance,
)
from bill_quality.utils.resolution import compute_megapixels, format_file_size, normalize_file_size


def test_uniform_gray_metrics(uniform_buffer):
    """Flat gray has mid brightness, no contrast and no edge energy."""
    buffer = uniform_buffer(100, 100, rgba=(128, 128, 128, 255))
    brightness, contrast, blur = extract_pixel_metrics(buffer.data, buffer.width, buffer.height)

    assert brightness == pytest.approx(128 / 255)
    assert contrast == pytest.approx(0.0, abs=1e-9)
    assert blur == pytest.approx(0.0, abs=1e-9)


def test_luminance_weights(uniform_buffer):
    """Pure channels are weighted 0.299 / 0.587 / 0.114."""
    red = uniform_buffer(8, 8, rgba=(255, 0, 0, 255))
    green = uniform_buffer(8, 8, rgba=(0, 255, 0, 255))
    blue = uniform_buffer(8, 8, rgba=(0, 0, 255, 255))

    assert compute_brightness(sample_luminance(red.data)) == pytest.approx(0.299)
    assert compute_brightness(sample_luminance(green.data)) == pytest.approx(0.587)
    assert compute_brightness(sample_luminance(blue.data)) == pytest.approx(0.114)


def test_alpha_is_ignored(uniform_buffer):
    opaque = uniform_buffer(16, 16, rgba=(200, 100, 50, 255))
    transparent = uniform_buffer(16, 16, rgba=(200, 100, 50, 0))

    assert extract_pixel_metrics(opaque.data, 16, 16) == extract_pixel_metrics(transparent.data, 16, 16)


def test_white_brightness_stays_in_range(uniform_buffer):
    buffer = uniform_buffer(32, 32, rgba=(255, 255, 255, 255))
    brightness, _, _ = extract_pixel_metrics(buffer.data, 32, 32)
    assert 0.0 <= brightness <= 1.0
    assert brightness == pytest.approx(1.0)


def test_striped_metrics(striped_buffer):
    """Alternating 64/192 rows: mean 128, stddev 64, Laplacian response 256."""
    buffer = striped_buffer(200, 100)
    brightness, contrast, blur = extract_pixel_metrics(buffer.data, buffer.width, buffer.height)

    assert brightness == pytest.approx(128 / 255)
    assert contrast == pytest.approx(0.5)
    assert blur == pytest.approx(256.0 ** 2)


def test_sampling_uses_every_fourth_pixel():
    """Only pixels 0, 4, 8, ... of the flattened image are sampled."""
    pixels = np.zeros((1, 8, 4), dtype=np.uint8)
    pixels[0, 0, :3] = 255
    pixels[0, 4, :3] = 255
    pixels[0, 1:4, :3] = 0
    pixels[0, 5:8, :3] = 0

    samples = sample_luminance(pixels.tobytes())

    assert samples.size == 2
    assert compute_brightness(samples) == pytest.approx(1.0)


def test_contrast_saturates_at_one():
    """A stddev of 128 or more maps to 1.0."""
    samples = np.array([0.0, 255.0] * 10)  # stddev 127.5
    assert compute_contrast(samples) == pytest.approx(127.5 / 128)

    wide = np.array([-200.0, 200.0] * 10)  # stddev 200
    assert compute_contrast(wide) == 1.0


def test_empty_samples_are_zero():
    empty = np.array([], dtype=np.float64)
    assert compute_brightness(empty) == 0.0
    assert compute_contrast(empty) == 0.0


def test_zero_sized_buffer():
    buffer = PixelBuffer(data=b"", width=0, height=0)
    assert extract_pixel_metrics(buffer.data, 0, 0) == (0.0, 0.0, 0.0)


def test_blur_score_zero_for_tiny_images(striped_buffer):
    """No Laplacian sample fits inside the 10px margins of a 20x20 image."""
    small = striped_buffer(20, 20)
    assert compute_blur_score(small.data, 20, 20) == 0.0

    wide_but_short = striped_buffer(500, 15)
    assert compute_blur_score(wide_but_short.data, 500, 15) == 0.0


def test_blur_score_first_sample_at_margin(striped_buffer):
    """A 21x21 image has exactly one sample, at (10, 10)."""
    buffer = striped_buffer(21, 21)
    assert compute_blur_score(buffer.data, 21, 21) == pytest.approx(256.0 ** 2)


def test_blur_score_ignores_edges():
    """Detail confined to the 10px border does not register."""
    pixels = np.full((60, 60, 4), 128, dtype=np.uint8)
    pixels[:9, :, :3] = 0
    pixels[-9:, :, :3] = 255
    assert compute_blur_score(pixels.tobytes(), 60, 60) == pytest.approx(0.0, abs=1e-9)


def test_smooth_gradient_is_blurry():
    """A linear ramp has near-zero second derivative."""
    ramp = np.linspace(0, 255, 200).astype(np.uint8)
    pixels = np.empty((200, 200, 4), dtype=np.uint8)
    pixels[:, :, :3] = ramp[:, None, None]
    pixels[:, :, 3] = 255

    brightness, contrast, blur = extract_pixel_metrics(pixels.tobytes(), 200, 200)

    assert blur < 100
    assert contrast > 0.3
    assert 0.3 < brightness < 0.7


def test_extraction_is_deterministic(striped_buffer):
    buffer = striped_buffer(321, 123)
    first = extract_raw_metrics(buffer)
    second = extract_raw_metrics(buffer)
    assert first == second


def test_raw_metrics_use_source_dimensions(uniform_buffer):
    """Resolution is judged on the original capture, not the analysis buffer."""
    buffer = uniform_buffer(64, 48)
    downsampled = buffer.model_copy(update={"source_width": 4000, "source_height": 3000})

    metrics = extract_raw_metrics(downsampled)

    assert metrics.width == 4000
    assert metrics.height == 3000
    assert metrics.megapixels == pytest.approx(12.0)


def test_raw_metrics_carry_file_size(uniform_buffer):
    assert extract_raw_metrics(uniform_buffer(10, 10, file_size_bytes=1234)).file_size_bytes == 1234
    assert extract_raw_metrics(uniform_buffer(10, 10)).file_size_bytes is None


def test_extraction_errors_are_wrapped(uniform_buffer, monkeypatch):
    def broken(*args):
        raise ValueError("bad reshape")

    monkeypatch.setattr("bill_quality.stages.extraction.extract_pixel_metrics", broken)

    with pytest.raises(MetricExtractionError, match="bad reshape"):
        extract_raw_metrics(uniform_buffer(10, 10))


def test_pixel_buffer_rejects_wrong_length():
    with pytest.raises(ValueError, match="does not match"):
        PixelBuffer(data=b"\x00" * 10, width=2, height=2)


def test_megapixels():
    assert compute_megapixels(1920, 1080) == pytest.approx(2.0736)
    assert compute_megapixels(640, 480) == pytest.approx(0.3072)
    assert compute_megapixels(0, 480) == 0.0


def test_normalize_file_size():
    assert normalize_file_size(None) is None
    assert normalize_file_size(-1) is None
    assert normalize_file_size(2048) == 2048


def test_format_file_size():
    assert format_file_size(512) == "512B"
    assert format_file_size(40_000) == "39KB"
    assert format_file_size(12_000_000) == "11.4MB"
