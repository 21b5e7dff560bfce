"""
Metric Extraction Stage
Computes raw brightness, contrast, sharpness, resolution and file size
signals from an acquired pixel buffer.
"""

from bill_quality.exceptions import MetricExtractionError
from bill_quality.schemas.metrics import PixelBuffer, RawMetrics
from bill_quality.state import AssessmentStage, AssessmentState
from bill_quality.utils.logging import setup_logging, log_stage_action
from bill_quality.utils.pixels import extract_pixel_metrics
from bill_quality.utils.resolution import compute_megapixels, normalize_file_size


logger = setup_logging(__name__)


def extract_raw_metrics(buffer: PixelBuffer) -> RawMetrics:
    """
    Extract every raw signal from a buffer.

    Raises:
        MetricExtractionError: if the numeric stage fails on this buffer.
    """
    try:
        brightness, contrast, blur_score = extract_pixel_metrics(buffer.data, buffer.width, buffer.height)
    except (ValueError, TypeError) as e:
        raise MetricExtractionError(f"Pixel metric extraction failed: {e}") from e

    width = buffer.resolution_width
    height = buffer.resolution_height
    return RawMetrics(
        brightness=brightness,
        contrast=contrast,
        blur_score=blur_score,
        width=width,
        height=height,
        megapixels=compute_megapixels(width, height),
        file_size_bytes=normalize_file_size(buffer.file_size_bytes),
    )


async def extraction_stage(state: AssessmentState) -> dict:
    """
    Extraction node.

    Updates state:
    - raw_metrics, stage -> METRICS_EXTRACTED on success
    - error, failed_stage on failure
    """
    try:
        if state.pixel_buffer is None:
            raise MetricExtractionError("No pixel buffer available")
        metrics = extract_raw_metrics(state.pixel_buffer)
    except MetricExtractionError as e:
        logger.error(f"[ExtractionStage] {e}")
        return {
            "error": str(e),
            "failed_stage": "extraction",
            "stage_log": state.log_entry("ExtractionStage", f"Extraction failed: {e}"),
        }

    log_stage_action(
        logger,
        "ExtractionStage",
        "Metrics extracted",
        details={
            "brightness": round(metrics.brightness, 4),
            "contrast": round(metrics.contrast, 4),
            "blur_score": round(metrics.blur_score, 2),
            "megapixels": round(metrics.megapixels, 2),
        },
    )

    return {
        "raw_metrics": metrics,
        "stage": AssessmentStage.METRICS_EXTRACTED,
        "stage_log": state.log_entry(
            "ExtractionStage",
            f"brightness={metrics.brightness:.3f} contrast={metrics.contrast:.3f} blur={metrics.blur_score:.1f}",
        ),
    }
