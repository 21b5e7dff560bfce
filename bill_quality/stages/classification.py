"""
Threshold Classification Stage
Maps each raw metric onto good / fair / poor using the threshold table.
"""

from typing import Optional, Tuple

from bill_quality.schemas.metrics import RawMetrics
from bill_quality.schemas.output import (
    Bound,
    Dimension,
    MetricClassification,
    MetricStatus,
    QualityClassifications,
)
from bill_quality.schemas.thresholds import ThresholdConfig, ThresholdRange
from bill_quality.state import AssessmentStage, AssessmentState
from bill_quality.utils.logging import setup_logging, log_stage_action
from bill_quality.utils.resolution import format_file_size, format_megapixels


logger = setup_logging(__name__)


# Message templates keyed by (dimension, status, bound). `{value}` is the
# formatted raw value for dimensions whose messages quote it.
MESSAGES = {
    (Dimension.BRIGHTNESS, MetricStatus.POOR, Bound.LOW): "Image is too dark",
    (Dimension.BRIGHTNESS, MetricStatus.POOR, Bound.HIGH): "Image is too bright",
    (Dimension.BRIGHTNESS, MetricStatus.FAIR, None): "Lighting could be better",
    (Dimension.BRIGHTNESS, MetricStatus.GOOD, None): "Good lighting",
    (Dimension.CONTRAST, MetricStatus.POOR, Bound.LOW): "Image has low contrast",
    (Dimension.CONTRAST, MetricStatus.POOR, Bound.HIGH): "Contrast is too high",
    (Dimension.CONTRAST, MetricStatus.FAIR, None): "Contrast could be better",
    (Dimension.CONTRAST, MetricStatus.GOOD, None): "Good contrast",
    (Dimension.SHARPNESS, MetricStatus.POOR, Bound.LOW): "Image is too blurry",
    (Dimension.SHARPNESS, MetricStatus.POOR, Bound.HIGH): "Image is oversharpened",
    (Dimension.SHARPNESS, MetricStatus.FAIR, None): "Image could be sharper",
    (Dimension.SHARPNESS, MetricStatus.GOOD, None): "Image is sharp",
    (Dimension.RESOLUTION, MetricStatus.POOR, Bound.LOW): "Resolution too low ({value})",
    (Dimension.RESOLUTION, MetricStatus.POOR, Bound.HIGH): "Resolution too high ({value})",
    (Dimension.RESOLUTION, MetricStatus.FAIR, None): "Acceptable resolution ({value})",
    (Dimension.RESOLUTION, MetricStatus.GOOD, None): "High resolution ({value})",
    (Dimension.FILE_SIZE, MetricStatus.POOR, Bound.LOW): "File size too small ({value})",
    (Dimension.FILE_SIZE, MetricStatus.POOR, Bound.HIGH): "File size too large ({value})",
    (Dimension.FILE_SIZE, MetricStatus.FAIR, None): "Acceptable file size ({value})",
    (Dimension.FILE_SIZE, MetricStatus.GOOD, None): "Good file size ({value})",
}


def threshold_range_for(dimension: Dimension, config: ThresholdConfig) -> ThresholdRange:
    """Look up the threshold row for a dimension."""
    return getattr(config, f"{dimension.value}_range")


def evaluate_range(value: float, bounds: ThresholdRange) -> Tuple[MetricStatus, Optional[Bound]]:
    """
    Place a value against a threshold row.

    Poor bounds are strict (`value < min`, `value > max`); the optimal range
    is inclusive on both ends.
    """
    if value < bounds.min:
        return MetricStatus.POOR, Bound.LOW
    if bounds.max is not None and value > bounds.max:
        return MetricStatus.POOR, Bound.HIGH
    if value >= bounds.optimal_min and (bounds.optimal_max is None or value <= bounds.optimal_max):
        return MetricStatus.GOOD, None
    return MetricStatus.FAIR, None


def format_value(dimension: Dimension, value: float) -> str:
    if dimension == Dimension.RESOLUTION:
        return format_megapixels(value)
    if dimension == Dimension.FILE_SIZE:
        return format_file_size(value)
    return f"{value:.2f}"


def classify(dimension: Dimension, raw_value: float, config: ThresholdConfig) -> MetricClassification:
    """
    Classify one raw metric.

    Args:
        dimension: Which dimension the value belongs to
        raw_value: Brightness/contrast in [0, 1], blur score, megapixels or bytes
        config: Threshold table

    Returns:
        MetricClassification with a fixed message for the outcome
    """
    status, bound = evaluate_range(raw_value, threshold_range_for(dimension, config))
    template = MESSAGES[(dimension, status, bound)]
    return MetricClassification(
        status=status,
        message=template.format(value=format_value(dimension, raw_value)),
        raw_value=raw_value,
        bound=bound,
    )


def classify_metrics(raw_metrics: RawMetrics, config: ThresholdConfig) -> QualityClassifications:
    """Classify every available dimension of a RawMetrics set."""
    file_size = None
    if raw_metrics.file_size_bytes is not None:
        file_size = classify(Dimension.FILE_SIZE, raw_metrics.file_size_bytes, config)

    return QualityClassifications(
        brightness=classify(Dimension.BRIGHTNESS, raw_metrics.brightness, config),
        contrast=classify(Dimension.CONTRAST, raw_metrics.contrast, config),
        sharpness=classify(Dimension.SHARPNESS, raw_metrics.blur_score, config),
        resolution=classify(Dimension.RESOLUTION, raw_metrics.megapixels, config),
        file_size=file_size,
    )


async def classification_stage(state: AssessmentState, config: ThresholdConfig) -> dict:
    """
    Classification node.

    Updates state:
    - classifications
    - stage -> CLASSIFIED
    """
    classifications = classify_metrics(state.raw_metrics, config)

    statuses = {dimension.value: c.status.value for dimension, c in classifications.items()}
    log_stage_action(logger, "ClassificationStage", "Metrics classified", details=statuses)

    return {
        "classifications": classifications,
        "stage": AssessmentStage.CLASSIFIED,
        "stage_log": state.log_entry("ClassificationStage", f"Classified {len(statuses)} dimensions"),
    }
