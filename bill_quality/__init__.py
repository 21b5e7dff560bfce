"""
Bill Image Quality Engine
"""

__version__ = "1.0.0"
__description__ = "Deterministic quality scoring for captured bill photos"

from bill_quality.main import QualityAssessor, assess_image, assess_images_batch, evaluate_metrics
from bill_quality.schemas.metrics import PixelBuffer, RawMetrics
from bill_quality.schemas.output import QualityResult
from bill_quality.schemas.thresholds import ThresholdConfig

__all__ = [
    "QualityAssessor",
    "assess_image",
    "assess_images_batch",
    "evaluate_metrics",
    "PixelBuffer",
    "RawMetrics",
    "QualityResult",
    "ThresholdConfig",
]
