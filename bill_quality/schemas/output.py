"""
Output schemas for quality assessment results.
Defines the JSON payload handed to downstream consumers.
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Dimension(str, Enum):
    """Evaluated quality dimensions, in evaluation order."""
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    SHARPNESS = "sharpness"
    RESOLUTION = "resolution"
    FILE_SIZE = "file_size"


MANDATORY_DIMENSIONS = (
    Dimension.BRIGHTNESS,
    Dimension.CONTRAST,
    Dimension.SHARPNESS,
    Dimension.RESOLUTION,
)


class MetricStatus(str, Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Bound(str, Enum):
    """Which side of the acceptable range a poor value fell on."""
    LOW = "low"
    HIGH = "high"


class QualityGrade(str, Enum):
    """Badge shown next to the score."""
    EXCELLENT = "excellent"  # 90-100
    GOOD = "good"  # 70-89
    FAIR = "fair"  # 50-69
    POOR = "poor"  # 0-49


class MetricClassification(BaseModel):
    """Classification of a single dimension."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    status: MetricStatus
    message: str
    raw_value: float
    bound: Optional[Bound] = Field(default=None, exclude=True)


class QualityClassifications(BaseModel):
    """Per-dimension classifications. `file_size` is present only when a size was known."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    brightness: MetricClassification
    contrast: MetricClassification
    sharpness: MetricClassification
    resolution: MetricClassification
    file_size: Optional[MetricClassification] = None

    def items(self) -> Iterator[Tuple[Dimension, MetricClassification]]:
        """Yield (dimension, classification) pairs in evaluation order, skipping absent ones."""
        for dimension in Dimension:
            classification = getattr(self, dimension.value)
            if classification is not None:
                yield dimension, classification


RESULT_EXAMPLE = {
    "example": {
        "isValid": True,
        "score": 82,
        "grade": "good",
        "feedback": "Good image quality. Your bill should process well.",
        "details": {
            "brightness": {"status": "good", "message": "Good lighting", "rawValue": 0.52},
            "contrast": {"status": "good", "message": "Good contrast", "rawValue": 0.41},
            "sharpness": {"status": "fair", "message": "Image could be sharper", "rawValue": 212.4},
            "resolution": {"status": "good", "message": "High resolution (2.1MP)", "rawValue": 2.07},
        },
        "issues": [],
        "suggestions": []
    }
}


class QualityResult(BaseModel):
    """Final quality verdict for one image."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra=RESULT_EXAMPLE,
    )

    is_valid: bool
    score: int = Field(ge=0, le=100)
    grade: QualityGrade
    feedback: str
    classifications: QualityClassifications = Field(alias="details")
    issues: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    def to_payload(self) -> Dict:
        """JSON-compatible dict with camelCase keys; `fileSize` omitted when absent."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
