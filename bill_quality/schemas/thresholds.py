"""
Threshold and weight tables used to classify and score metrics.
"""

import json
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from bill_quality.schemas.output import MANDATORY_DIMENSIONS
from bill_quality.utils.logging import setup_logging


logger = setup_logging(__name__)


class ThresholdRange(BaseModel):
    """
    Classification bounds for one dimension.

    Values below `min` (or above `max`, when set) are poor. Values inside
    [`optimal_min`, `optimal_max`] are good. Anything else is fair.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    min: float
    max: Optional[float] = None
    optimal_min: float
    optimal_max: Optional[float] = None

    @model_validator(mode="after")
    def check_ordering(self) -> "ThresholdRange":
        if self.optimal_min < self.min:
            raise ValueError(f"optimal_min ({self.optimal_min}) must not be below min ({self.min})")
        if self.optimal_max is not None:
            if self.optimal_max < self.optimal_min:
                raise ValueError(f"optimal_max ({self.optimal_max}) must not be below optimal_min ({self.optimal_min})")
            if self.max is not None and self.optimal_max > self.max:
                raise ValueError(f"optimal_max ({self.optimal_max}) must not exceed max ({self.max})")
        return self


class ScoreWeights(BaseModel):
    """Relative weight of each dimension in the aggregated score."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    brightness: float = Field(default=0.20, ge=0.0)
    contrast: float = Field(default=0.15, ge=0.0)
    sharpness: float = Field(default=0.35, ge=0.0)
    resolution: float = Field(default=0.25, ge=0.0)
    file_size: float = Field(default=0.05, ge=0.0)

    @model_validator(mode="after")
    def check_mandatory_weight(self) -> "ScoreWeights":
        if sum(getattr(self, dimension.value) for dimension in MANDATORY_DIMENSIONS) <= 0:
            raise ValueError("Weights of the mandatory dimensions must sum to a positive value")
        return self


class ThresholdConfig(BaseModel):
    """
    Complete classification and weighting table.

    Overridden as a whole: pass a new instance to the assessor rather than
    patching individual fields. Resolution bounds are megapixels, file size
    bounds are bytes.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    brightness_range: ThresholdRange = ThresholdRange(min=0.20, max=0.90, optimal_min=0.30, optimal_max=0.80)
    contrast_range: ThresholdRange = ThresholdRange(min=0.15, optimal_min=0.30)
    sharpness_range: ThresholdRange = ThresholdRange(min=100.0, optimal_min=300.0)
    resolution_range: ThresholdRange = ThresholdRange(min=1.0, optimal_min=2.0)
    file_size_range: ThresholdRange = ThresholdRange(
        min=50_000, max=10_000_000, optimal_min=100_000, optimal_max=5_000_000
    )
    weights: ScoreWeights = ScoreWeights()

    def to_payload(self) -> dict:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(by_alias=True)


DEFAULT_THRESHOLDS = ThresholdConfig()


def load_threshold_config(path: str) -> ThresholdConfig:
    """
    Load a threshold table from a JSON file.

    Missing or invalid files fall back to the default table.
    """
    try:
        with open(path, 'r') as f:
            data = json.load(f)

        thresholds = ThresholdConfig.model_validate(data)
        logger.info(f"Loaded quality thresholds from {path}")
        return thresholds

    except FileNotFoundError:
        logger.warning(f"Thresholds file not found: {path}. Using default thresholds.")
        return DEFAULT_THRESHOLDS
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Invalid thresholds file {path}: {e}. Using default thresholds.")
        return DEFAULT_THRESHOLDS
