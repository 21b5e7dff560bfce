"""
Shared state object for the assessment pipeline.
Each stage reads the state and returns the fields it updates.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from bill_quality.schemas.metrics import PixelBuffer, RawMetrics
from bill_quality.schemas.output import QualityClassifications, QualityResult


class AssessmentStage(str, Enum):
    """Pipeline position. FAILED is absorbing."""
    START = "start"
    BUFFER_ACQUIRED = "buffer_acquired"
    METRICS_EXTRACTED = "metrics_extracted"
    CLASSIFIED = "classified"
    AGGREGATED = "aggregated"
    DONE = "done"
    FAILED = "failed"


class StageLogEntry(BaseModel):
    """A single entry in the stage log."""
    timestamp: datetime
    stage_name: str
    message: str


class AssessmentState(BaseModel):
    """
    State for one assessment.

    Created per call and discarded afterwards; nothing here is shared
    between assessments. `error` is the failure channel: acquisition and
    extraction set it instead of raising, and the graph routes to the
    failure stage when it is present.
    """

    # Workflow identification
    assessment_id: str
    image_handle: Any = None
    stage: AssessmentStage = AssessmentStage.START

    # Acquisition phase
    pixel_buffer: Optional[PixelBuffer] = None

    # Extraction phase
    raw_metrics: Optional[RawMetrics] = None

    # Classification / aggregation phase
    classifications: Optional[QualityClassifications] = None
    score: Optional[int] = None

    # Terminal artifact
    result: Optional[QualityResult] = None

    # Failure channel
    error: Optional[str] = None
    failed_stage: Optional[str] = None

    # Audit trail
    stage_log: List[StageLogEntry] = Field(default_factory=list)

    def log_entry(self, stage_name: str, message: str) -> List[StageLogEntry]:
        """Return the stage log extended with a new entry."""
        return [
            *self.stage_log,
            StageLogEntry(
                timestamp=datetime.now(timezone.utc),
                stage_name=stage_name,
                message=message,
            ),
        ]

    def get_stage_trace(self) -> str:
        """Get a human-readable summary of the stages that ran."""
        if not self.stage_log:
            return "No stages recorded."

        return "\n".join(f"[{entry.stage_name}] {entry.message}" for entry in self.stage_log)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the current state."""
        return {
            "assessment_id": self.assessment_id,
            "stage": self.stage.value,
            "score": self.score,
            "error": self.error,
            "failed_stage": self.failed_stage,
            "stages_run": len(self.stage_log),
        }
