"""
Score Aggregation Stage
Combines per-dimension classifications into a single 0-100 score.
"""

from bill_quality.schemas.output import Dimension, MetricStatus, QualityClassifications
from bill_quality.schemas.thresholds import ScoreWeights
from bill_quality.state import AssessmentStage, AssessmentState
from bill_quality.utils import clamp, round_half_up, safe_divide
from bill_quality.utils.logging import setup_logging, log_stage_action


logger = setup_logging(__name__)


STATUS_POINTS = {
    MetricStatus.GOOD: 100,
    MetricStatus.FAIR: 70,
    MetricStatus.POOR: 30,
}


def weight_for(dimension: Dimension, weights: ScoreWeights) -> float:
    return getattr(weights, dimension.value)


def aggregate_score(classifications: QualityClassifications, weights: ScoreWeights) -> int:
    """
    Weighted average of status points, rounded half-up and clamped to [0, 100].

    Only dimensions that were classified contribute, and the denominator is
    the sum of their weights, so a missing file size never lowers the score.
    """
    weighted_total = 0.0
    weight_total = 0.0

    for dimension, classification in classifications.items():
        weight = weight_for(dimension, weights)
        weighted_total += STATUS_POINTS[classification.status] * weight
        weight_total += weight

    score = round_half_up(safe_divide(weighted_total, weight_total))
    return int(clamp(score, 0, 100))


async def scoring_stage(state: AssessmentState, weights: ScoreWeights) -> dict:
    """
    Aggregation node.

    Updates state:
    - score
    - stage -> AGGREGATED
    """
    score = aggregate_score(state.classifications, weights)

    log_stage_action(logger, "ScoringStage", "Score aggregated", details={"score": score})

    return {
        "score": score,
        "stage": AssessmentStage.AGGREGATED,
        "stage_log": state.log_entry("ScoringStage", f"Aggregated score {score}/100"),
    }
