"""
Feedback Generation Stage
Turns classifications and score into issues, suggestions, a summary
sentence and the final QualityResult. Also builds the fixed result used
when an assessment fails.
"""

from typing import List, Tuple

from bill_quality.schemas.output import (
    Bound,
    Dimension,
    MetricClassification,
    MetricStatus,
    QualityClassifications,
    QualityGrade,
    QualityResult,
)
from bill_quality.state import AssessmentStage, AssessmentState
from bill_quality.utils.logging import setup_logging, log_stage_action, log_quality_issue


logger = setup_logging(__name__)


MIN_VALID_SCORE = 60

SUGGESTIONS = {
    (Dimension.BRIGHTNESS, Bound.LOW): "Try taking the photo in better lighting",
    (Dimension.BRIGHTNESS, Bound.HIGH): "Reduce exposure or avoid direct light on the bill",
    (Dimension.CONTRAST, Bound.LOW): "Place the bill on a plain, contrasting background",
    (Dimension.CONTRAST, Bound.HIGH): "Avoid harsh shadows and glare on the bill",
    (Dimension.SHARPNESS, Bound.LOW): "Hold the camera steady and make sure the bill is in focus",
    (Dimension.SHARPNESS, Bound.HIGH): "Turn off sharpening or beauty filters in the camera app",
    (Dimension.RESOLUTION, Bound.LOW): "Move closer to the bill or use a higher camera resolution",
    (Dimension.RESOLUTION, Bound.HIGH): "Use a lower camera resolution to keep the upload small",
    (Dimension.FILE_SIZE, Bound.LOW): "The image file may be corrupted. Please take a new photo",
    (Dimension.FILE_SIZE, Bound.HIGH): "The image file is too large. Try reducing quality",
}

EXCELLENT_FEEDBACK = "Excellent image quality! Your bill is ready to upload."
GOOD_FEEDBACK = "Good image quality. Your bill should process well."
ACCEPTABLE_FEEDBACK = "Acceptable image quality. See suggestions for better results."
LOW_QUALITY_FEEDBACK = "Image quality is too low. Please retake the photo."

FAILED_MESSAGE = "Analysis failed"
FAILED_ISSUE = "Failed to analyze image"
FAILED_SUGGESTION = "Please try selecting a different image"
FAILED_FEEDBACK = "We could not analyze this image. Please try selecting a different image."


def grade_for_score(score: int) -> QualityGrade:
    if score >= 90:
        return QualityGrade.EXCELLENT
    elif score >= 70:
        return QualityGrade.GOOD
    elif score >= 50:
        return QualityGrade.FAIR
    else:
        return QualityGrade.POOR


def suggestion_for(dimension: Dimension, classification: MetricClassification) -> str:
    """Suggestion for a poor classification, picked by dimension and violated bound."""
    return SUGGESTIONS[(dimension, classification.bound or Bound.LOW)]


def collect_issues(classifications: QualityClassifications) -> Tuple[List[str], List[str]]:
    """
    Issues and suggestions for every poor classification, in evaluation order.

    Returns:
        (issues, suggestions)
    """
    issues = []
    suggestions = []
    for dimension, classification in classifications.items():
        if classification.status != MetricStatus.POOR:
            continue
        issues.append(classification.message)
        suggestions.append(suggestion_for(dimension, classification))
    return issues, suggestions


def summarize(score: int, issues: List[str], suggestions: List[str]) -> str:
    """One-sentence feedback, tiered by score."""
    if score >= 90:
        return EXCELLENT_FEEDBACK
    elif score >= 75:
        return GOOD_FEEDBACK
    elif score >= MIN_VALID_SCORE:
        return ACCEPTABLE_FEEDBACK
    elif issues:
        return f"{issues[0]}. {suggestions[0]}."
    else:
        return LOW_QUALITY_FEEDBACK


def is_valid_result(score: int, issues: List[str]) -> bool:
    # Both conditions are required: one poor metric can still leave the
    # weighted score at 60 or above.
    return score >= MIN_VALID_SCORE and not issues


def generate_feedback(score: int, classifications: QualityClassifications) -> QualityResult:
    """
    Build the final result from a score and its classifications.

    Args:
        score: Aggregated 0-100 score
        classifications: Per-dimension classifications the score came from

    Returns:
        QualityResult
    """
    issues, suggestions = collect_issues(classifications)
    return QualityResult(
        is_valid=is_valid_result(score, issues),
        score=score,
        grade=grade_for_score(score),
        feedback=summarize(score, issues, suggestions),
        classifications=classifications,
        issues=issues,
        suggestions=suggestions,
    )


def build_failure_result() -> QualityResult:
    """Result returned whenever acquisition or extraction fails."""
    failed = MetricClassification(status=MetricStatus.POOR, message=FAILED_MESSAGE, raw_value=0.0)
    return QualityResult(
        is_valid=False,
        score=0,
        grade=QualityGrade.POOR,
        feedback=FAILED_FEEDBACK,
        classifications=QualityClassifications(
            brightness=failed,
            contrast=failed,
            sharpness=failed,
            resolution=failed,
        ),
        issues=[FAILED_ISSUE],
        suggestions=[FAILED_SUGGESTION],
    )


async def feedback_stage(state: AssessmentState) -> dict:
    """
    Feedback node.

    Updates state:
    - result
    - stage -> DONE
    """
    result = generate_feedback(state.score, state.classifications)

    for dimension, classification in state.classifications.items():
        if classification.status == MetricStatus.POOR:
            log_quality_issue(logger, dimension.value, classification.message, classification.raw_value)

    log_stage_action(
        logger,
        "FeedbackStage",
        "Result assembled",
        details={"score": result.score, "is_valid": result.is_valid, "issues": len(result.issues)},
    )

    return {
        "result": result,
        "stage": AssessmentStage.DONE,
        "stage_log": state.log_entry("FeedbackStage", result.feedback),
    }


async def failure_stage(state: AssessmentState) -> dict:
    """
    Failure node. Reached from acquisition or extraction when `error` is set.

    Updates state:
    - result (fixed failure result)
    - stage -> FAILED
    """
    logger.error(
        f"[FailureStage] Assessment {state.assessment_id} failed during {state.failed_stage}: {state.error}"
    )

    return {
        "result": build_failure_result(),
        "score": 0,
        "stage": AssessmentStage.FAILED,
        "stage_log": state.log_entry("FailureStage", f"Failed during {state.failed_stage}: {state.error}"),
    }
