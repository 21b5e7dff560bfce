"""
Main entry point for the bill image quality engine.
"""

import asyncio
import sys
import uuid
from typing import Any, List, Optional

from bill_quality.state import AssessmentState
from bill_quality.graph import build_assessment_graph
from bill_quality.schemas.metrics import RawMetrics
from bill_quality.schemas.output import QualityResult
from bill_quality.schemas.thresholds import DEFAULT_THRESHOLDS, ThresholdConfig, load_threshold_config
from bill_quality.stages.classification import classify_metrics
from bill_quality.stages.scoring import aggregate_score
from bill_quality.stages.feedback import build_failure_result, generate_feedback
from bill_quality.utils.providers import PillowPixelBufferProvider, PixelBufferProvider
from bill_quality.utils.logging import setup_logging
from bill_quality.utils import dict_to_json_string
from bill_quality.config import get_config


logger = setup_logging(__name__)
config = get_config()


def default_thresholds() -> ThresholdConfig:
    """Threshold table from QUALITY_THRESHOLDS_FILE, or the built-in defaults."""
    if config.THRESHOLDS_FILE:
        return load_threshold_config(config.THRESHOLDS_FILE)
    return DEFAULT_THRESHOLDS


def evaluate_metrics(raw_metrics: RawMetrics, thresholds: ThresholdConfig = None) -> QualityResult:
    """
    Classify, score and explain precomputed metrics.

    Args:
        raw_metrics: Metrics extracted elsewhere
        thresholds: Optional threshold table (defaults when omitted)

    Returns:
        QualityResult
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    classifications = classify_metrics(raw_metrics, thresholds)
    score = aggregate_score(classifications, thresholds.weights)
    return generate_feedback(score, classifications)


class QualityAssessor:
    """
    Runs the assessment pipeline for image handles.

    The threshold table and pixel buffer provider are fixed at construction.
    Assessors hold no per-call state, so one instance can serve many
    concurrent `assess` calls.
    """

    def __init__(
        self,
        thresholds: Optional[ThresholdConfig] = None,
        provider: Optional[PixelBufferProvider] = None,
    ):
        self.thresholds = thresholds or default_thresholds()
        self.provider = provider or PillowPixelBufferProvider(max_dimension=config.MAX_ANALYSIS_DIMENSION)
        self._graph = None

    @property
    def graph(self):
        """Compiled graph, built on first use."""
        if self._graph is None:
            self._graph = build_assessment_graph(self.thresholds, self.provider)
        return self._graph

    async def run(self, image_handle: Any, assessment_id: str = None) -> AssessmentState:
        """
        Run the graph and return the final state.

        Exceptions escaping the graph are folded into a failed state.
        """
        if not assessment_id:
            assessment_id = f"QA-{uuid.uuid4().hex[:12]}"

        state = AssessmentState(assessment_id=assessment_id, image_handle=image_handle)

        logger.info(f"Starting quality assessment {assessment_id}")

        try:
            result = await self.graph.ainvoke(state, config={"recursion_limit": config.GRAPH_RECURSION_LIMIT})
            if isinstance(result, dict):
                final_state = AssessmentState(**result)
            else:
                final_state = result
        except Exception as e:
            logger.error(f"Error running assessment graph for {assessment_id}: {type(e).__name__}: {e}")
            final_state = state.model_copy(update={
                "error": f"{type(e).__name__}: {e}",
                "failed_stage": state.failed_stage or "graph",
            })

        if final_state.result is None:
            final_state = final_state.model_copy(update={"result": build_failure_result(), "score": 0})

        return final_state

    async def assess(self, image_handle: Any, assessment_id: str = None) -> QualityResult:
        """
        Assess one image.

        Args:
            image_handle: Anything the provider can load (path, bytes, PIL image, PixelBuffer)
            assessment_id: Optional ID used in logs

        Returns:
            QualityResult. Never raises; failures yield the fixed failure result.
        """
        final_state = await self.run(image_handle, assessment_id)

        logger.info(
            f"Assessment {final_state.assessment_id} complete: score={final_state.result.score} "
            f"valid={final_state.result.is_valid}"
        )

        return final_state.result

    async def assess_batch(self, image_handles: List[Any], max_concurrent: int = None) -> List[QualityResult]:
        """
        Assess several images concurrently.

        Returns:
            Results in the same order as `image_handles`
        """
        semaphore = asyncio.Semaphore(max_concurrent or config.MAX_CONCURRENT_ASSESSMENTS)

        async def assess_one(idx: int, handle: Any) -> QualityResult:
            async with semaphore:
                logger.info(f"Assessing image {idx}/{len(image_handles)}")
                return await self.assess(handle)

        results = await asyncio.gather(
            *(assess_one(idx, handle) for idx, handle in enumerate(image_handles, 1))
        )

        valid_count = sum(1 for r in results if r.is_valid)
        logger.info(f"Batch assessment complete. {valid_count}/{len(results)} images passed.")

        return list(results)


async def assess_image(image_handle: Any, thresholds: ThresholdConfig = None) -> QualityResult:
    """Assess one image with a default assessor."""
    return await QualityAssessor(thresholds=thresholds).assess(image_handle)


async def assess_images_batch(
    image_handles: List[Any],
    thresholds: ThresholdConfig = None,
    max_concurrent: int = None,
) -> List[QualityResult]:
    """Assess several images with a shared default assessor."""
    return await QualityAssessor(thresholds=thresholds).assess_batch(image_handles, max_concurrent)


def format_output_json(result: QualityResult) -> str:
    """Format result as JSON string."""
    return dict_to_json_string(result.to_payload())


if __name__ == "__main__":
    if len(sys.argv) > 1:
        results = asyncio.run(assess_images_batch(sys.argv[1:]))
        for path, result in zip(sys.argv[1:], results):
            print(f"# {path}")
            print(format_output_json(result))
    else:
        print("Usage: python -m bill_quality.main <image_path> [<image_path> ...]")
