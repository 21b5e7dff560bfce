"""
LangGraph orchestration for the assessment pipeline.
Defines the graph structure and routing to the failure stage.
"""

from typing import Literal
from langgraph.graph import StateGraph, END
from bill_quality.state import AssessmentState
from bill_quality.schemas.thresholds import ThresholdConfig
from bill_quality.stages.acquisition import acquisition_stage
from bill_quality.stages.extraction import extraction_stage
from bill_quality.stages.classification import classification_stage
from bill_quality.stages.scoring import scoring_stage
from bill_quality.stages.feedback import feedback_stage, failure_stage
from bill_quality.utils.providers import PixelBufferProvider


def route_after_acquisition(state: AssessmentState) -> Literal["extract_metrics", "fail"]:
    """Route after buffer acquisition."""
    if state.error or state.pixel_buffer is None:
        return "fail"
    return "extract_metrics"


def route_after_extraction(state: AssessmentState) -> Literal["classify_metrics", "fail"]:
    """Route after metric extraction."""
    if state.error or state.raw_metrics is None:
        return "fail"
    return "classify_metrics"


def build_assessment_graph(thresholds: ThresholdConfig, provider: PixelBufferProvider):
    """
    Build the LangGraph workflow for one assessor.

    Flow:
    1. acquire_buffer - load pixels through the provider
    2. extract_metrics - brightness, contrast, blur, resolution, file size
    3. classify_metrics - good / fair / poor per dimension
    4. aggregate_score - weighted 0-100 score
    5. generate_feedback - issues, suggestions, final result
    Acquisition or extraction failures go to `fail` instead.
    """

    async def acquire_buffer(state: AssessmentState) -> dict:
        return await acquisition_stage(state, provider)

    async def classify_metrics(state: AssessmentState) -> dict:
        return await classification_stage(state, thresholds)

    async def aggregate_score(state: AssessmentState) -> dict:
        return await scoring_stage(state, thresholds.weights)

    graph = StateGraph(AssessmentState)

    # Add stage nodes
    graph.add_node("acquire_buffer", acquire_buffer)
    graph.add_node("extract_metrics", extraction_stage)
    graph.add_node("classify_metrics", classify_metrics)
    graph.add_node("aggregate_score", aggregate_score)
    graph.add_node("generate_feedback", feedback_stage)
    graph.add_node("fail", failure_stage)

    # Set the entry point
    graph.set_entry_point("acquire_buffer")

    # Add edges with routing logic
    graph.add_conditional_edges(
        "acquire_buffer",
        route_after_acquisition,
        {
            "extract_metrics": "extract_metrics",
            "fail": "fail",
        }
    )

    graph.add_conditional_edges(
        "extract_metrics",
        route_after_extraction,
        {
            "classify_metrics": "classify_metrics",
            "fail": "fail",
        }
    )

    graph.add_edge("classify_metrics", "aggregate_score")
    graph.add_edge("aggregate_score", "generate_feedback")
    graph.add_edge("generate_feedback", END)
    graph.add_edge("fail", END)

    return graph.compile()
