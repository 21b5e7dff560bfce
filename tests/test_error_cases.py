"""
Tests for error handling and the failure fallback.
"""

import pytest
from unittest.mock import AsyncMock, patch

from bill_quality.exceptions import BufferAcquisitionError, CorruptImageError
from bill_quality.main import QualityAssessor
from bill_quality.schemas.metrics import PixelBuffer
from bill_quality.schemas.output import MetricStatus, QualityGrade
from bill_quality.schemas.thresholds import ThresholdConfig
from bill_quality.state import AssessmentStage
from bill_quality.utils.providers import PixelBufferProvider, StaticPixelBufferProvider


FAILED_ISSUES = ["Failed to analyze image"]
FAILED_SUGGESTIONS = ["Please try selecting a different image"]


def assert_failure_shape(result):
    assert result.score == 0
    assert result.is_valid is False
    assert result.grade == QualityGrade.POOR
    assert result.issues == FAILED_ISSUES
    assert result.suggestions == FAILED_SUGGESTIONS
    for _, classification in result.classifications.items():
        assert classification.status == MetricStatus.POOR
        assert classification.message == "Analysis failed"


def mock_provider(**kwargs) -> PixelBufferProvider:
    provider = AsyncMock(spec=PixelBufferProvider)
    provider.load = AsyncMock(**kwargs)
    return provider


class TestAcquisitionFailures:
    """Provider failures end in the fixed failure result."""

    @pytest.mark.asyncio
    async def test_acquisition_error(self):
        provider = mock_provider(side_effect=CorruptImageError("truncated JPEG"))
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=provider)

        state = await assessor.run("bill.jpg")

        assert state.stage == AssessmentStage.FAILED
        assert state.failed_stage == "acquisition"
        assert "truncated JPEG" in state.error
        assert_failure_shape(state.result)

    @pytest.mark.asyncio
    async def test_unexpected_provider_exception(self):
        provider = mock_provider(side_effect=RuntimeError("camera roll unavailable"))
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=provider)

        result = await assessor.assess("content://bill")

        assert_failure_shape(result)

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        assessor = QualityAssessor(thresholds=ThresholdConfig())

        result = await assessor.assess(tmp_path / "nope.jpg")

        assert_failure_shape(result)

    @pytest.mark.asyncio
    async def test_garbage_bytes(self):
        assessor = QualityAssessor(thresholds=ThresholdConfig())

        state = await assessor.run(b"definitely not an image")

        assert state.failed_stage == "acquisition"
        assert_failure_shape(state.result)

    @pytest.mark.asyncio
    async def test_wrong_handle_for_static_provider(self):
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=StaticPixelBufferProvider())

        result = await assessor.assess(12345)

        assert_failure_shape(result)

    @pytest.mark.asyncio
    async def test_failure_payload(self):
        provider = mock_provider(side_effect=BufferAcquisitionError("decoder crashed"))
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=provider)

        payload = (await assessor.assess("bill.heic")).to_payload()

        assert payload["score"] == 0
        assert payload["isValid"] is False
        assert payload["issues"] == FAILED_ISSUES
        assert "fileSize" not in payload["details"]


class TestExtractionFailures:

    @pytest.mark.asyncio
    async def test_extraction_error_routes_to_failure(self, striped_buffer):
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=StaticPixelBufferProvider())

        with patch("bill_quality.stages.extraction.extract_pixel_metrics") as mock_extract:
            mock_extract.side_effect = ValueError("cannot reshape array")

            state = await assessor.run(striped_buffer(100, 100))

        assert state.stage == AssessmentStage.FAILED
        assert state.failed_stage == "extraction"
        assert "cannot reshape array" in state.error
        assert_failure_shape(state.result)

    @pytest.mark.asyncio
    async def test_unexpected_error_never_reaches_caller(self, striped_buffer):
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=StaticPixelBufferProvider())

        with patch("bill_quality.stages.classification.classify_metrics") as mock_classify:
            mock_classify.side_effect = RuntimeError("boom")

            result = await assessor.assess(striped_buffer(100, 100))

        assert_failure_shape(result)


class TestDegenerateInput:
    """Tiny or empty buffers degrade individual metrics instead of failing."""

    @pytest.mark.asyncio
    async def test_tiny_buffer_gets_zero_sharpness(self, striped_buffer):
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=StaticPixelBufferProvider())

        state = await assessor.run(striped_buffer(16, 16))

        assert state.stage == AssessmentStage.DONE
        assert state.raw_metrics.blur_score == 0.0
        assert state.raw_metrics.contrast == pytest.approx(0.5)
        assert "Image is too blurry" in state.result.issues

    @pytest.mark.asyncio
    async def test_empty_buffer(self):
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=StaticPixelBufferProvider())

        state = await assessor.run(PixelBuffer(data=b"", width=0, height=0))

        assert state.stage == AssessmentStage.DONE
        assert state.raw_metrics.brightness == 0.0
        assert state.result.issues[:2] == ["Image is too dark", "Image has low contrast"]
        assert state.result.is_valid is False


class TestMissingFileSize:

    @pytest.mark.asyncio
    async def test_unknown_size_is_omitted_not_failed(self, striped_buffer):
        assessor = QualityAssessor(thresholds=ThresholdConfig(), provider=StaticPixelBufferProvider())

        result = await assessor.assess(striped_buffer(1920, 1080, file_size_bytes=None))

        assert result.classifications.file_size is None
        assert result.score == 100
        assert result.is_valid is True
