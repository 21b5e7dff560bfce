"""
Buffer Acquisition Stage
Resolves the image handle into a pixel buffer through the configured provider.
"""

from bill_quality.exceptions import BufferAcquisitionError
from bill_quality.state import AssessmentStage, AssessmentState
from bill_quality.utils.logging import setup_logging, log_stage_action
from bill_quality.utils.providers import PixelBufferProvider, describe_handle


logger = setup_logging(__name__)


async def acquisition_stage(state: AssessmentState, provider: PixelBufferProvider) -> dict:
    """
    Acquisition node. The only step that awaits I/O.

    Updates state:
    - pixel_buffer, stage -> BUFFER_ACQUIRED on success
    - error, failed_stage on failure
    """
    description = describe_handle(state.image_handle)
    logger.info(f"[AcquisitionStage] Loading {description} for assessment {state.assessment_id}")

    try:
        buffer = await provider.load(state.image_handle)
    except BufferAcquisitionError as e:
        logger.warning(f"[AcquisitionStage] Could not load {description}: {e}")
        return _failed(state, str(e))
    except Exception as e:
        # Providers are caller-supplied; anything they raise is an acquisition failure
        logger.error(f"[AcquisitionStage] Provider error for {description}: {type(e).__name__}: {e}")
        return _failed(state, f"{type(e).__name__}: {e}")

    log_stage_action(
        logger,
        "AcquisitionStage",
        "Buffer acquired",
        details={
            "width": buffer.width,
            "height": buffer.height,
            "file_size_bytes": buffer.file_size_bytes,
        },
    )

    return {
        "pixel_buffer": buffer,
        "stage": AssessmentStage.BUFFER_ACQUIRED,
        "stage_log": state.log_entry("AcquisitionStage", f"Acquired {buffer.width}x{buffer.height} buffer"),
    }


def _failed(state: AssessmentState, error: str) -> dict:
    return {
        "error": error,
        "failed_stage": "acquisition",
        "stage_log": state.log_entry("AcquisitionStage", f"Acquisition failed: {error}"),
    }
