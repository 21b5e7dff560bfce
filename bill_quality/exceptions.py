"""
Error taxonomy for the quality engine.

Acquisition and extraction errors never reach callers of the assessor: they
are recorded on the assessment state and turned into the failure result.
"""


class QualityAssessmentError(Exception):
    """Base class for quality engine errors."""


class BufferAcquisitionError(QualityAssessmentError):
    """The pixel buffer provider could not load or decode the image."""

    def __init__(self, message: str, handle_description: str = None):
        super().__init__(message)
        self.handle_description = handle_description


class ImageNotFoundError(BufferAcquisitionError):
    """The image handle points at a file that does not exist."""


class UnsupportedImageFormatError(BufferAcquisitionError):
    """The handle type or encoded format is not understood by the provider."""


class CorruptImageError(BufferAcquisitionError):
    """The image was recognised but could not be decoded."""


class MetricExtractionError(QualityAssessmentError):
    """Pixel metric extraction failed on an acquired buffer."""
