"""
Pixel buffer and raw metric models.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


BYTES_PER_PIXEL = 4  # RGBA8


class PixelBuffer(BaseModel):
    """
    A decoded RGBA8 image, row-major, ready for metric extraction.

    `width`/`height` describe `data`. When the provider downsampled the image
    for analysis, `source_width`/`source_height` keep the original size so
    resolution is judged on what the user actually captured.
    """
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    source_width: Optional[int] = Field(default=None, ge=0)
    source_height: Optional[int] = Field(default=None, ge=0)
    file_size_bytes: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_buffer_length(self) -> "PixelBuffer":
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.data) != expected:
            raise ValueError(
                f"Buffer length {len(self.data)} does not match {self.width}x{self.height} RGBA ({expected} bytes)"
            )
        return self

    @property
    def resolution_width(self) -> int:
        return self.source_width if self.source_width is not None else self.width

    @property
    def resolution_height(self) -> int:
        return self.source_height if self.source_height is not None else self.height


class RawMetrics(BaseModel):
    """Numeric signals extracted from one pixel buffer."""
    model_config = ConfigDict(frozen=True)

    brightness: float = Field(ge=0.0, le=1.0)
    contrast: float = Field(ge=0.0, le=1.0)
    blur_score: float = Field(ge=0.0)
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    megapixels: float = Field(ge=0.0)
    file_size_bytes: Optional[int] = Field(default=None, ge=0)
