"""
Pixel buffer providers.

The engine only needs something that turns an image handle into a decoded
RGBA buffer. Providers are chosen by the caller; the assessor never looks at
file formats itself.
"""

import asyncio
import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from bill_quality.exceptions import (
    CorruptImageError,
    ImageNotFoundError,
    UnsupportedImageFormatError,
)
from bill_quality.schemas.metrics import PixelBuffer
from bill_quality.utils.logging import setup_logging


logger = setup_logging(__name__)


def describe_handle(handle: Any) -> str:
    """Short description of a handle for logs and error messages."""
    if isinstance(handle, (str, Path)):
        return str(handle)
    if isinstance(handle, (bytes, bytearray)):
        return f"<{len(handle)} encoded bytes>"
    if isinstance(handle, Image.Image):
        return f"<PIL image {handle.size[0]}x{handle.size[1]} {handle.mode}>"
    if isinstance(handle, PixelBuffer):
        return f"<pixel buffer {handle.width}x{handle.height}>"
    return f"<{type(handle).__name__}>"


class PixelBufferProvider(ABC):
    """Turns an image handle into a decoded pixel buffer."""

    @abstractmethod
    async def load(self, handle: Any) -> PixelBuffer:
        """
        Load the image behind `handle`.

        Raises:
            BufferAcquisitionError: if the image cannot be loaded or decoded.
        """


class StaticPixelBufferProvider(PixelBufferProvider):
    """Provider for callers that already hold a decoded PixelBuffer."""

    async def load(self, handle: Any) -> PixelBuffer:
        if not isinstance(handle, PixelBuffer):
            raise UnsupportedImageFormatError(
                f"Expected a PixelBuffer, got {type(handle).__name__}",
                handle_description=describe_handle(handle),
            )
        return handle


class PillowPixelBufferProvider(PixelBufferProvider):
    """
    Decodes file paths, encoded bytes or PIL images with Pillow.

    Images whose long edge exceeds `max_dimension` are downsampled before
    analysis; the original size is kept on the buffer for resolution checks.
    A `max_dimension` of 0 disables downsampling.
    """

    def __init__(self, max_dimension: int = 512):
        if max_dimension < 0:
            raise ValueError(f"max_dimension must be >= 0, got {max_dimension}")
        self.max_dimension = max_dimension

    async def load(self, handle: Any) -> PixelBuffer:
        return await asyncio.to_thread(self.load_sync, handle)

    def load_sync(self, handle: Any) -> PixelBuffer:
        """Blocking variant of `load`."""
        description = describe_handle(handle)
        rgba, file_size = self._decode(handle, description)

        source_width, source_height = rgba.size
        rgba = self._downsample(rgba)
        width, height = rgba.size

        logger.debug(
            f"Decoded {description}: {source_width}x{source_height} -> {width}x{height}, "
            f"file size {file_size if file_size is not None else 'unknown'}"
        )

        return PixelBuffer(
            data=rgba.tobytes(),
            width=width,
            height=height,
            source_width=source_width,
            source_height=source_height,
            file_size_bytes=file_size,
        )

    def _decode(self, handle: Any, description: str) -> Tuple[Image.Image, Optional[int]]:
        """
        Decode a handle into a detached RGBA image.

        Images opened here are closed before returning, so multi-frame files
        (GIF, TIFF, MPO) do not keep their file open.
        """
        if isinstance(handle, Image.Image):
            try:
                return handle.convert("RGBA"), None
            except OSError as e:
                raise CorruptImageError(f"Failed to decode image: {e}", handle_description=description) from e

        source, file_size = self._source(handle, description)

        try:
            with Image.open(source) as image:
                image.load()
                rgba = image.convert("RGBA")
        except UnidentifiedImageError as e:
            raise UnsupportedImageFormatError(
                f"File is not a recognised image: {description}", handle_description=description
            ) from e
        except (OSError, SyntaxError, ValueError) as e:
            raise CorruptImageError(f"Failed to decode image: {e}", handle_description=description) from e

        return rgba, file_size

    def _source(self, handle: Any, description: str) -> Tuple[Any, Optional[int]]:
        if isinstance(handle, (str, Path)):
            path = Path(handle)
            if not path.is_file():
                raise ImageNotFoundError(f"Image file not found: {path}", handle_description=description)
            return path, _file_size_on_disk(path)

        if isinstance(handle, (bytes, bytearray)):
            if not handle:
                raise CorruptImageError("Image data is empty", handle_description=description)
            return io.BytesIO(handle), len(handle)

        raise UnsupportedImageFormatError(
            f"Unsupported image handle type: {type(handle).__name__}",
            handle_description=description,
        )

    def _downsample(self, image: Image.Image) -> Image.Image:
        if not self.max_dimension or max(image.size) <= self.max_dimension:
            return image

        resized = image.copy()
        resized.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
        return resized


def _file_size_on_disk(path: Path) -> Optional[int]:
    """Best-effort file size; None when the platform cannot report it."""
    try:
        return os.path.getsize(path)
    except OSError as e:
        logger.debug(f"File size unavailable for {path}: {e}")
        return None

