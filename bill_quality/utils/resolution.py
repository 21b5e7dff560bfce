"""
Resolution and file size helpers.
"""

from typing import Optional


def compute_megapixels(width: int, height: int) -> float:
    """Megapixels for the given dimensions."""
    return (width * height) / 1_000_000


def normalize_file_size(file_size_bytes: Optional[int]) -> Optional[int]:
    """Pass a byte count through; negative or missing sizes mean 'unknown'."""
    if file_size_bytes is None or file_size_bytes < 0:
        return None
    return int(file_size_bytes)


def format_megapixels(megapixels: float) -> str:
    return f"{megapixels:.1f}MP"


def format_file_size(size_bytes: float) -> str:
    """Human-readable size, e.g. '48KB' or '2.4MB'."""
    if size_bytes < 1024:
        return f"{int(size_bytes)}B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f}KB"
    return f"{size_bytes / (1024 * 1024):.1f}MB"
