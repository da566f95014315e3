"""Comparability check for a pair of buffers."""

from __future__ import annotations

from shotdiff.buffer import PixelBuffer
from shotdiff.codec import normalize_pair
from shotdiff.errors import DimensionMismatch, UnsupportedFormat


def align(a: PixelBuffer, b: PixelBuffer) -> tuple[PixelBuffer, PixelBuffer]:
    """Verify *a* and *b* are comparable and share a channel layout.

    Sizes are never adjusted: any width or height difference is an error.

    Raises:
        DimensionMismatch: If the sizes differ.
        UnsupportedFormat: If the images are empty or the layouts cannot
            be normalized.
    """
    if a.size != b.size:
        raise DimensionMismatch(a.size, b.size)
    if a.total_pixels == 0:
        raise UnsupportedFormat(f"empty image: {a.width}x{a.height}")
    return normalize_pair(a, b)
