"""Anti-aliasing noise classification.

A candidate pixel P is treated as edge smoothing, not a real change, when

1. every channel of P differs between the two images by at most
   ``pixel_delta``, and
2. some in-bounds 3x3 neighbour N is stable across the images (every
   channel within ``blend_tolerance``) while contrasting with P in image A
   (some channel at least ``min_contrast`` away).

Condition 2 places P on a local gradient; a slightly-off pixel in the
middle of a flat region stays a real difference.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from shotdiff.errors import ConfigError

_OFFSETS = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


@dataclass(frozen=True)
class AntialiasSettings:
    pixel_delta: int = 2
    blend_tolerance: int = 16
    min_contrast: int = 32

    def validate(self) -> None:
        for name in ("pixel_delta", "blend_tolerance", "min_contrast"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ConfigError(f"{name} must be in 0..255, got {value}")


def channel_delta(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Per-pixel maximum absolute channel difference, shape ``(h, w)``."""
    return np.abs(a.astype(np.int16) - b.astype(np.int16)).max(axis=2)


def antialiased(
    a: np.ndarray,
    b: np.ndarray,
    candidates: np.ndarray,
    settings: AntialiasSettings,
) -> np.ndarray:
    """Return the subset of *candidates* classified as anti-aliasing noise.

    Args:
        a: Image A samples, ``(h, w, c)`` uint8.
        b: Image B samples, same shape as *a*.
        candidates: Boolean ``(h, w)`` mask of pixels that differ.
        settings: Tolerances.

    Returns:
        Boolean ``(h, w)`` mask, always a subset of *candidates*.
    """
    h, w = candidates.shape
    ia = a.astype(np.int16)
    ib = b.astype(np.int16)
    eligible = candidates & (np.abs(ia - ib).max(axis=2) <= settings.pixel_delta)
    if not eligible.any():
        return eligible

    pad = ((1, 1), (1, 1), (0, 0))
    pa = np.pad(ia, pad, mode="edge")
    pb = np.pad(ib, pad, mode="edge")
    inside = np.pad(np.ones((h, w), dtype=bool), 1, constant_values=False)

    on_gradient = np.zeros((h, w), dtype=bool)
    for dy, dx in _OFFSETS:
        rows = slice(1 + dy, 1 + dy + h)
        cols = slice(1 + dx, 1 + dx + w)
        na = pa[rows, cols]
        nb = pb[rows, cols]
        stable = np.abs(na - nb).max(axis=2) <= settings.blend_tolerance
        contrast = np.abs(na - ia).max(axis=2) >= settings.min_contrast
        on_gradient |= inside[rows, cols] & stable & contrast
    return eligible & on_gradient
