"""Similarity algorithms: pixel-diff, MSE, PSNR and SSIM.

All kernels take aligned ``(h, w, c)`` uint8 arrays. Sums are taken in
int64 where the inputs are integral, so scores are reproducible bit for bit.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import numpy as np

from shotdiff.antialias import AntialiasSettings, antialiased, channel_delta
from shotdiff.buffer import PixelBuffer
from shotdiff.errors import ConfigError

PEAK = 255.0
C1 = (0.01 * PEAK) ** 2
C2 = (0.03 * PEAK) ** 2

_ALIASES = {"pixel": "pixel-diff", "pixeldiff": "pixel-diff", "pixel_diff": "pixel-diff"}


class Algorithm(str, Enum):
    """Closed set of comparison strategies."""

    PIXEL_DIFF = "pixel-diff"
    MSE = "mse"
    PSNR = "psnr"
    SSIM = "ssim"

    @property
    def higher_is_better(self) -> bool:
        return self in (Algorithm.PSNR, Algorithm.SSIM)

    @property
    def uses_antialiasing(self) -> bool:
        return self in (Algorithm.PIXEL_DIFF, Algorithm.SSIM)

    @classmethod
    def parse(cls, name: str | Algorithm) -> Algorithm:
        """Parse a case-insensitive algorithm name or alias.

        Raises:
            ConfigError: If the name is unknown.
        """
        if isinstance(name, Algorithm):
            return name
        if not isinstance(name, str):
            raise ConfigError(f"algorithm must be a string, got {name!r}")
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise ConfigError(f"unknown algorithm {name!r}; supported: {choices}") from None


@dataclass(frozen=True)
class SsimSettings:
    window: int = 8
    stride: int = 4

    def validate(self) -> None:
        if self.window < 1 or self.stride < 1:
            raise ConfigError(
                f"ssim window and stride must be positive, got {self.window}/{self.stride}"
            )


@dataclass(frozen=True, eq=False)
class Measurement:
    """Score plus the differing-pixel mask it was derived alongside."""

    algorithm: Algorithm
    score: float
    mask: np.ndarray

    @property
    def differing_pixels(self) -> int:
        return int(np.count_nonzero(self.mask))

    @property
    def total_pixels(self) -> int:
        return int(self.mask.size)


# -- kernels ----------------------------------------------------------------


def difference_masks(
    a: np.ndarray,
    b: np.ndarray,
    *,
    noise_floor: int = 0,
    antialias: AntialiasSettings | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(differing, noise)`` boolean ``(h, w)`` masks.

    A pixel differs when its largest channel difference exceeds
    *noise_floor* and it is not classified as anti-aliasing noise. *noise*
    is all-false when *antialias* is None.
    """
    candidates = channel_delta(a, b) > noise_floor
    if antialias is None:
        return candidates, np.zeros_like(candidates)
    noise = antialiased(a, b, candidates, antialias)
    return candidates & ~noise, noise


def squared_error_sum(a: np.ndarray, b: np.ndarray) -> int:
    diff = a.astype(np.int64) - b.astype(np.int64)
    return int((diff * diff).sum())


def raw_mse(a: np.ndarray, b: np.ndarray) -> float:
    """Mean squared channel difference on the 0..255 scale."""
    return squared_error_sum(a, b) / a.size


def mse(a: np.ndarray, b: np.ndarray) -> float:
    """MSE normalized to ``[0, 1]`` by ``255**2``."""
    return raw_mse(a, b) / (PEAK * PEAK)


def psnr(a: np.ndarray, b: np.ndarray) -> float:
    """Peak signal-to-noise ratio in dB; ``inf`` for identical inputs."""
    err = raw_mse(a, b)
    if err == 0:
        return math.inf
    return 10.0 * math.log10(PEAK * PEAK / err)


def luma(arr: np.ndarray) -> np.ndarray:
    """ITU-R BT.601 luma as float64 ``(h, w)``; alpha is ignored."""
    if arr.shape[2] == 1:
        return arr[:, :, 0].astype(np.float64)
    rgb = arr[:, :, :3].astype(np.float64)
    return 0.299 * rgb[:, :, 0] + 0.587 * rgb[:, :, 1] + 0.114 * rgb[:, :, 2]


def _window_sums(img: np.ndarray, wy: int, wx: int, stride: int) -> np.ndarray:
    """Sums over every ``wy x wx`` window whose origin lies on the stride grid."""
    h, w = img.shape
    table = np.zeros((h + 1, w + 1), dtype=np.float64)
    table[1:, 1:] = img.cumsum(axis=0).cumsum(axis=1)
    ys = np.arange(0, h - wy + 1, stride)[:, np.newaxis]
    xs = np.arange(0, w - wx + 1, stride)[np.newaxis, :]
    return table[ys + wy, xs + wx] - table[ys, xs + wx] - table[ys + wy, xs] + table[ys, xs]


def ssim_index(x: np.ndarray, y: np.ndarray, settings: SsimSettings | None = None) -> float:
    """Mean SSIM over sliding windows of two single-channel float images.

    Windows that would cross the right or bottom border are skipped. An
    axis shorter than the window shrinks the window to the axis length, so
    the image still yields at least one window.
    """
    settings = settings or SsimSettings()
    h, w = x.shape
    wy, wx = min(settings.window, h), min(settings.window, w)
    n = float(wy * wx)

    sum_x = _window_sums(x, wy, wx, settings.stride)
    sum_y = _window_sums(y, wy, wx, settings.stride)
    sum_xx = _window_sums(x * x, wy, wx, settings.stride)
    sum_yy = _window_sums(y * y, wy, wx, settings.stride)
    sum_xy = _window_sums(x * y, wy, wx, settings.stride)

    mean_x = sum_x / n
    mean_y = sum_y / n
    var_x = sum_xx / n - mean_x * mean_x
    var_y = sum_yy / n - mean_y * mean_y
    cov = sum_xy / n - mean_x * mean_y

    num = (2 * mean_x * mean_y + C1) * (2 * cov + C2)
    den = (mean_x * mean_x + mean_y * mean_y + C1) * (var_x + var_y + C2)
    return float(np.clip(np.mean(num / den), -1.0, 1.0))


# -- strategy dispatch ------------------------------------------------------

Scorer = Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray, SsimSettings], float]


def _score_pixel_diff(
    a: np.ndarray, b: np.ndarray, mask: np.ndarray, noise: np.ndarray, s: SsimSettings
) -> float:
    return float(np.count_nonzero(mask)) / mask.size


def _score_mse(
    a: np.ndarray, b: np.ndarray, mask: np.ndarray, noise: np.ndarray, s: SsimSettings
) -> float:
    return mse(a, b)


def _score_psnr(
    a: np.ndarray, b: np.ndarray, mask: np.ndarray, noise: np.ndarray, s: SsimSettings
) -> float:
    return psnr(a, b)


def _score_ssim(
    a: np.ndarray, b: np.ndarray, mask: np.ndarray, noise: np.ndarray, s: SsimSettings
) -> float:
    # Anti-aliasing noise is taken from A so it cannot perturb the structure term.
    if noise.any():
        b = np.where(noise[:, :, np.newaxis], a, b)
    return ssim_index(luma(a), luma(b), s)


_SCORERS: dict[Algorithm, Scorer] = {
    Algorithm.PIXEL_DIFF: _score_pixel_diff,
    Algorithm.MSE: _score_mse,
    Algorithm.PSNR: _score_psnr,
    Algorithm.SSIM: _score_ssim,
}


def measure(
    algorithm: Algorithm,
    a: PixelBuffer,
    b: PixelBuffer,
    *,
    noise_floor: int = 0,
    antialias: AntialiasSettings | None = None,
    ssim: SsimSettings | None = None,
) -> Measurement:
    """Score two aligned buffers with *algorithm*.

    *antialias* is honoured only by pixel-diff and SSIM; MSE and PSNR always
    see raw samples.
    """
    if not algorithm.uses_antialiasing:
        antialias = None
    mask, noise = difference_masks(a.pixels, b.pixels, noise_floor=noise_floor, antialias=antialias)
    score = _SCORERS[algorithm](a.pixels, b.pixels, mask, noise, ssim or SsimSettings())
    return Measurement(algorithm=algorithm, score=score, mask=mask)
