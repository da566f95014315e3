"""Threshold validation, pass/fail verdicts and process exit codes."""

from __future__ import annotations

import math
from collections.abc import Iterable

from shotdiff.algorithms import Algorithm
from shotdiff.errors import InvalidThreshold

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_ERROR = 2

DEFAULT_THRESHOLDS: dict[Algorithm, float] = {
    Algorithm.PIXEL_DIFF: 0.0,
    Algorithm.MSE: 0.0,
    Algorithm.PSNR: 30.0,
    Algorithm.SSIM: 0.95,
}


def default_threshold(algorithm: Algorithm) -> float:
    return DEFAULT_THRESHOLDS[algorithm]


def validate_threshold(algorithm: Algorithm, threshold: float) -> float:
    """Check *threshold* against the algorithm's scale.

    PSNR thresholds are decibels in ``[0, inf]``; all others lie in ``[0, 1]``.

    Raises:
        InvalidThreshold: If NaN, non-numeric or out of range.
    """
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        raise InvalidThreshold(f"threshold is not a number: {threshold!r}") from None
    if math.isnan(value):
        raise InvalidThreshold("threshold is NaN")
    if algorithm == Algorithm.PSNR:
        if value < 0.0:
            raise InvalidThreshold(f"psnr threshold must be >= 0 dB, got {value}")
    elif not 0.0 <= value <= 1.0:
        raise InvalidThreshold(f"{algorithm.value} threshold must be in [0, 1], got {value}")
    return value


def passes(algorithm: Algorithm, score: float, threshold: float) -> bool:
    """Apply the algorithm's direction rule.

    PSNR and SSIM pass when ``score >= threshold``; pixel-diff and MSE pass
    when ``score <= threshold``.
    """
    if algorithm.higher_is_better:
        return score >= threshold
    return score <= threshold


def exit_code(passed: bool | None) -> int:
    """0 for pass, 1 for fail, 2 when no score was produced (``None``)."""
    if passed is None:
        return EXIT_ERROR
    return EXIT_PASS if passed else EXIT_FAIL


def worst_exit_code(codes: Iterable[int]) -> int:
    """Error outranks fail, which outranks pass."""
    return max(codes, default=EXIT_PASS)
