"""Shared option decorators for comparison commands."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

import click

from shotdiff.algorithms import Algorithm


def report_output_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach --format, --json and -o/--output to a Click command."""

    @click.option(
        "--format",
        "fmt",
        type=click.Choice(["text", "json"], case_sensitive=False),
        default="text",
        show_default=True,
        help="Report format.",
    )
    @click.option("--json", "use_json", is_flag=True, help="Shorthand for --format json.")
    @click.option(
        "-o",
        "--output",
        "report_path",
        default=None,
        type=click.Path(dir_okay=False, path_type=str),
        help="Write the report to FILE instead of stdout.",
    )
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return fn(*args, **kwargs)

    return wrapper


def comparison_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach algorithm, threshold, anti-aliasing, SSIM and diff styling options."""

    @click.option(
        "-a",
        "--algorithm",
        default=Algorithm.PIXEL_DIFF.value,
        show_default=True,
        help="pixel-diff (alias: pixel), mse, psnr or ssim.",
    )
    @click.option(
        "-t",
        "--threshold",
        type=float,
        default=None,
        help="Pass threshold. Defaults: pixel-diff 0, mse 0, psnr 30 (dB), ssim 0.95.",
    )
    @click.option(
        "--ignore-antialiasing",
        is_flag=True,
        help="Discount edge-smoothing noise (pixel-diff and ssim only).",
    )
    @click.option(
        "--noise-floor",
        type=click.IntRange(0, 255),
        default=0,
        show_default=True,
        help="Per-channel difference at or below which a pixel is unchanged.",
    )
    @click.option("--aa-pixel-delta", type=click.IntRange(0, 255), default=2, show_default=True)
    @click.option(
        "--aa-blend-tolerance", type=click.IntRange(0, 255), default=16, show_default=True
    )
    @click.option("--aa-min-contrast", type=click.IntRange(0, 255), default=32, show_default=True)
    @click.option("--ssim-window", type=click.IntRange(min=1), default=8, show_default=True)
    @click.option("--ssim-stride", type=click.IntRange(min=1), default=4, show_default=True)
    @click.option(
        "--diff-color",
        default="255,0,0",
        show_default=True,
        help="Highlight colour for differing pixels (R,G,B).",
    )
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return fn(*args, **kwargs)

    return wrapper


def settings_from_params(params: dict[str, Any]) -> dict[str, Any]:
    """Map parsed comparison options to manifest-style setting keys."""
    return {
        "algorithm": params["algorithm"],
        "threshold": params["threshold"],
        "ignore_antialiasing": params["ignore_antialiasing"],
        "noise_floor": params["noise_floor"],
        "aa_pixel_delta": params["aa_pixel_delta"],
        "aa_blend_tolerance": params["aa_blend_tolerance"],
        "aa_min_contrast": params["aa_min_contrast"],
        "ssim_window": params["ssim_window"],
        "ssim_stride": params["ssim_stride"],
        "diff_color": params["diff_color"],
    }
