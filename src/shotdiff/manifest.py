"""Batch manifest loading.

A manifest is a JSON object::

    {
      "defaults": {"algorithm": "ssim", "threshold": 0.97},
      "jobs": [
        {"name": "home", "source_a": "base/home.png", "source_b": "new/home.png",
         "diff_output_path": "diffs/home.png"}
      ]
    }

Every job key may also appear under ``defaults``. Relative paths resolve
against the manifest's directory. A job's ``output_format`` applies when the
job is rendered on its own through the library; the ``batch`` command
renders every job in the format given on its command line.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from shotdiff._fs import read_bytes
from shotdiff.algorithms import Algorithm, SsimSettings
from shotdiff.antialias import AntialiasSettings
from shotdiff.compare import ComparisonJob
from shotdiff.errors import ConfigError, InvalidThreshold
from shotdiff.options import CompareOptions, OutputFormat, parse_rgb_color
from shotdiff.render import DiffStyle

_OPTION_KEYS = {
    "algorithm",
    "threshold",
    "ignore_antialiasing",
    "noise_floor",
    "diff_color",
    "fade",
    "ssim_window",
    "ssim_stride",
    "aa_pixel_delta",
    "aa_blend_tolerance",
    "aa_min_contrast",
}
_JOB_KEYS = {
    "name",
    "source_a",
    "source_b",
    "generate_diff_image",
    "diff_output_path",
    "output_format",
}


def _int(settings: Mapping[str, Any], key: str, default: int) -> int:
    value = settings.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    return value


def _bool(settings: Mapping[str, Any], key: str) -> bool:
    value = settings.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def _threshold(settings: Mapping[str, Any]) -> float | None:
    value = settings.get("threshold")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidThreshold(f"threshold must be a number, got {value!r}")
    return float(value)


def options_from_mapping(settings: Mapping[str, Any]) -> CompareOptions:
    """Build ``CompareOptions`` from flat manifest/CLI style settings."""
    aa = AntialiasSettings()
    ssim = SsimSettings()
    style = DiffStyle()
    color = settings.get("diff_color")
    if isinstance(color, str):
        highlight = parse_rgb_color(color)
    elif isinstance(color, (list, tuple)) and len(color) == 3:
        highlight = parse_rgb_color(",".join(str(c) for c in color))
    elif color is None:
        highlight = style.highlight
    else:
        raise ConfigError(f"diff_color must be 'R,G,B' or a 3-item list, got {color!r}")
    fade = settings.get("fade", style.fade)
    if isinstance(fade, bool) or not isinstance(fade, (int, float)):
        raise ConfigError(f"fade must be a number, got {fade!r}")
    return CompareOptions(
        algorithm=Algorithm.parse(settings.get("algorithm", Algorithm.PIXEL_DIFF)),
        threshold=_threshold(settings),
        ignore_antialiasing=_bool(settings, "ignore_antialiasing"),
        noise_floor=_int(settings, "noise_floor", 0),
        antialias=AntialiasSettings(
            pixel_delta=_int(settings, "aa_pixel_delta", aa.pixel_delta),
            blend_tolerance=_int(settings, "aa_blend_tolerance", aa.blend_tolerance),
            min_contrast=_int(settings, "aa_min_contrast", aa.min_contrast),
        ),
        ssim=SsimSettings(
            window=_int(settings, "ssim_window", ssim.window),
            stride=_int(settings, "ssim_stride", ssim.stride),
        ),
        style=DiffStyle(highlight=highlight, fade=float(fade)),
    )


def _resolve(base_dir: Path, value: Any, key: str) -> Path:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{key} must be a non-empty path string, got {value!r}")
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def job_from_mapping(
    entry: Mapping[str, Any],
    defaults: Mapping[str, Any] | None = None,
    base_dir: Path = Path("."),
) -> ComparisonJob:
    """Merge *entry* over *defaults* and build a job.

    Raises:
        ConfigError: Unknown keys, missing sources or malformed values.
    """
    if not isinstance(entry, Mapping):
        raise ConfigError(f"job must be an object, got {type(entry).__name__}")
    merged: dict[str, Any] = {**(defaults or {}), **entry}
    unknown = sorted(set(merged) - _OPTION_KEYS - _JOB_KEYS)
    if unknown:
        raise ConfigError(f"unknown keys: {', '.join(unknown)}")
    for key in ("source_a", "source_b"):
        if key not in merged:
            raise ConfigError(f"missing required key {key!r}")
    diff_path = merged.get("diff_output_path")
    name = merged.get("name")
    return ComparisonJob(
        source_a=_resolve(base_dir, merged["source_a"], "source_a"),
        source_b=_resolve(base_dir, merged["source_b"], "source_b"),
        options=options_from_mapping({k: v for k, v in merged.items() if k in _OPTION_KEYS}),
        generate_diff_image=_bool(merged, "generate_diff_image"),
        diff_output_path=(
            _resolve(base_dir, diff_path, "diff_output_path") if diff_path is not None else None
        ),
        output_format=OutputFormat.parse(merged.get("output_format", OutputFormat.TEXT)),
        name=str(name) if name is not None else None,
    )


def parse_manifest(data: Any, base_dir: Path = Path(".")) -> list[ComparisonJob]:
    if not isinstance(data, Mapping):
        raise ConfigError("manifest must be a JSON object with a 'jobs' list")
    defaults = data.get("defaults", {})
    if not isinstance(defaults, Mapping):
        raise ConfigError("'defaults' must be an object")
    entries = data.get("jobs")
    if not isinstance(entries, list):
        raise ConfigError("manifest must contain a 'jobs' list")
    jobs: list[ComparisonJob] = []
    for index, entry in enumerate(entries, start=1):
        try:
            jobs.append(job_from_mapping(entry, defaults, base_dir))
        except InvalidThreshold as exc:
            raise InvalidThreshold(f"job {index}: {exc}") from exc
        except ConfigError as exc:
            raise ConfigError(f"job {index}: {exc}") from exc
    return jobs


def load_manifest(path: Path) -> list[ComparisonJob]:
    """Read a manifest file.

    Raises:
        IoFailure: If the file cannot be read.
        ConfigError: If it is not valid JSON or has an invalid shape.
    """
    path = Path(path)
    raw = read_bytes(path)
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"{path}: invalid JSON: {exc}") from exc
    return parse_manifest(data, base_dir=path.parent)
