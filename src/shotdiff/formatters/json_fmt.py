"""Strict JSON encoding for reports."""

from __future__ import annotations

import json
import math
from typing import Any


def json_number(value: float) -> float | str:
    """Return *value* unchanged if finite, else ``"Infinity"``/``"-Infinity"``/``"NaN"``.

    Strict JSON has no literal for non-finite floats; ``float()`` parses
    these strings back.
    """
    if math.isfinite(value):
        return value
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def to_json(data: Any, *, indent: int | None = 2) -> str:
    """Serialize *data*; non-string leaves fall back to ``str()``.

    Raises:
        ValueError: If a non-finite float slipped through ``json_number``.
    """
    return json.dumps(data, default=str, indent=indent, allow_nan=False)
