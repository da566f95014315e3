"""Key-value pair formatting (aligned columns)."""

from __future__ import annotations

from typing import Any


def format_value(value: Any) -> str:
    """Render a scalar for human-readable output.

    None and empty-string values render as ``-``; booleans as ``yes``/``no``;
    floats with up to six significant digits.
    """
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        return format(value, ".6g")
    return str(value)


def format_kv(data: dict[str, Any], *, indent: int = 0) -> str:
    """Format a dict as aligned key-value pairs.

    Returns a multi-line string. Non-dict or empty input falls through to str().
    """
    if not isinstance(data, dict) or not data:
        return str(data)
    max_key = max(len(str(k)) for k in data)
    pad = " " * indent
    lines: list[str] = []
    for k, v in data.items():
        label = str(k) + ":"
        lines.append(f"{pad}{label:<{max_key + 2}}{format_value(v)}")
    return "\n".join(lines)
