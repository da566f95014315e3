"""Error taxonomy for the comparison pipeline.

Every error carries a stable ``kind`` string used in structured reports.
Each class also derives from the closest builtin so callers that catch
``ValueError`` or ``OSError`` keep working.
"""

from __future__ import annotations

from typing import Any


class CompareError(Exception):
    """Base class for all comparison pipeline failures."""

    kind = "CompareError"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "message": str(self)}


class DecodeFailure(CompareError, ValueError):
    """Image bytes could not be decoded."""

    kind = "DecodeFailure"


class DimensionMismatch(CompareError, ValueError):
    """Two buffers do not share width and height."""

    kind = "DimensionMismatch"

    def __init__(self, size_a: tuple[int, int], size_b: tuple[int, int]) -> None:
        self.size_a = size_a
        self.size_b = size_b
        super().__init__(
            f"size mismatch: {size_a[0]}x{size_a[1]} vs {size_b[0]}x{size_b[1]}"
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["size_a"] = list(self.size_a)
        data["size_b"] = list(self.size_b)
        return data


class UnsupportedFormat(CompareError, ValueError):
    """Channel layout, sample depth or file format that cannot be handled."""

    kind = "UnsupportedFormat"


class InvalidThreshold(CompareError, ValueError):
    """Threshold is NaN or outside the algorithm's range."""

    kind = "InvalidThreshold"


class InvalidBuffer(CompareError, ValueError):
    """Sample data inconsistent with the declared dimensions."""

    kind = "InvalidBuffer"


class IoFailure(CompareError, OSError):
    """An input could not be read or an output could not be written."""

    kind = "IoFailure"


class ConfigError(CompareError, ValueError):
    """Invalid option, algorithm name, colour or manifest entry."""

    kind = "ConfigError"
