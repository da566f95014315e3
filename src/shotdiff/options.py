"""Per-comparison configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from shotdiff.algorithms import Algorithm, SsimSettings
from shotdiff.antialias import AntialiasSettings
from shotdiff.errors import ConfigError, InvalidThreshold
from shotdiff.render import DiffStyle
from shotdiff.threshold import default_threshold, validate_threshold


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"

    @classmethod
    def parse(cls, name: str | OutputFormat) -> OutputFormat:
        if isinstance(name, OutputFormat):
            return name
        if not isinstance(name, str):
            raise ConfigError(f"output format must be a string, got {name!r}")
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ConfigError(f"unknown output format {name!r}; supported: text, json") from None


def parse_rgb_color(value: str) -> tuple[int, int, int]:
    """Parse ``"R,G,B"`` (e.g. ``"255,0,0"``) into a colour tuple.

    Raises:
        ConfigError: On wrong arity or components outside 0..255.
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 3:
        raise ConfigError(f"invalid colour {value!r}: expected R,G,B (e.g. 255,0,0)")
    rgb: list[int] = []
    for label, part in zip(("red", "green", "blue"), parts):
        try:
            component = int(part)
        except ValueError:
            raise ConfigError(f"invalid {label} value {part!r} in colour {value!r}") from None
        if not 0 <= component <= 255:
            raise ConfigError(f"{label} value {component} out of range 0..255")
        rgb.append(component)
    return (rgb[0], rgb[1], rgb[2])


@dataclass(frozen=True)
class CompareOptions:
    """Everything that shapes one comparison; passed explicitly per job.

    ``threshold=None`` selects the algorithm's default.
    """

    algorithm: Algorithm = Algorithm.PIXEL_DIFF
    threshold: float | None = None
    ignore_antialiasing: bool = False
    noise_floor: int = 0
    antialias: AntialiasSettings = field(default_factory=AntialiasSettings)
    ssim: SsimSettings = field(default_factory=SsimSettings)
    style: DiffStyle = field(default_factory=DiffStyle)

    @property
    def effective_threshold(self) -> float:
        if self.threshold is None:
            return default_threshold(self.algorithm)
        return float(self.threshold)

    def validate(self) -> CompareOptions:
        """Check every field; return a copy with the threshold resolved.

        Raises:
            InvalidThreshold: Threshold NaN or out of range.
            ConfigError: Any other invalid setting.
        """
        if not isinstance(self.algorithm, Algorithm):
            raise ConfigError(f"algorithm must be an Algorithm, got {self.algorithm!r}")
        raw = self.threshold
        if raw is not None and (isinstance(raw, bool) or not isinstance(raw, (int, float))):
            raise InvalidThreshold(f"threshold must be a number, got {raw!r}")
        threshold = validate_threshold(self.algorithm, self.effective_threshold)
        if not 0 <= self.noise_floor <= 255:
            raise ConfigError(f"noise floor must be in 0..255, got {self.noise_floor}")
        self.antialias.validate()
        self.ssim.validate()
        self.style.validate()
        return replace(self, threshold=threshold)
