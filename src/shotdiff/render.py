"""Diff image rendering."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from shotdiff.algorithms import luma
from shotdiff.buffer import Channels, PixelBuffer
from shotdiff.errors import ConfigError


@dataclass(frozen=True)
class DiffStyle:
    """Presentation of the diff artifact.

    Differing pixels are painted ``highlight`` at full opacity. Unchanged
    pixels show image A in grayscale, faded towards white by ``fade``
    (0 keeps the gray value, 1 paints solid white).
    """

    highlight: tuple[int, int, int] = (255, 0, 0)
    fade: float = 0.6

    def validate(self) -> None:
        if len(self.highlight) != 3 or any(not 0 <= c <= 255 for c in self.highlight):
            raise ConfigError(f"highlight colour must be three values in 0..255: {self.highlight}")
        if not 0.0 <= self.fade <= 1.0:
            raise ConfigError(f"fade must be in [0, 1], got {self.fade}")


def render_diff(base: PixelBuffer, mask: np.ndarray, style: DiffStyle | None = None) -> PixelBuffer:
    """Render a new buffer highlighting every ``True`` pixel of *mask*.

    Output has the same width and height as *base*; it is RGBA when *base*
    is RGBA and RGB otherwise. *base* is not modified.
    """
    style = style or DiffStyle()
    if mask.shape != (base.height, base.width):
        raise ValueError(f"mask shape {mask.shape} does not match {base.width}x{base.height}")

    gray = luma(base.pixels)
    faded = np.rint(gray + (255.0 - gray) * style.fade).astype(np.uint8)
    channels = Channels.RGBA if base.channels == Channels.RGBA else Channels.RGB
    out = np.empty((base.height, base.width, channels.count), dtype=np.uint8)
    out[:, :, :3] = faded[:, :, np.newaxis]
    if channels == Channels.RGBA:
        out[:, :, 3] = 255
    out[mask, :3] = style.highlight
    return PixelBuffer(base.width, base.height, channels, out)
