"""Tests for the diff image renderer."""

from __future__ import annotations

import numpy as np
import pytest

from shotdiff.buffer import Channels, PixelBuffer
from shotdiff.errors import ConfigError
from shotdiff.render import DiffStyle, render_diff


def _gradient(c: int = 3) -> PixelBuffer:
    arr = np.linspace(0, 255, 5 * 7 * c).astype(np.uint8).reshape(5, 7, c)
    return PixelBuffer.from_array(arr)


class TestRenderDiff:
    def test_dimensions_match(self) -> None:
        base = _gradient()
        out = render_diff(base, np.zeros((5, 7), dtype=bool))
        assert out.size == base.size

    def test_highlight_exactly_at_mask(self) -> None:
        base = _gradient()
        mask = np.zeros((5, 7), dtype=bool)
        mask[1, 6] = True
        mask[4, 0] = True
        out = render_diff(base, mask, DiffStyle(highlight=(255, 0, 255), fade=1.0))
        highlighted = np.all(out.pixels == (255, 0, 255), axis=2)
        assert np.array_equal(highlighted, mask)

    def test_unchanged_pixels_are_gray(self) -> None:
        out = render_diff(_gradient(), np.zeros((5, 7), dtype=bool))
        px = out.pixels
        assert np.array_equal(px[:, :, 0], px[:, :, 1])
        assert np.array_equal(px[:, :, 1], px[:, :, 2])

    def test_fade_zero_keeps_luma(self) -> None:
        base = PixelBuffer.from_samples(1, 1, Channels.GRAYSCALE, [100])
        out = render_diff(base, np.zeros((1, 1), dtype=bool), DiffStyle(fade=0.0))
        assert out.pixel(0, 0) == (100, 100, 100)

    def test_rgba_input_gives_opaque_rgba(self) -> None:
        base = PixelBuffer.from_array(np.zeros((2, 2, 4), dtype=np.uint8))
        out = render_diff(base, np.ones((2, 2), dtype=bool))
        assert out.channels == Channels.RGBA
        assert out.pixel(1, 1) == (255, 0, 0, 255)

    def test_input_not_mutated(self) -> None:
        base = _gradient()
        before = base.pixels.copy()
        render_diff(base, np.ones((5, 7), dtype=bool))
        assert np.array_equal(base.pixels, before)

    def test_mask_shape_checked(self) -> None:
        with pytest.raises(ValueError, match="mask shape"):
            render_diff(_gradient(), np.zeros((7, 5), dtype=bool))

    def test_style_validation(self) -> None:
        with pytest.raises(ConfigError, match="fade"):
            DiffStyle(fade=1.5).validate()
        with pytest.raises(ConfigError, match="highlight"):
            DiffStyle(highlight=(0, 0, 300)).validate()
