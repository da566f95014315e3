"""Immutable in-memory pixel buffer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import numpy as np

from shotdiff.errors import InvalidBuffer


class Channels(str, Enum):
    """Channel layout of a pixel buffer."""

    GRAYSCALE = "grayscale"
    RGB = "rgb"
    RGBA = "rgba"

    @property
    def count(self) -> int:
        return _CHANNEL_COUNTS[self]

    @classmethod
    def from_count(cls, count: int) -> Channels:
        for layout, n in _CHANNEL_COUNTS.items():
            if n == count:
                return layout
        raise InvalidBuffer(f"no channel layout has {count} channels")


_CHANNEL_COUNTS = {Channels.GRAYSCALE: 1, Channels.RGB: 3, Channels.RGBA: 4}


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Decoded image: ``height x width x channels`` unsigned 8-bit samples.

    The backing array is C-ordered, so its flattened form places channel ``c``
    of pixel ``(x, y)`` at ``(y * width + x) * channels.count + c``. The array
    is marked read-only on construction and may be shared between threads.
    """

    width: int
    height: int
    channels: Channels
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise InvalidBuffer(f"negative dimensions: {self.width}x{self.height}")
        expected = (self.height, self.width, self.channels.count)
        arr = self.pixels
        if arr.dtype != np.uint8:
            raise InvalidBuffer(f"samples must be uint8, got {arr.dtype}")
        if arr.shape != expected:
            raise InvalidBuffer(
                f"sample shape {arr.shape} does not match {self.width}x{self.height} "
                f"{self.channels.value}"
            )
        if arr.flags.writeable or not arr.flags.c_contiguous:
            arr = np.ascontiguousarray(arr).copy()
            arr.setflags(write=False)
            object.__setattr__(self, "pixels", arr)

    @classmethod
    def from_samples(
        cls,
        width: int,
        height: int,
        channels: Channels,
        samples: bytes | bytearray | Iterable[int] | np.ndarray,
    ) -> PixelBuffer:
        """Build a buffer from a flat sample sequence.

        Raises:
            InvalidBuffer: If the sample count is not ``width*height*channels``
                or a sample is not an integer in 0..255.
        """
        if isinstance(samples, (bytes, bytearray)):
            flat = np.frombuffer(bytes(samples), dtype=np.uint8)
        else:
            if not isinstance(samples, np.ndarray):
                samples = list(samples)
            flat = np.asarray(samples).reshape(-1)
            if flat.size and not np.issubdtype(flat.dtype, np.integer):
                raise InvalidBuffer(f"samples must be integers, got {flat.dtype}")
            if flat.size and (flat.min() < 0 or flat.max() > 255):
                raise InvalidBuffer("samples must be in 0..255")
            flat = flat.astype(np.uint8).reshape(-1)
        expected = width * height * channels.count
        if flat.size != expected:
            raise InvalidBuffer(
                f"expected {expected} samples for {width}x{height} {channels.value}, "
                f"got {flat.size}"
            )
        return cls(width, height, channels, flat.reshape(height, width, channels.count))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> PixelBuffer:
        """Wrap an ``(h, w)`` or ``(h, w, c)`` uint8 array."""
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise InvalidBuffer(f"expected 2 or 3 dimensions, got {arr.ndim}")
        height, width, count = arr.shape
        return cls(width, height, Channels.from_count(count), arr)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    @property
    def samples(self) -> bytes:
        """Flat sample bytes in row-major, channel-interleaved order."""
        return self.pixels.tobytes()

    def pixel(self, x: int, y: int) -> tuple[int, ...]:
        return tuple(int(v) for v in self.pixels[y, x])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.size == other.size
            and self.channels == other.channels
            and bool(np.array_equal(self.pixels, other.pixels))
        )

    __hash__ = None  # type: ignore[assignment]
