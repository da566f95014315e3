"""Codec boundary: Pillow decode/encode and channel normalization."""

from __future__ import annotations

import io
import logging
import struct
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from shotdiff._fs import atomic_write_bytes, read_bytes
from shotdiff.buffer import Channels, PixelBuffer
from shotdiff.errors import DecodeFailure, UnsupportedFormat

log = logging.getLogger(__name__)

# Pillow modes mapped to the layout they are converted to before wrapping.
_MODE_TARGETS: dict[str, str] = {
    "L": "L",
    "1": "L",
    "RGB": "RGB",
    "RGBX": "RGB",
    "CMYK": "RGB",
    "YCbCr": "RGB",
    "LAB": "RGB",
    "HSV": "RGB",
    "RGBA": "RGBA",
    "RGBa": "RGBA",
    "LA": "RGBA",
    "La": "RGBA",
    "PA": "RGBA",
}

# Formats without an alpha channel; RGBA buffers are flattened to RGB first.
_OPAQUE_FORMATS = frozenset({"JPEG", "PPM", "PCX", "EPS"})


def from_image(img: Image.Image) -> PixelBuffer:
    """Convert a decoded Pillow image to a normalized 8-bit buffer.

    Raises:
        UnsupportedFormat: For modes that are not 8 bits per channel
            (``I``, ``F``, ``I;16`` ...) or otherwise unknown.
    """
    mode = img.mode
    if mode == "P":
        target = "RGBA" if "transparency" in img.info else "RGB"
    else:
        target = _MODE_TARGETS.get(mode, "")
    if not target:
        raise UnsupportedFormat(f"unsupported image mode {mode!r}: only 8-bit channels")
    if mode != target:
        img = img.convert(target)
    arr = np.asarray(img, dtype=np.uint8)
    return PixelBuffer.from_array(arr)


def decode_bytes(data: bytes, *, name: str = "<bytes>") -> PixelBuffer:
    """Decode encoded image bytes (PNG, JPEG, WebP, ...) into a buffer.

    Raises:
        DecodeFailure: If Pillow cannot identify or fully decode the data.
        UnsupportedFormat: If the decoded mode cannot be normalized.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            buf = from_image(img)
    except UnsupportedFormat:
        raise
    except UnidentifiedImageError as exc:
        raise DecodeFailure(f"{name}: not a recognized image") from exc
    # Corrupt headers and tiles surface as ValueError or struct.error from the plugins.
    except (OSError, ValueError, SyntaxError, struct.error, Image.DecompressionBombError) as exc:
        raise DecodeFailure(f"{name}: {exc}") from exc
    log.debug("decoded %s: %dx%d %s", name, buf.width, buf.height, buf.channels.value)
    return buf


def decode_file(path: Path) -> PixelBuffer:
    """Read and decode an image file.

    Raises:
        IoFailure: If the file is missing or unreadable.
        DecodeFailure: If the contents are not a valid image.
    """
    return decode_bytes(read_bytes(path), name=str(path))


def load(source: Path | str | bytes | PixelBuffer) -> PixelBuffer:
    """Resolve any accepted image source to a buffer."""
    if isinstance(source, PixelBuffer):
        return source
    if isinstance(source, (bytes, bytearray)):
        return decode_bytes(bytes(source))
    return decode_file(Path(source))


def promote(buf: PixelBuffer, target: Channels) -> PixelBuffer:
    """Widen *buf* to *target* (Grayscale -> RGB -> RGBA, alpha 255).

    Raises:
        UnsupportedFormat: If *target* has fewer channels than *buf*.
    """
    if buf.channels == target:
        return buf
    if target.count < buf.channels.count:
        raise UnsupportedFormat(
            f"cannot narrow {buf.channels.value} to {target.value} without losing data"
        )
    arr = buf.pixels
    if buf.channels == Channels.GRAYSCALE:
        arr = np.repeat(arr, 3, axis=2)
    if target == Channels.RGBA:
        alpha = np.full((buf.height, buf.width, 1), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=2)
    return PixelBuffer(buf.width, buf.height, target, arr)


def normalize_pair(a: PixelBuffer, b: PixelBuffer) -> tuple[PixelBuffer, PixelBuffer]:
    """Bring two buffers to the same (wider) channel layout."""
    if a.channels == b.channels:
        return a, b
    target = a.channels if a.channels.count > b.channels.count else b.channels
    log.debug("normalizing %s/%s to %s", a.channels.value, b.channels.value, target.value)
    return promote(a, target), promote(b, target)


def to_image(buf: PixelBuffer) -> Image.Image:
    arr = buf.pixels
    if buf.channels == Channels.GRAYSCALE:
        arr = arr[:, :, 0]
    return Image.fromarray(np.ascontiguousarray(arr))


def format_for_path(path: Path) -> str:
    """Return the Pillow format name for *path*'s extension.

    Raises:
        UnsupportedFormat: If no registered encoder handles the extension.
    """
    ext = Path(path).suffix.lower()
    fmt = Image.registered_extensions().get(ext)
    if fmt is None or fmt not in Image.SAVE:
        raise UnsupportedFormat(f"no image encoder for extension {ext or '(none)'!r}: {path}")
    return fmt


def encode(buf: PixelBuffer, fmt: str) -> bytes:
    """Encode *buf* as *fmt* (a Pillow format name) and return the bytes."""
    img = to_image(buf)
    if fmt in _OPAQUE_FORMATS and buf.channels == Channels.RGBA:
        img = img.convert("RGB")
    out = io.BytesIO()
    try:
        img.save(out, format=fmt)
    except (OSError, ValueError, KeyError) as exc:
        raise UnsupportedFormat(f"cannot encode {buf.channels.value} image as {fmt}: {exc}") from exc
    return out.getvalue()


def save(buf: PixelBuffer, path: Path) -> Path:
    """Encode fully in memory, then write atomically to *path*.

    Raises:
        UnsupportedFormat: Unknown extension or encoder failure.
        IoFailure: Destination not writable.
    """
    path = Path(path)
    data = encode(buf, format_for_path(path))
    atomic_write_bytes(path, data)
    log.debug("wrote %s (%d bytes)", path, len(data))
    return path


__all__ = [
    "decode_bytes",
    "decode_file",
    "encode",
    "format_for_path",
    "from_image",
    "load",
    "normalize_pair",
    "promote",
    "save",
    "to_image",
]
