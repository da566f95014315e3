"""Atomic file writes for diff images and reports."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

from shotdiff.errors import IoFailure


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write *data* to *path* via a sibling temp file and ``os.replace``.

    Readers never observe a partially written file: the destination either
    keeps its previous content or holds the complete new content.

    Raises:
        IoFailure: If the directory is missing or not writable.
    """
    path = Path(path)
    parent = path.parent if str(path.parent) else Path(".")
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=parent)
    except OSError as exc:
        raise IoFailure(f"cannot write {path}: {exc.strerror or exc}") from exc
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise IoFailure(f"cannot write {path}: {exc.strerror or exc}") from exc


def atomic_write_text(path: Path, content: str) -> None:
    atomic_write_bytes(path, content.encode("utf-8"))


def read_bytes(path: Path) -> bytes:
    """Read a whole input file, mapping OS errors to ``IoFailure``."""
    try:
        return Path(path).read_bytes()
    except FileNotFoundError as exc:
        raise IoFailure(f"file not found: {path}") from exc
    except OSError as exc:
        raise IoFailure(f"cannot read {path}: {exc.strerror or exc}") from exc
