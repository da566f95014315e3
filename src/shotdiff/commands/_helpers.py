"""Shared CLI command helpers."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from shotdiff._fs import atomic_write_text
from shotdiff.errors import CompareError
from shotdiff.options import OutputFormat
from shotdiff.threshold import EXIT_ERROR

__all__ = ["abort", "emit_report", "resolve_format"]


def resolve_format(fmt: str, use_json: bool) -> OutputFormat:
    return OutputFormat.JSON if use_json else OutputFormat.parse(fmt)


def abort(exc: CompareError, fmt: OutputFormat) -> NoReturn:
    """Report a run-level error on stderr and exit with the error code."""
    if fmt == OutputFormat.JSON:
        click.echo(json.dumps({"error": exc.to_dict()}), err=True)
    else:
        click.echo(f"error: {exc}", err=True)
    sys.exit(EXIT_ERROR)


def emit_report(text: str, report_path: str | None, fmt: OutputFormat) -> None:
    """Print *text*, or write it atomically to *report_path*."""
    if report_path is None:
        click.echo(text)
        return
    try:
        atomic_write_text(Path(report_path), text + "\n")
    except CompareError as exc:
        abort(exc, fmt)
