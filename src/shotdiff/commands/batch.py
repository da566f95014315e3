"""shotdiff batch command -- run a manifest of comparisons concurrently."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from shotdiff.batch import run_batch
from shotdiff.commands._helpers import abort, emit_report, resolve_format
from shotdiff.errors import CompareError
from shotdiff.formatters.options import report_output_options
from shotdiff.manifest import load_manifest
from shotdiff.report import render_batch


@click.command("batch")
@click.argument("manifest", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-j",
    "--jobs",
    "concurrency",
    type=click.IntRange(min=1),
    default=None,
    envvar="SHOTDIFF_JOBS",
    help="Worker threads (default: CPU count; env SHOTDIFF_JOBS).",
)
@report_output_options
def batch_cmd(
    manifest: Path,
    concurrency: int | None,
    fmt: str,
    use_json: bool,
    report_path: str | None,
) -> None:
    """Run every comparison listed in the JSON MANIFEST.

    Results are reported in manifest order. Exit 0 if all jobs pass, 1 if
    any job fails its threshold, 2 if any job could not be evaluated.
    """
    output_format = resolve_format(fmt, use_json)
    try:
        report = run_batch(load_manifest(manifest), concurrency)
    except CompareError as exc:
        abort(exc, output_format)

    emit_report(render_batch(report.outcomes, output_format), report_path, output_format)
    sys.exit(report.exit_code)
