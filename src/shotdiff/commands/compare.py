"""shotdiff compare command -- compare one pair of images."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from shotdiff.commands._helpers import abort, emit_report, resolve_format
from shotdiff.compare import ComparisonJob, run_job
from shotdiff.errors import CompareError, ConfigError
from shotdiff.formatters.options import (
    comparison_options,
    report_output_options,
    settings_from_params,
)
from shotdiff.manifest import options_from_mapping
from shotdiff.report import render


@click.command("compare")
@click.argument("image_a", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("image_b", type=click.Path(dir_okay=False, path_type=Path))
@comparison_options
@click.option("--diff-image", is_flag=True, help="Generate a diff image (needs --diff-output).")
@click.option(
    "--diff-output",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the diff image here; format follows the extension.",
)
@report_output_options
def compare_cmd(
    image_a: Path,
    image_b: Path,
    diff_image: bool,
    diff_output: Path | None,
    fmt: str,
    use_json: bool,
    report_path: str | None,
    **params: Any,
) -> None:
    """Compare IMAGE_A (expected) against IMAGE_B (actual).

    Exit 0 if the images pass the threshold, 1 if they do not, 2 if the
    comparison could not run (missing file, size mismatch, bad image).
    """
    output_format = resolve_format(fmt, use_json)
    try:
        if diff_image and diff_output is None:
            raise ConfigError("--diff-output is required with --diff-image")
        job = ComparisonJob(
            source_a=image_a,
            source_b=image_b,
            options=options_from_mapping(settings_from_params(params)),
            generate_diff_image=diff_image or diff_output is not None,
            diff_output_path=diff_output,
            output_format=output_format,
        ).validate()
    except CompareError as exc:
        abort(exc, output_format)

    outcome = run_job(job)
    emit_report(render(outcome, output_format), report_path, output_format)
    sys.exit(outcome.exit_code)
