"""Text and JSON serialization of comparison outcomes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from shotdiff.compare import ComparisonResult, JobOutcome
from shotdiff.formatters.json_fmt import json_number, to_json
from shotdiff.formatters.kv import format_kv
from shotdiff.options import OutputFormat
from shotdiff.threshold import EXIT_FAIL, EXIT_PASS, worst_exit_code

TITLE = "Image Comparison Results"


def result_dict(result: ComparisonResult) -> dict[str, Any]:
    """Stable machine-readable fields for a scored comparison."""
    return {
        "algorithm": result.algorithm.value,
        "score": json_number(result.score),
        "threshold": json_number(result.threshold),
        "passed": result.passed,
        "differing_pixels": result.differing_pixel_count,
        "total_pixels": result.total_pixel_count,
        "differing_ratio": result.differing_ratio,
        "diff_image_path": str(result.diff_image_path) if result.diff_image_path else None,
    }


def outcome_dict(outcome: JobOutcome) -> dict[str, Any]:
    data: dict[str, Any] = {"job": outcome.job.label}
    if outcome.result is not None:
        data.update(result_dict(outcome.result))
    else:
        data["algorithm"] = outcome.job.options.algorithm.value
        data["passed"] = False
        data["error"] = outcome.error.to_dict() if outcome.error else None
    data["exit_code"] = outcome.exit_code
    return data


def _result_lines(result: ComparisonResult) -> dict[str, Any]:
    ratio_pct = result.differing_ratio * 100.0
    return {
        "algorithm": result.algorithm.value,
        "threshold": result.threshold,
        "score": result.score,
        "passed": result.passed,
        "differing pixels": (
            f"{result.differing_pixel_count}/{result.total_pixel_count} ({ratio_pct:.2f}%)"
        ),
        "total pixels": result.total_pixel_count,
        "diff image": str(result.diff_image_path) if result.diff_image_path else None,
    }


def render_text(outcome: JobOutcome) -> str:
    """Human-readable report for a single job."""
    lines = [TITLE, "=" * len(TITLE), ""]
    if outcome.result is not None:
        lines.append(format_kv(_result_lines(outcome.result)))
    else:
        err = outcome.error
        lines.append(
            format_kv(
                {
                    "job": outcome.job.label,
                    "algorithm": outcome.job.options.algorithm.value,
                    "error": f"{err.kind}: {err}" if err else "unknown",
                }
            )
        )
    return "\n".join(lines)


def render_json(outcome: JobOutcome) -> str:
    return to_json(outcome_dict(outcome))


def summary(outcomes: Sequence[JobOutcome]) -> dict[str, int]:
    codes = [o.exit_code for o in outcomes]
    return {
        "total": len(codes),
        "passed": sum(1 for c in codes if c == EXIT_PASS),
        "failed": sum(1 for c in codes if c == EXIT_FAIL),
        "errors": sum(1 for c in codes if c > EXIT_FAIL),
        "exit_code": worst_exit_code(codes),
    }


def render_batch_text(outcomes: Sequence[JobOutcome]) -> str:
    """One block per job in submission order, then a summary line."""
    blocks: list[str] = []
    for i, outcome in enumerate(outcomes, start=1):
        if outcome.result is not None:
            status = "PASS" if outcome.result.passed else "FAIL"
            body = format_kv(_result_lines(outcome.result), indent=2)
        else:
            status = "ERROR"
            err = outcome.error
            body = format_kv({"error": f"{err.kind}: {err}" if err else "unknown"}, indent=2)
        blocks.append(f"[{i}] {status} {outcome.job.label}\n{body}")
    s = summary(outcomes)
    blocks.append(
        f"{s['total']} jobs: {s['passed']} passed, {s['failed']} failed, "
        f"{s['errors']} errors (exit {s['exit_code']})"
    )
    return "\n\n".join(blocks)


def render_batch_json(outcomes: Sequence[JobOutcome]) -> str:
    return to_json({"jobs": [outcome_dict(o) for o in outcomes], "summary": summary(outcomes)})


def render(outcome: JobOutcome, fmt: OutputFormat) -> str:
    return render_json(outcome) if fmt == OutputFormat.JSON else render_text(outcome)


def render_batch(outcomes: Sequence[JobOutcome], fmt: OutputFormat) -> str:
    if fmt == OutputFormat.JSON:
        return render_batch_json(outcomes)
    return render_batch_text(outcomes)
