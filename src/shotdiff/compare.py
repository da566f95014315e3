"""Single comparison pipeline: align, score, evaluate, render."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Union

from shotdiff import codec
from shotdiff.algorithms import Algorithm, measure
from shotdiff.alignment import align
from shotdiff.buffer import PixelBuffer
from shotdiff.errors import CompareError, ConfigError
from shotdiff.options import CompareOptions, OutputFormat
from shotdiff.render import render_diff
from shotdiff.threshold import EXIT_ERROR, exit_code, passes

log = logging.getLogger(__name__)

ImageSource = Union[Path, str, bytes, PixelBuffer]


@dataclass(frozen=True, eq=False)
class ComparisonResult:
    """Outcome of a comparison that produced a score."""

    algorithm: Algorithm
    score: float
    passed: bool
    threshold: float
    differing_pixel_count: int
    total_pixel_count: int
    diff_image: PixelBuffer | None = None
    diff_image_path: Path | None = None

    @property
    def differing_ratio(self) -> float:
        if self.total_pixel_count == 0:
            return 0.0
        return self.differing_pixel_count / self.total_pixel_count

    @property
    def exit_code(self) -> int:
        return exit_code(self.passed)


@dataclass(frozen=True)
class ComparisonJob:
    """One image pair plus everything needed to compare it."""

    source_a: ImageSource
    source_b: ImageSource
    options: CompareOptions = field(default_factory=CompareOptions)
    generate_diff_image: bool = False
    diff_output_path: Path | None = None
    output_format: OutputFormat = OutputFormat.TEXT
    name: str | None = None

    @property
    def wants_diff(self) -> bool:
        return self.generate_diff_image or self.diff_output_path is not None

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        return f"{_describe(self.source_a)} vs {_describe(self.source_b)}"

    def validate(self) -> ComparisonJob:
        """Configuration checks that must pass before any job runs.

        Returns a copy with options resolved.
        """
        if not isinstance(self.output_format, OutputFormat):
            raise ConfigError(f"output format must be an OutputFormat, got {self.output_format!r}")
        return replace(self, options=self.options.validate())


@dataclass(frozen=True, eq=False)
class JobOutcome:
    """A job paired with either its result or the error that stopped it."""

    job: ComparisonJob
    result: ComparisonResult | None = None
    error: CompareError | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @property
    def exit_code(self) -> int:
        if self.result is None:
            return EXIT_ERROR
        return self.result.exit_code


def _describe(source: ImageSource) -> str:
    if isinstance(source, PixelBuffer):
        return f"<buffer {source.width}x{source.height}>"
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return str(source)


def compare_buffers(
    a: PixelBuffer,
    b: PixelBuffer,
    options: CompareOptions | None = None,
    *,
    render: bool = False,
) -> ComparisonResult:
    """Compare two decoded buffers.

    Args:
        a: Expected image.
        b: Actual image.
        options: Comparison settings; defaults to pixel-diff.
        render: Also build the diff image buffer.

    Raises:
        DimensionMismatch: If the sizes differ.
        InvalidThreshold: If the threshold is out of range.
    """
    options = (options or CompareOptions()).validate()
    a, b = align(a, b)
    antialias = options.antialias if options.ignore_antialiasing else None
    m = measure(
        options.algorithm,
        a,
        b,
        noise_floor=options.noise_floor,
        antialias=antialias,
        ssim=options.ssim,
    )
    threshold = options.effective_threshold
    passed = passes(options.algorithm, m.score, threshold)
    log.debug(
        "%s score=%r threshold=%r differing=%d/%d",
        options.algorithm.value,
        m.score,
        threshold,
        m.differing_pixels,
        m.total_pixels,
    )
    diff_image = render_diff(a, m.mask, options.style) if render else None
    return ComparisonResult(
        algorithm=options.algorithm,
        score=m.score,
        passed=passed,
        threshold=threshold,
        differing_pixel_count=m.differing_pixels,
        total_pixel_count=m.total_pixels,
        diff_image=diff_image,
    )


def compare_images(
    source_a: ImageSource,
    source_b: ImageSource,
    options: CompareOptions | None = None,
    diff_output: Path | None = None,
) -> ComparisonResult:
    """Load two image sources, compare them and optionally save a diff image.

    The diff image is fully rendered in memory and written atomically, so a
    partially written file is never observable.

    Raises:
        IoFailure: Missing/unreadable input or unwritable diff path.
        DecodeFailure: Corrupt image data.
        UnsupportedFormat: Non-8-bit input or unknown diff extension.
        DimensionMismatch: Different sizes.
    """
    if diff_output is not None:
        codec.format_for_path(Path(diff_output))
    a = codec.load(source_a)
    b = codec.load(source_b)
    result = compare_buffers(a, b, options, render=diff_output is not None)
    if diff_output is not None and result.diff_image is not None:
        path = codec.save(result.diff_image, Path(diff_output))
        result = replace(result, diff_image_path=path)
    return result


def run_job(job: ComparisonJob) -> JobOutcome:
    """Run one job to completion, recording any pipeline error in the outcome."""
    log.debug("job start: %s", job.label)
    try:
        if job.diff_output_path is not None:
            result = compare_images(
                job.source_a, job.source_b, job.options, diff_output=job.diff_output_path
            )
        else:
            a = codec.load(job.source_a)
            b = codec.load(job.source_b)
            result = compare_buffers(a, b, job.options, render=job.generate_diff_image)
    except CompareError as exc:
        log.info("job failed: %s: %s", job.label, exc)
        return JobOutcome(job=job, error=exc)
    log.debug("job done: %s passed=%s", job.label, result.passed)
    return JobOutcome(job=job, result=result)
