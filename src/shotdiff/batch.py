"""Concurrent execution of many comparison jobs."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from shotdiff.compare import ComparisonJob, JobOutcome, run_job
from shotdiff.errors import ConfigError, InvalidThreshold
from shotdiff.threshold import worst_exit_code

log = logging.getLogger(__name__)


def default_concurrency() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class BatchReport:
    """Outcomes in submission order plus the worst-case exit code."""

    outcomes: tuple[JobOutcome, ...]

    @property
    def exit_code(self) -> int:
        return worst_exit_code(o.exit_code for o in self.outcomes)


def validate_jobs(jobs: Sequence[ComparisonJob]) -> list[ComparisonJob]:
    """Resolve and check every job's configuration up front.

    Raises:
        InvalidThreshold: If any job has a bad threshold.
        ConfigError: If any job has another invalid setting.
    """
    validated: list[ComparisonJob] = []
    for index, job in enumerate(jobs, start=1):
        try:
            validated.append(job.validate())
        except InvalidThreshold as exc:
            raise InvalidThreshold(f"job {index} ({job.label}): {exc}") from exc
        except ConfigError as exc:
            raise ConfigError(f"job {index} ({job.label}): {exc}") from exc
    return validated


def run_batch(jobs: Sequence[ComparisonJob], concurrency: int | None = None) -> BatchReport:
    """Run *jobs* on a pool of *concurrency* worker threads.

    Each job runs entirely on one worker. numpy releases the GIL inside its
    array kernels, so the pixel math of different jobs overlaps on multiple
    cores. A failing job never stops its siblings.

    Configuration is validated for every job before the pool starts; an
    invalid threshold or setting aborts the whole batch.
    """
    workers = concurrency if concurrency is not None else default_concurrency()
    if workers < 1:
        raise ConfigError(f"concurrency must be at least 1, got {workers}")
    validated = validate_jobs(jobs)
    if not validated:
        return BatchReport(outcomes=())

    workers = min(workers, len(validated))
    log.debug("running %d jobs on %d workers", len(validated), workers)
    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="shotdiff")
    try:
        futures: list[Future[JobOutcome]] = [pool.submit(run_job, job) for job in validated]
        outcomes = tuple(f.result() for f in futures)
    except BaseException:
        pool.shutdown(wait=True, cancel_futures=True)
        raise
    pool.shutdown(wait=True)
    report = BatchReport(outcomes=outcomes)
    log.debug("batch done: exit=%d", report.exit_code)
    return report
