"""Parallel execution helpers for the hue reflection pipeline."""
from __future__ import annotations

import concurrent.futures
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from .config import MAX_WORKERS_PER_CPU
from .errors import WorkerFailure


LOGGER = logging.getLogger("hue_reflect.parallel")

BandFunction = Callable[[np.ndarray, np.ndarray], None]


@dataclass(frozen=True)
class RowPartition:
    """Disjoint row ranges covering an image of *height* rows.

    ``bands`` go to worker threads; ``remainder`` is processed on the calling
    thread while the workers run.
    """

    height: int
    bands: Tuple[range, ...]
    remainder: range

    @property
    def worker_count(self) -> int:
        return len(self.bands)

    def all_ranges(self) -> List[range]:
        ranges = list(self.bands)
        if len(self.remainder):
            ranges.append(self.remainder)
        return ranges


def available_cpus() -> int:
    return os.cpu_count() or 1


def resolve_worker_count(requested: Optional[int] = None, *, per_cpu: int = MAX_WORKERS_PER_CPU) -> int:
    """Return the worker count to use for a run.

    ``None`` selects one worker per processor; explicit requests are clamped to
    ``[0, per_cpu * cpu_count]``.
    """

    cpus = available_cpus()
    if requested is None:
        return cpus
    limit = max(1, per_cpu) * cpus
    return max(0, min(int(requested), limit))


def partition_rows(height: int, workers: int) -> RowPartition:
    """Split ``range(height)`` into *workers* equal bands plus a remainder.

    Every band holds ``height // workers`` contiguous rows; the trailing
    ``height % workers`` rows form the remainder. Without workers, or when
    there are fewer rows than workers, the whole image is the remainder.
    """

    height = max(0, int(height))
    if workers <= 0 or height == 0 or height < workers:
        return RowPartition(height=height, bands=(), remainder=range(0, height))

    rows_per_band = height // workers
    bands = tuple(range(index * rows_per_band, (index + 1) * rows_per_band) for index in range(workers))
    return RowPartition(height=height, bands=bands, remainder=range(workers * rows_per_band, height))


def run_row_bands(
    function: BandFunction,
    source: np.ndarray,
    target: np.ndarray,
    partition: RowPartition,
) -> None:
    """Run *function* over every row range of *partition*.

    Each call receives the input rows and a writable view of the matching
    output rows. Bands never overlap, so no locking is needed. All workers are
    joined before the first failure, in row order, is raised as
    :class:`WorkerFailure`.
    """

    failures: List[Tuple[range, BaseException]] = []
    if not partition.bands:
        _run_band(function, source, target, partition.remainder, failures)
        _raise_first(failures)
        return

    with limited_threads(partition.worker_count):
        with create_thread_pool(max_workers=partition.worker_count) as executor:
            futures = [
                (band, executor.submit(function, source[band.start : band.stop], target[band.start : band.stop]))
                for band in partition.bands
            ]
            _run_band(function, source, target, partition.remainder, failures)
            concurrent.futures.wait([future for _, future in futures])

    for band, future in futures:
        exc = future.exception()
        if exc is not None:
            LOGGER.error("Worker for rows %d..%d failed: %s", band.start, band.stop - 1, exc)
            failures.append((band, exc))
    failures.sort(key=lambda item: item[0].start)
    _raise_first(failures)


def _run_band(
    function: BandFunction,
    source: np.ndarray,
    target: np.ndarray,
    rows: range,
    failures: List[Tuple[range, BaseException]],
) -> None:
    if not len(rows):
        return
    try:
        function(source[rows.start : rows.stop], target[rows.start : rows.stop])
    except Exception as exc:
        LOGGER.error("Synchronous pass for rows %d..%d failed: %s", rows.start, rows.stop - 1, exc)
        failures.append((rows, exc))


def _raise_first(failures: List[Tuple[range, BaseException]]) -> None:
    if failures:
        rows, cause = failures[0]
        raise WorkerFailure(rows, cause) from cause


def create_thread_pool(max_workers: Optional[int] = None) -> concurrent.futures.ThreadPoolExecutor:
    """Create a thread pool executor for row bands."""

    return concurrent.futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hue-reflect")


@contextmanager
def limited_threads(max_workers: Optional[int]) -> Iterator[None]:
    """Context manager that logs thread usage for diagnostics."""

    LOGGER.debug("Starting thread pool with up to %s workers", max_workers)
    try:
        yield
    finally:
        LOGGER.debug("Thread pool with %s workers completed", max_workers)
