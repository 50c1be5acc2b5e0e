"""Tests for row partitioning and the banded thread executor."""
from __future__ import annotations

import threading

import numpy as np
import pytest

from hue_reflect.core import utils_parallel
from hue_reflect.core.errors import WorkerFailure
from hue_reflect.core.utils_parallel import (
    RowPartition,
    partition_rows,
    resolve_worker_count,
    run_row_bands,
)


def _covered_rows(partition: RowPartition) -> list[int]:
    return [row for rows in partition.all_ranges() for row in rows]


def test_partition_even_split() -> None:
    partition = partition_rows(12, 4)
    assert partition.bands == (range(0, 3), range(3, 6), range(6, 9), range(9, 12))
    assert len(partition.remainder) == 0
    assert partition.worker_count == 4


def test_partition_with_remainder() -> None:
    partition = partition_rows(10, 3)
    assert partition.bands == (range(0, 3), range(3, 6), range(6, 9))
    assert partition.remainder == range(9, 10)


@pytest.mark.parametrize("height,workers", [(0, 4), (5, 0), (5, -2), (3, 8), (0, 0)])
def test_partition_degenerate_cases_run_synchronously(height: int, workers: int) -> None:
    partition = partition_rows(height, workers)
    assert partition.bands == ()
    assert partition.remainder == range(0, height)


@pytest.mark.parametrize("height", [1, 2, 7, 64, 101])
@pytest.mark.parametrize("workers", [1, 2, 3, 8])
def test_partition_covers_every_row_exactly_once(height: int, workers: int) -> None:
    partition = partition_rows(height, workers)
    assert _covered_rows(partition) == list(range(height))
    assert partition.worker_count <= workers


def test_resolve_worker_count_defaults_to_cpu_count(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(utils_parallel.os, "cpu_count", lambda: 6)
    assert resolve_worker_count() == 6


def test_resolve_worker_count_is_bounded(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(utils_parallel.os, "cpu_count", lambda: 4)
    assert resolve_worker_count(1000, per_cpu=2) == 8
    assert resolve_worker_count(3) == 3
    assert resolve_worker_count(-1) == 0


def test_resolve_worker_count_unknown_cpu_count(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(utils_parallel.os, "cpu_count", lambda: None)
    assert resolve_worker_count() == 1


def _copy_plus_one(rows_in: np.ndarray, rows_out: np.ndarray) -> None:
    rows_out[...] = rows_in + 1


def test_run_row_bands_writes_every_row() -> None:
    source = np.arange(11 * 3, dtype=np.int32).reshape(11, 3)
    target = np.full_like(source, -1)
    run_row_bands(_copy_plus_one, source, target, partition_rows(11, 4))
    np.testing.assert_array_equal(target, source + 1)


def test_run_row_bands_uses_worker_threads_and_calling_thread() -> None:
    seen: dict[int, str] = {}
    lock = threading.Lock()

    def record(rows_in: np.ndarray, rows_out: np.ndarray) -> None:
        with lock:
            for value in rows_in[:, 0]:
                seen[int(value)] = threading.current_thread().name
        rows_out[...] = rows_in

    source = np.arange(7, dtype=np.int32).reshape(7, 1)
    target = np.zeros_like(source)
    run_row_bands(record, source, target, partition_rows(7, 3))
    caller = threading.current_thread().name
    assert seen[6] == caller
    assert all(seen[row] != caller for row in range(6))


def test_run_row_bands_joins_all_before_raising() -> None:
    finished: list[int] = []
    release = threading.Event()

    def work(rows_in: np.ndarray, rows_out: np.ndarray) -> None:
        first = int(rows_in[0, 0])
        if first == 2:
            raise RuntimeError("boom")
        release.wait(timeout=0.5)
        rows_out[...] = rows_in
        finished.append(first)

    source = np.arange(8, dtype=np.int32).reshape(8, 1)
    target = np.full_like(source, -1)
    with pytest.raises(WorkerFailure) as excinfo:
        run_row_bands(work, source, target, partition_rows(8, 4))
    release.set()

    assert sorted(finished) == [0, 4, 6]
    assert excinfo.value.rows == range(2, 4)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    # Rows owned by healthy workers were not touched by the failing one.
    np.testing.assert_array_equal(target[[0, 1, 4, 5, 6, 7], 0], [0, 1, 4, 5, 6, 7])
    np.testing.assert_array_equal(target[2:4, 0], [-1, -1])


def test_run_row_bands_reports_first_failure_in_row_order() -> None:
    def work(rows_in: np.ndarray, rows_out: np.ndarray) -> None:
        raise ValueError(f"rows from {int(rows_in[0, 0])}")

    source = np.arange(9, dtype=np.int32).reshape(9, 1)
    with pytest.raises(WorkerFailure) as excinfo:
        run_row_bands(work, source, np.zeros_like(source), partition_rows(9, 4))
    assert excinfo.value.rows == range(0, 2)


def test_run_row_bands_synchronous_failure() -> None:
    def work(rows_in: np.ndarray, rows_out: np.ndarray) -> None:
        raise KeyError("sync")

    source = np.zeros((3, 1), dtype=np.int32)
    with pytest.raises(WorkerFailure) as excinfo:
        run_row_bands(work, source, np.zeros_like(source), partition_rows(3, 0))
    assert excinfo.value.rows == range(0, 3)


def test_run_row_bands_empty_grid_is_noop() -> None:
    calls: list[int] = []

    def work(rows_in: np.ndarray, rows_out: np.ndarray) -> None:
        calls.append(len(rows_in))

    source = np.zeros((0, 4), dtype=np.uint8)
    run_row_bands(work, source, np.zeros_like(source), partition_rows(0, 4))
    assert calls == []
