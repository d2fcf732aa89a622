from __future__ import annotations

import asyncio
from collections.abc import Iterator
from typing import Any

import pytest

from simpl_bulk_writer.application.services import LocalJobRunner
from simpl_bulk_writer.bootstrap import build_file_system_factory, build_job_runner
from simpl_bulk_writer.config import Settings
from simpl_bulk_writer.domain.errors import DirectoryNotEmptyError
from simpl_bulk_writer.domain.job_models import TaskConfig
from simpl_bulk_writer.domain.task_models import TaskState
from simpl_bulk_writer.infrastructure.collectors import ThresholdDirtyRecordCollector
from simpl_bulk_writer.infrastructure.encoders import build_encoder_factories
from simpl_bulk_writer.infrastructure.filesystems import InMemoryFileSystemRegistry
from simpl_bulk_writer.infrastructure.runtime import SlotBasedTaskExecutor

FS_URI = "mem://warehouse"


def job_description(**overrides: Any) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "defaultFS": FS_URI,
        "path": "/exports/daily",
        "fileType": "TEXT",
        "fileName": "orders",
        "column": [{"name": "id", "type": "BIGINT"}, {"name": "amount", "type": "DOUBLE"}],
        "writeMode": "nonconflict",
        "fieldDelimiter": ",",
    }
    raw.update(overrides)
    return raw


def rows(start: int, count: int) -> Iterator[tuple[int, float]]:
    for offset in range(count):
        yield (start + offset, (start + offset) / 2)


@pytest.fixture
def registry() -> InMemoryFileSystemRegistry:
    return InMemoryFileSystemRegistry()


@pytest.fixture
def runner(registry: InMemoryFileSystemRegistry) -> LocalJobRunner:
    settings = Settings(max_parallel_tasks=2, dirty_record_limit=0)
    return build_job_runner(settings, build_file_system_factory(settings, registry))


def test_runner_writes_one_file_per_stream(
    runner: LocalJobRunner,
    registry: InMemoryFileSystemRegistry,
) -> None:
    outcome = asyncio.run(runner.run(job_description(), [rows(0, 3), rows(10, 2), rows(20, 0)]))

    assert outcome.succeeded is True
    assert [result.records_written for result in outcome.results] == [3, 2, 0]
    store = registry.store(FS_URI)
    paths = store.paths()
    assert len(paths) == 3
    assert all(path.startswith("/exports/daily/orders__") for path in paths)
    assert {result.output_uri for result in outcome.results} == {
        f"{FS_URI}{path}" for path in paths
    }
    assert store.get(outcome.results[0].output_uri[len(FS_URI) :]) == b"0,0.0\n1,0.5\n2,1.0\n"
    assert store.open_handles == 0


def test_failed_task_does_not_stop_the_others(
    runner: LocalJobRunner,
    registry: InMemoryFileSystemRegistry,
) -> None:
    streams = [rows(0, 2), iter([(1, 0.5), ("bad", "row")]), rows(5, 1)]

    outcome = asyncio.run(runner.run(job_description(), streams))

    states = [result.state for result in outcome.results]
    assert states == [TaskState.COMPLETED, TaskState.FAILED, TaskState.COMPLETED]
    assert outcome.succeeded is False
    assert outcome.results[1].error is not None
    assert len(registry.store(FS_URI).paths()) == 2


def test_planning_failure_propagates_and_releases_storage(
    runner: LocalJobRunner,
    registry: InMemoryFileSystemRegistry,
) -> None:
    store = registry.store(FS_URI)
    store.put("/exports/daily/previous", b"x")

    with pytest.raises(DirectoryNotEmptyError):
        asyncio.run(runner.run(job_description(), [rows(0, 1)]))

    assert store.paths() == ["/exports/daily/previous"]
    assert store.open_handles == 0


def test_unexpected_task_exception_becomes_failed_result(
    registry: InMemoryFileSystemRegistry,
) -> None:
    def broken_collector_factory(task: TaskConfig) -> ThresholdDirtyRecordCollector:
        raise RuntimeError(f"no collector for {task.output_uri}")

    runner = LocalJobRunner(
        file_system_factory=registry.open,
        encoder_factories=build_encoder_factories(),
        collector_factory=broken_collector_factory,
        executor=SlotBasedTaskExecutor(1),
    )

    outcome = asyncio.run(runner.run(job_description(writeMode="append"), [rows(0, 1)]))

    (result,) = outcome.results
    assert result.state is TaskState.FAILED
    assert result.error is not None
    assert "no collector" in result.error
