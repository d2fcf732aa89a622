"""In-process driver running a whole write job."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any, Protocol, TypeVar

from simpl_bulk_writer.application.services.task_partitioner import TaskPartitioner
from simpl_bulk_writer.application.services.writer_lifecycle import FileWriterJob, FileWriterTask
from simpl_bulk_writer.domain.errors import TaskIOError
from simpl_bulk_writer.domain.job_models import FileFormat, JobConfig, TaskConfig
from simpl_bulk_writer.domain.ports import DirtyRecordCollector, EncoderFactory, FileSystemFactory
from simpl_bulk_writer.domain.task_models import RecordStream, TaskResult, TaskState

T = TypeVar("T")

CollectorFactory = Callable[[TaskConfig], DirtyRecordCollector]

logger = logging.getLogger(__name__)


class _ParallelTaskExecutor(Protocol):
    """Runs blocking task callables concurrently."""

    async def run_all(self, calls: Sequence[Callable[[], T]]) -> list[T | BaseException]:
        """Return one result or raised exception per call, in order."""


@dataclass(slots=True, frozen=True)
class JobOutcome:
    """Per-task results of one job run."""

    job: JobConfig
    results: list[TaskResult]

    @property
    def succeeded(self) -> bool:
        return all(result.succeeded for result in self.results)


class LocalJobRunner:
    """Plan a job synchronously, then run its tasks in parallel.

    Planning (validate, reconcile, split) happens once before any task
    starts. Each task gets its own storage handle, collector, and record
    stream; a failed task does not stop the others.
    """

    def __init__(
        self,
        file_system_factory: FileSystemFactory,
        encoder_factories: Mapping[FileFormat, EncoderFactory],
        collector_factory: CollectorFactory,
        executor: _ParallelTaskExecutor,
        partitioner: TaskPartitioner | None = None,
    ) -> None:
        self._file_system_factory = file_system_factory
        self._encoder_factories = encoder_factories
        self._collector_factory = collector_factory
        self._executor = executor
        self._partitioner = partitioner

    async def run(
        self,
        raw_config: Mapping[str, Any],
        streams: Sequence[RecordStream],
    ) -> JobOutcome:
        """Write one output file per record stream under the configured path."""

        with FileWriterJob(self._file_system_factory, self._partitioner) as job:
            config = job.init(raw_config)
            job.prepare()
            tasks = job.split(len(streams))
            raw_results = await self._executor.run_all(
                [partial(self._run_task, task, stream) for task, stream in zip(tasks, streams)]
            )
            results = [
                self._as_task_result(task, result) for task, result in zip(tasks, raw_results)
            ]
            job.post()

        failed = sum(1 for result in results if not result.succeeded)
        logger.info(
            "Job for '%s' finished: %d tasks, %d failed.",
            config.target_uri,
            len(results),
            failed,
        )
        return JobOutcome(job=config, results=results)

    def _run_task(self, task: TaskConfig, records: RecordStream) -> TaskResult:
        collector = self._collector_factory(task)
        with FileWriterTask(task, self._file_system_factory, self._encoder_factories) as writer:
            writer.init()
            writer.prepare()
            try:
                result = writer.start_write(records, collector)
            except TaskIOError as exc:
                result = writer.result() or TaskResult(
                    output_uri=task.output_uri,
                    state=TaskState.FAILED,
                    error=str(exc),
                )
            writer.post()
            return result

    def _as_task_result(self, task: TaskConfig, result: TaskResult | BaseException) -> TaskResult:
        if isinstance(result, TaskResult):
            return result
        logger.error(
            "Write task for '%s' raised %s: %s",
            task.output_uri,
            type(result).__name__,
            result,
        )
        return TaskResult(output_uri=task.output_uri, state=TaskState.FAILED, error=str(result))


__all__ = ["CollectorFactory", "JobOutcome", "LocalJobRunner"]
