"""Job and task lifecycles invoked by an external driver.

A driver calls, once per job, `FileWriterJob.init -> prepare -> split ->
post -> destroy`, then runs one `FileWriterTask` per returned task
configuration (`init -> prepare -> start_write -> post -> destroy`).
`destroy` must be called on every exit path; both objects also work as
context managers that guarantee it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from simpl_bulk_writer.application.services.config_validator import validate_job_description
from simpl_bulk_writer.application.services.directory_reconciler import DirectoryReconciler
from simpl_bulk_writer.application.services.task_partitioner import (
    TaskPartitioner,
    take_snapshot,
)
from simpl_bulk_writer.application.services.write_dispatcher import WriteDispatcher
from simpl_bulk_writer.domain.errors import FileWriterError
from simpl_bulk_writer.domain.job_models import FileFormat, JobConfig, TaskConfig
from simpl_bulk_writer.domain.ports import (
    DirtyRecordCollector,
    EncoderFactory,
    FileSystemFacade,
    FileSystemFactory,
    WriterJobLifecycle,
    WriterTaskLifecycle,
)
from simpl_bulk_writer.domain.task_models import RecordStream, TaskResult

logger = logging.getLogger(__name__)


class FileWriterJob(WriterJobLifecycle):
    """Job-level planning: validate, reconcile, then split into tasks."""

    def __init__(
        self,
        file_system_factory: FileSystemFactory,
        partitioner: TaskPartitioner | None = None,
    ) -> None:
        self._file_system_factory = file_system_factory
        self._partitioner = partitioner or TaskPartitioner()
        self._job: JobConfig | None = None
        self._file_system: FileSystemFacade | None = None

    @property
    def job(self) -> JobConfig:
        if self._job is None:
            raise FileWriterError("Job is not initialized; call init() first.")
        return self._job

    def init(self, raw_config: Mapping[str, Any]) -> JobConfig:
        job = validate_job_description(raw_config)
        self._file_system = self._file_system_factory(job.default_fs)
        self._job = job
        return job

    def prepare(self) -> None:
        DirectoryReconciler(self._require_file_system()).reconcile(self.job)

    def split(self, mandatory_number: int) -> list[TaskConfig]:
        existing = take_snapshot(self._require_file_system(), self.job)
        return self._partitioner.partition(self.job, mandatory_number, existing)

    def post(self) -> None:
        logger.info("Job writing to '%s' finished.", self.job.target_uri)

    def destroy(self) -> None:
        file_system, self._file_system = self._file_system, None
        if file_system is not None:
            file_system.close()

    def __enter__(self) -> FileWriterJob:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.destroy()

    def _require_file_system(self) -> FileSystemFacade:
        if self._file_system is None:
            raise FileWriterError("Job file system is not open; call init() first.")
        return self._file_system


class FileWriterTask(WriterTaskLifecycle):
    """Task-level execution bound to one task configuration."""

    def __init__(
        self,
        task: TaskConfig,
        file_system_factory: FileSystemFactory,
        encoder_factories: Mapping[FileFormat, EncoderFactory],
    ) -> None:
        self._task = task
        self._file_system_factory = file_system_factory
        self._encoder_factories = encoder_factories
        self._file_system: FileSystemFacade | None = None
        self._dispatcher: WriteDispatcher | None = None

    @property
    def task(self) -> TaskConfig:
        return self._task

    def init(self) -> None:
        self._file_system = self._file_system_factory(self._task.default_fs)

    def prepare(self) -> None:
        """Nothing to prepare; the output identifier was reserved at split time."""

    def start_write(self, records: RecordStream, collector: DirtyRecordCollector) -> TaskResult:
        if self._file_system is None:
            raise FileWriterError("Task file system is not open; call init() first.")
        self._dispatcher = WriteDispatcher(
            task=self._task,
            file_system=self._file_system,
            collector=collector,
            encoder_factories=self._encoder_factories,
        )
        return self._dispatcher.write(records)

    def result(self) -> TaskResult | None:
        """Return the dispatcher outcome, including after a failed write."""

        return None if self._dispatcher is None else self._dispatcher.result()

    def post(self) -> None:
        """Nothing to finalize; the output object is closed by the dispatcher."""

    def destroy(self) -> None:
        file_system, self._file_system = self._file_system, None
        if file_system is not None:
            file_system.close()

    def __enter__(self) -> FileWriterTask:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.destroy()


__all__ = ["FileWriterJob", "FileWriterTask"]
