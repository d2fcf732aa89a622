"""Per-task record writing."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from simpl_bulk_writer.domain.errors import (
    DirtyRecordError,
    EncoderError,
    OutputCreationError,
    TaskIOError,
)
from simpl_bulk_writer.domain.job_models import FileFormat, TaskConfig
from simpl_bulk_writer.domain.ports import (
    DirtyRecordCollector,
    EncoderFactory,
    FileSystemFacade,
    RecordEncoder,
    WritableSink,
)
from simpl_bulk_writer.domain.record_coercion import coerce_record
from simpl_bulk_writer.domain.task_models import RecordStream, TaskResult, TaskState

logger = logging.getLogger(__name__)


class WriteDispatcher:
    """Route one task's record stream to the encoder for its file format.

    State moves CREATED -> OPEN -> WRITING -> COMPLETED, or to FAILED from
    any non-terminal state. A dispatcher runs once and performs no retries.
    """

    def __init__(
        self,
        task: TaskConfig,
        file_system: FileSystemFacade,
        collector: DirtyRecordCollector,
        encoder_factories: Mapping[FileFormat, EncoderFactory],
    ) -> None:
        self._task = task
        self._file_system = file_system
        self._collector = collector
        self._encoder_factories = encoder_factories
        self._state = TaskState.CREATED
        self._records_written = 0
        self._dirty_records = 0
        self._last_error: str | None = None

    @property
    def state(self) -> TaskState:
        return self._state

    def result(self) -> TaskResult:
        """Snapshot of the task outcome so far."""

        return TaskResult(
            output_uri=self._task.output_uri,
            state=self._state,
            records_written=self._records_written,
            dirty_records=self._dirty_records,
            error=self._last_error,
        )

    def write(self, records: RecordStream) -> TaskResult:
        """Consume ``records`` into a new object at the task's output identifier."""

        if self._state is not TaskState.CREATED:
            raise TaskIOError(
                f"Write task for '{self._task.output_uri}' already ran (state {self._state})."
            )

        factory = self._encoder_factories.get(self._task.file_format)
        if factory is None:
            error = EncoderError(f"No encoder registered for file type {self._task.file_format}.")
            self._fail(error, sink=None)
            raise error

        output_uri = self._task.output_uri
        logger.info("Begin writing %s file [%s].", self._task.file_format.value, output_uri)
        try:
            sink = self._file_system.create_for_write(output_uri)
        except Exception as exc:
            error = OutputCreationError(f"Failed to create output object '{output_uri}': {exc}")
            self._fail(error, sink=None)
            raise error from exc
        self._state = TaskState.OPEN

        try:
            encoder = factory(self._task, sink)
            self._state = TaskState.WRITING
            self._consume(records, encoder)
            encoder.close()
        except TaskIOError as exc:
            self._fail(exc, sink=sink)
            raise
        except Exception as exc:
            error = EncoderError(f"Writing '{output_uri}' failed: {exc}")
            self._fail(error, sink=sink)
            raise error from exc

        self._state = TaskState.COMPLETED
        logger.info(
            "Finished writing [%s]: %d records written, %d dirty.",
            output_uri,
            self._records_written,
            self._dirty_records,
        )
        return self.result()

    def _consume(self, records: RecordStream, encoder: RecordEncoder) -> None:
        columns = self._task.columns
        for record in records:
            try:
                encoder.write(coerce_record(record, columns))
            except DirtyRecordError as exc:
                self._dirty_records += 1
                self._collector.report(record, str(exc))
                continue
            self._records_written += 1

    def _fail(self, error: Exception, sink: WritableSink | None) -> None:
        self._state = TaskState.FAILED
        self._last_error = str(error)
        logger.error("Write task for '%s' failed: %s", self._task.output_uri, error)
        if sink is not None:
            self._discard_partial_output(sink)

    def _discard_partial_output(self, sink: WritableSink) -> None:
        output_uri = self._task.output_uri
        try:
            if not sink.closed:
                sink.abort()
                return
            outcome = self._file_system.delete([output_uri]).get(output_uri)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not discard partial output '%s': %s", output_uri, exc)
            return
        if outcome is not None:
            logger.warning("Could not delete partial output '%s': %s", output_uri, outcome)


__all__ = ["WriteDispatcher"]
