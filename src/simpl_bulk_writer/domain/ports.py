"""Ports for remote storage, dirty-record reporting, and driver lifecycles."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from simpl_bulk_writer.domain.job_models import JobConfig, TaskConfig
from simpl_bulk_writer.domain.task_models import Record, RecordStream, TaskResult


@runtime_checkable
class WritableSink(Protocol):
    """Binary stream returned by `FileSystemFacade.create_for_write`."""

    @property
    def closed(self) -> bool:
        """Return whether the sink was finalized."""

    def write(self, data: bytes, /) -> int:
        """Append bytes to the object."""

    def flush(self) -> None:
        """Flush buffered bytes."""

    def close(self) -> None:
        """Finalize the object. Calling it more than once is a no-op."""

    def abort(self) -> None:
        """Discard the object without finalizing it."""


class FileSystemFacade(Protocol):
    """Remote storage operations consumed by the writer core.

    Paths are absolute within the file system (``/out/``). Identifiers are
    fully qualified URIs (``s3://bucket/out/day1__...``). Listing methods
    return identifiers; mutation methods accept identifiers.
    """

    @property
    def uri(self) -> str:
        """Default file system URI served by this handle, without trailing slash."""

    def exists(self, path: str) -> bool:
        """Return whether an object or directory exists at ``path``."""

    def is_directory(self, path: str) -> bool:
        """Return whether ``path`` is a directory."""

    def list_entries(self, path: str, prefix: str | None = None) -> list[str]:
        """List identifiers directly under ``path``, optionally filtered by name prefix."""

    def delete(self, identifiers: Sequence[str]) -> Mapping[str, str | None]:
        """Delete entries; map each identifier to ``None`` on success or an error message."""

    def create_for_write(self, identifier: str) -> WritableSink:
        """Create a new object and return a sink that finalizes it on close."""

    def close(self) -> None:
        """Release the client handle."""


FileSystemFactory = Callable[[str], FileSystemFacade]


class RecordEncoder(Protocol):
    """Output encoding strategy bound to one task sink."""

    def write(self, values: Sequence[Any]) -> None:
        """Encode one record of already-coerced values."""

    def close(self) -> None:
        """Flush pending output and finalize the sink."""


EncoderFactory = Callable[[TaskConfig, WritableSink], RecordEncoder]


class DirtyRecordCollector(Protocol):
    """Receives records that cannot be encoded under the declared columns."""

    def report(self, record: Record, reason: str) -> None:
        """Record one dirty record; may raise `DirtyRecordLimitExceededError`."""


class WriterJobLifecycle(Protocol):
    """Job-level operations invoked once per job by an external driver."""

    def init(self, raw_config: Mapping[str, Any]) -> JobConfig:
        """Validate the job description and acquire the storage handle."""

    def prepare(self) -> None:
        """Reconcile the target directory with the write mode."""

    def split(self, mandatory_number: int) -> list[TaskConfig]:
        """Derive one task configuration per parallel writer."""

    def post(self) -> None:
        """Finalize after all tasks finished."""

    def destroy(self) -> None:
        """Release resources on every exit path."""


class WriterTaskLifecycle(Protocol):
    """Task-level operations invoked once per task by an external driver."""

    def init(self) -> None:
        """Acquire the task's storage handle."""

    def prepare(self) -> None:
        """Prepare before writing."""

    def start_write(self, records: RecordStream, collector: DirtyRecordCollector) -> TaskResult:
        """Consume the record stream into the task's output object."""

    def post(self) -> None:
        """Finalize after writing."""

    def destroy(self) -> None:
        """Release resources on every exit path."""


__all__ = [
    "DirtyRecordCollector",
    "EncoderFactory",
    "FileSystemFacade",
    "FileSystemFactory",
    "RecordEncoder",
    "WritableSink",
    "WriterJobLifecycle",
    "WriterTaskLifecycle",
]
