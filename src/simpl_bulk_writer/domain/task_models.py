"""Write task runtime models."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

Record = Sequence[Any]
RecordStream = Iterable[Record]


class TaskState(StrEnum):
    """Per-task write states."""

    CREATED = "CREATED"
    OPEN = "OPEN"
    WRITING = "WRITING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(slots=True, frozen=True)
class DirtyRecord:
    """A record skipped because it does not fit the declared columns."""

    record: tuple[Any, ...]
    reason: str


@dataclass(slots=True, frozen=True)
class TaskResult:
    """Outcome of one write task, reported to the orchestrator."""

    output_uri: str
    state: TaskState
    records_written: int = 0
    dirty_records: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is TaskState.COMPLETED


__all__ = [
    "DirtyRecord",
    "Record",
    "RecordStream",
    "TaskResult",
    "TaskState",
]
