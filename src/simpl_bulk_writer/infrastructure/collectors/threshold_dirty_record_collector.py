"""Counting dirty-record collector with an optional failure threshold."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from simpl_bulk_writer.domain.errors import DirtyRecordLimitExceededError
from simpl_bulk_writer.domain.ports import DirtyRecordCollector
from simpl_bulk_writer.domain.task_models import DirtyRecord, Record

_DEFAULT_SAMPLE_SIZE = 20

logger = logging.getLogger(__name__)


class ThresholdDirtyRecordCollector(DirtyRecordCollector):
    """Log and count dirty records; fail the task once ``limit`` is exceeded.

    ``limit=None`` never fails. ``limit=0`` fails on the first dirty record.
    A bounded sample of reported records is kept for diagnostics.
    """

    def __init__(self, limit: int | None = None, sample_size: int = _DEFAULT_SAMPLE_SIZE) -> None:
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0 or None.")
        self._limit = limit
        self._sample_size = max(0, sample_size)
        self._count = 0
        self._samples: list[DirtyRecord] = []
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def samples(self) -> list[DirtyRecord]:
        with self._lock:
            return list(self._samples)

    def report(self, record: Record, reason: str) -> None:
        with self._lock:
            self._count += 1
            count = self._count
            if len(self._samples) < self._sample_size:
                self._samples.append(DirtyRecord(record=_as_tuple(record), reason=reason))

        logger.warning("Dirty record skipped (%s): %r", reason, record)
        if self._limit is not None and count > self._limit:
            raise DirtyRecordLimitExceededError(self._limit, count)


def _as_tuple(record: object) -> tuple[object, ...]:
    if isinstance(record, Sequence) and not isinstance(record, (str, bytes)):
        return tuple(record)
    return (record,)


__all__ = ["ThresholdDirtyRecordCollector"]
