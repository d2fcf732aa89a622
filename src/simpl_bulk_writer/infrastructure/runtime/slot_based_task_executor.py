"""Slot-bounded parallel execution of blocking write tasks."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")


class SlotBasedTaskExecutor:
    """Run blocking callables on worker threads, at most N at a time.

    Each callable runs to completion; no cancellation or timeout is applied.
    Results are returned in submission order, with raised exceptions in
    place of results for the callables that failed.
    """

    def __init__(self, max_active_executions: int) -> None:
        self._max_active_executions = max(1, max_active_executions)

    @property
    def max_active_executions(self) -> int:
        """Return capacity for concurrently active executions."""

        return self._max_active_executions

    async def run_all(self, calls: Sequence[Callable[[], T]]) -> list[T | BaseException]:
        """Execute ``calls`` concurrently within the slot limit."""

        slots = asyncio.Semaphore(self._max_active_executions)

        async def run_one(call: Callable[[], T]) -> T:
            async with slots:
                return await asyncio.to_thread(call)

        return await asyncio.gather(*(run_one(call) for call in calls), return_exceptions=True)


__all__ = ["SlotBasedTaskExecutor"]
