"""Shared runtime utilities for parallel task execution."""

from simpl_bulk_writer.infrastructure.runtime.slot_based_task_executor import (
    SlotBasedTaskExecutor,
)

__all__ = ["SlotBasedTaskExecutor"]
