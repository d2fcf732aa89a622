"""Dirty-record collector implementations."""

from simpl_bulk_writer.infrastructure.collectors.threshold_dirty_record_collector import (
    ThresholdDirtyRecordCollector,
)

__all__ = ["ThresholdDirtyRecordCollector"]
