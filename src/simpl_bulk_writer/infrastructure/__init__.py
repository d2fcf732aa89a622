"""Infrastructure layer public API."""

from simpl_bulk_writer.infrastructure.collectors import ThresholdDirtyRecordCollector
from simpl_bulk_writer.infrastructure.encoders import (
    DelimitedTextEncoder,
    OrcColumnarEncoder,
    build_encoder_factories,
)
from simpl_bulk_writer.infrastructure.filesystems import (
    InMemoryFileSystem,
    InMemoryFileSystemRegistry,
    S3FileSystem,
)
from simpl_bulk_writer.infrastructure.runtime import SlotBasedTaskExecutor

__all__ = [
    "DelimitedTextEncoder",
    "InMemoryFileSystem",
    "InMemoryFileSystemRegistry",
    "OrcColumnarEncoder",
    "S3FileSystem",
    "SlotBasedTaskExecutor",
    "ThresholdDirtyRecordCollector",
    "build_encoder_factories",
]
