"""File system adapter implementations."""

from simpl_bulk_writer.infrastructure.filesystems.in_memory_file_system import (
    InMemoryFileSystem,
    InMemoryFileSystemRegistry,
    InMemoryObjectStore,
)
from simpl_bulk_writer.infrastructure.filesystems.s3_file_system import (
    S3Client,
    S3FileSystem,
    build_boto3_s3_client,
)

__all__ = [
    "InMemoryFileSystem",
    "InMemoryFileSystemRegistry",
    "InMemoryObjectStore",
    "S3Client",
    "S3FileSystem",
    "build_boto3_s3_client",
]
