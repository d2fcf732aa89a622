"""Application bootstrap/wiring."""

import logging
from urllib.parse import urlparse

from simpl_bulk_writer.application.services import (
    CollectorFactory,
    JobPlanningService,
    LocalJobRunner,
    TaskPartitioner,
)
from simpl_bulk_writer.config import Settings
from simpl_bulk_writer.domain.errors import UnsupportedFileSystemError
from simpl_bulk_writer.domain.job_models import TaskConfig
from simpl_bulk_writer.domain.ports import DirtyRecordCollector, FileSystemFacade, FileSystemFactory
from simpl_bulk_writer.infrastructure.collectors import ThresholdDirtyRecordCollector
from simpl_bulk_writer.infrastructure.encoders import build_encoder_factories
from simpl_bulk_writer.infrastructure.filesystems import (
    InMemoryFileSystemRegistry,
    S3FileSystem,
    build_boto3_s3_client,
)
from simpl_bulk_writer.infrastructure.runtime import SlotBasedTaskExecutor

logger = logging.getLogger(__name__)

S3_SCHEME = "s3"
MEMORY_SCHEME = "mem"


def build_file_system_factory(
    settings: Settings,
    memory_registry: InMemoryFileSystemRegistry | None = None,
) -> FileSystemFactory:
    """Return a factory opening one file system handle per default FS URI.

    ``s3://bucket`` opens a boto3-backed handle. ``mem://name`` opens a
    process-local handle; all handles for the same name share one store.
    """

    registry = memory_registry or InMemoryFileSystemRegistry()

    def open_file_system(uri: str) -> FileSystemFacade:
        scheme = urlparse(uri).scheme.lower()
        if scheme == S3_SCHEME:
            client = build_boto3_s3_client(
                region=settings.aws_region,
                endpoint_url=settings.s3_endpoint_url,
                force_path_style=settings.s3_force_path_style,
            )
            return S3FileSystem(
                uri,
                client,
                multipart_part_size_mb=settings.s3_multipart_part_size_mb,
            )
        if scheme == MEMORY_SCHEME:
            return registry.open(uri)
        raise UnsupportedFileSystemError(
            f"Unsupported default file system '{uri}', expected s3:// or mem://."
        )

    return open_file_system


def _build_partitioner(settings: Settings) -> TaskPartitioner:
    return TaskPartitioner(max_attempts=settings.identifier_max_attempts)


def _build_collector_factory(settings: Settings) -> CollectorFactory:
    def new_collector(task: TaskConfig) -> DirtyRecordCollector:
        logger.debug("Creating dirty-record collector for '%s'.", task.output_uri)
        return ThresholdDirtyRecordCollector(
            limit=settings.dirty_record_limit,
            sample_size=settings.dirty_record_sample_size,
        )

    return new_collector


def build_planning_service(
    settings: Settings,
    file_system_factory: FileSystemFactory | None = None,
) -> JobPlanningService:
    """Compose the planning service graph."""

    return JobPlanningService(
        file_system_factory=file_system_factory or build_file_system_factory(settings),
        partitioner=_build_partitioner(settings),
    )


def build_job_runner(
    settings: Settings,
    file_system_factory: FileSystemFactory | None = None,
) -> LocalJobRunner:
    """Compose an in-process job runner."""

    return LocalJobRunner(
        file_system_factory=file_system_factory or build_file_system_factory(settings),
        encoder_factories=build_encoder_factories(settings.columnar_batch_size),
        collector_factory=_build_collector_factory(settings),
        executor=SlotBasedTaskExecutor(settings.max_parallel_tasks),
        partitioner=_build_partitioner(settings),
    )


__all__ = [
    "MEMORY_SCHEME",
    "S3_SCHEME",
    "build_file_system_factory",
    "build_job_runner",
    "build_planning_service",
]
