"""Job planning use cases exposed over HTTP."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from simpl_bulk_writer.application.services.config_validator import validate_job_description
from simpl_bulk_writer.application.services.task_partitioner import TaskPartitioner
from simpl_bulk_writer.application.services.writer_lifecycle import FileWriterJob
from simpl_bulk_writer.domain.job_models import JobConfig, TaskConfig
from simpl_bulk_writer.domain.ports import FileSystemFactory

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class JobPlan:
    """Normalized job plus one task configuration per writer."""

    job: JobConfig
    tasks: list[TaskConfig]


class JobPlanningService:
    """Validate job descriptions and plan their write tasks."""

    def __init__(
        self,
        file_system_factory: FileSystemFactory,
        partitioner: TaskPartitioner | None = None,
    ) -> None:
        self._file_system_factory = file_system_factory
        self._partitioner = partitioner

    async def validate(self, raw_config: Mapping[str, Any]) -> JobConfig:
        """Return the normalized job without touching storage."""

        return validate_job_description(raw_config)

    async def plan(self, raw_config: Mapping[str, Any], parallelism: int) -> JobPlan:
        """Validate, reconcile the target directory, then split into tasks."""

        return await asyncio.to_thread(self._plan, raw_config, parallelism)

    def _plan(self, raw_config: Mapping[str, Any], parallelism: int) -> JobPlan:
        with FileWriterJob(self._file_system_factory, self._partitioner) as job:
            config = job.init(raw_config)
            job.prepare()
            tasks = job.split(parallelism)
            job.post()

        logger.info("Planned %d write tasks for '%s'.", len(tasks), config.target_uri)
        return JobPlan(job=config, tasks=tasks)


__all__ = ["JobPlan", "JobPlanningService"]
