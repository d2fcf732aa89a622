"""Application services public API."""

from simpl_bulk_writer.application.services.config_validator import validate_job_description
from simpl_bulk_writer.application.services.directory_reconciler import DirectoryReconciler
from simpl_bulk_writer.application.services.job_planning_service import (
    JobPlan,
    JobPlanningService,
)
from simpl_bulk_writer.application.services.job_runner import (
    CollectorFactory,
    JobOutcome,
    LocalJobRunner,
)
from simpl_bulk_writer.application.services.task_partitioner import (
    TaskPartitioner,
    random_token,
    take_snapshot,
)
from simpl_bulk_writer.application.services.write_dispatcher import WriteDispatcher
from simpl_bulk_writer.application.services.writer_lifecycle import FileWriterJob, FileWriterTask

__all__ = [
    "CollectorFactory",
    "DirectoryReconciler",
    "FileWriterJob",
    "FileWriterTask",
    "JobOutcome",
    "JobPlan",
    "JobPlanningService",
    "LocalJobRunner",
    "TaskPartitioner",
    "WriteDispatcher",
    "random_token",
    "take_snapshot",
    "validate_job_description",
]
