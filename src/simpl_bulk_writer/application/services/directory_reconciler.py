"""Write-mode enforcement against the target directory."""

from __future__ import annotations

import logging

from simpl_bulk_writer.domain.errors import (
    DirectoryNotEmptyError,
    PartialDeleteError,
    TargetNotADirectoryError,
)
from simpl_bulk_writer.domain.job_models import JobConfig, WriteMode
from simpl_bulk_writer.domain.ports import FileSystemFacade

logger = logging.getLogger(__name__)


class DirectoryReconciler:
    """Apply the configured write mode once, before partitioning.

    - `truncate` deletes only entries whose name starts with the file name prefix.
    - `append` neither inspects nor deletes anything.
    - `nonconflict` rejects the job when *any* entry exists under the path,
      whether or not it shares the prefix.
    """

    def __init__(self, file_system: FileSystemFacade) -> None:
        self._file_system = file_system

    def reconcile(self, job: JobConfig) -> None:
        """Bring the output directory in line with ``job.write_mode``."""

        location = job.location
        if not self._file_system.exists(location):
            logger.info("Output path '%s' does not exist yet, nothing to reconcile.", location)
            return
        if not self._file_system.is_directory(location):
            raise TargetNotADirectoryError(location)

        if job.write_mode is WriteMode.TRUNCATE:
            self._truncate(location, job.file_name_prefix)
        elif job.write_mode is WriteMode.APPEND:
            logger.info(
                "writeMode append: no cleanup before writing files prefixed '%s' under '%s'.",
                job.file_name_prefix,
                location,
            )
        else:
            self._ensure_empty(location)

    def _truncate(self, location: str, prefix: str) -> None:
        existing = self._file_system.list_entries(location, prefix)
        if not existing:
            return

        logger.info(
            "writeMode truncate: deleting %d entries prefixed '%s' under '%s'.",
            len(existing),
            prefix,
            location,
        )
        results = self._file_system.delete(existing)
        failures = {
            identifier: results.get(identifier) or "no delete result returned"
            for identifier in existing
            if identifier not in results or results[identifier] is not None
        }
        if failures:
            raise PartialDeleteError(location, failures)

    def _ensure_empty(self, location: str) -> None:
        logger.info("writeMode nonconflict: checking '%s' for existing entries.", location)
        existing = self._file_system.list_entries(location)
        if not existing:
            return

        logger.error("Conflicting entries under '%s': [%s]", location, ", ".join(existing))
        raise DirectoryNotEmptyError(location, existing)


__all__ = ["DirectoryReconciler"]
