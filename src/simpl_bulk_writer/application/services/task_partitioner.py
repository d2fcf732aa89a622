"""Derive collision-free task configurations from a directory snapshot."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Iterable

from simpl_bulk_writer.domain.errors import IdentifierNamespaceExhaustedError, PartitioningError
from simpl_bulk_writer.domain.job_models import JobConfig, TaskConfig
from simpl_bulk_writer.domain.ports import FileSystemFacade

_TOKEN_BYTES = 16
_DEFAULT_MAX_ATTEMPTS = 16
_NAME_SEPARATOR = "__"

TokenFactory = Callable[[], str]

logger = logging.getLogger(__name__)


def random_token() -> str:
    """Return a 128-bit hex token; hex output never contains '/'."""

    return secrets.token_hex(_TOKEN_BYTES)


def take_snapshot(file_system: FileSystemFacade, job: JobConfig) -> frozenset[str]:
    """List every identifier under the output path at this instant.

    The snapshot is best-effort and is not kept consistent afterwards.
    """

    if not file_system.exists(job.location):
        return frozenset()
    return frozenset(file_system.list_entries(job.location))


class TaskPartitioner:
    """Mint one exclusively-owned output identifier per task.

    Identifiers have the form ``<defaultFS><path><fileName>__<token>``. The
    working set is seeded from the snapshot and every minted identifier is
    added to it, so the result is pairwise distinct and disjoint from the
    snapshot. Tasks never coordinate at runtime; this step is the only
    place uniqueness is established.
    """

    def __init__(
        self,
        max_attempts: int = _DEFAULT_MAX_ATTEMPTS,
        token_factory: TokenFactory | None = None,
    ) -> None:
        self._max_attempts = max(1, max_attempts)
        self._token_factory = token_factory or random_token

    def partition(
        self,
        job: JobConfig,
        mandatory_number: int,
        existing: Iterable[str],
    ) -> list[TaskConfig]:
        """Return ``mandatory_number`` task configurations."""

        if mandatory_number < 1:
            raise PartitioningError(
                f"Task count must be >= 1, got {mandatory_number}."
            )

        logger.info("Splitting job into %d write tasks.", mandatory_number)
        taken = set(existing)
        base = f"{job.target_uri}{job.file_name_prefix}{_NAME_SEPARATOR}"
        tasks: list[TaskConfig] = []
        for _ in range(mandatory_number):
            identifier = self._mint(base, taken)
            taken.add(identifier)
            logger.info("Split write file name: [%s]", identifier)
            tasks.append(TaskConfig.bind(job, identifier))
        logger.info("Finished splitting job.")
        return tasks

    def _mint(self, base: str, taken: set[str]) -> str:
        for _ in range(self._max_attempts):
            token = self._token_factory()
            if not token or "/" in token:
                raise PartitioningError(f"Token factory returned unusable token '{token}'.")
            candidate = f"{base}{token}"
            if candidate not in taken:
                return candidate
        raise IdentifierNamespaceExhaustedError(
            f"No unused output identifier with base '{base}' after "
            f"{self._max_attempts} attempts."
        )


__all__ = ["TaskPartitioner", "TokenFactory", "random_token", "take_snapshot"]
