from __future__ import annotations

import re
from collections.abc import Iterator

import pytest

from simpl_bulk_writer.application.services import (
    TaskPartitioner,
    random_token,
    take_snapshot,
    validate_job_description,
)
from simpl_bulk_writer.domain.errors import IdentifierNamespaceExhaustedError, PartitioningError
from simpl_bulk_writer.domain.job_models import JobConfig
from simpl_bulk_writer.infrastructure.filesystems import InMemoryFileSystem, InMemoryObjectStore

FS_URI = "mem://cluster"


def make_job(file_type: str = "TEXT") -> JobConfig:
    return validate_job_description(
        {
            "defaultFS": FS_URI,
            "path": "/out/",
            "fileType": file_type,
            "fileName": "day1",
            "column": [{"name": "id", "type": "INT"}],
            "writeMode": "append",
            "fieldDelimiter": ",",
        }
    )


def scripted_tokens(*tokens: str) -> Iterator[str]:
    yield from tokens


def test_random_token_carries_128_bits_and_no_separator() -> None:
    token = random_token()

    assert re.fullmatch(r"[0-9a-f]{32}", token)
    assert "/" not in token


def test_partition_mints_distinct_identifiers_under_the_output_path() -> None:
    job = make_job()
    existing = {f"{FS_URI}/out/day1__old"}

    tasks = TaskPartitioner().partition(job, 3, existing)

    identifiers = [task.output_uri for task in tasks]
    assert len(identifiers) == 3
    assert len(set(identifiers)) == 3
    assert not set(identifiers) & existing
    for identifier in identifiers:
        assert re.fullmatch(rf"{re.escape(FS_URI)}/out/day1__[0-9a-f]{{32}}", identifier)


def test_task_configs_inherit_every_job_field() -> None:
    job = make_job(file_type="ORC")

    (task,) = TaskPartitioner().partition(job, 1, set())

    assert task.default_fs == job.default_fs
    assert task.location == job.location
    assert task.file_format == job.file_format
    assert task.columns == job.columns
    assert task.compression == job.compression
    assert task.output_uri.startswith(job.target_uri)


def test_partition_retries_on_collision_with_snapshot_and_earlier_tasks() -> None:
    job = make_job()
    tokens = scripted_tokens("taken", "a", "a", "b")
    partitioner = TaskPartitioner(token_factory=lambda: next(tokens))

    tasks = partitioner.partition(job, 2, {f"{FS_URI}/out/day1__taken"})

    assert [task.output_uri for task in tasks] == [
        f"{FS_URI}/out/day1__a",
        f"{FS_URI}/out/day1__b",
    ]


def test_partition_gives_up_after_the_retry_cap() -> None:
    job = make_job()
    partitioner = TaskPartitioner(max_attempts=3, token_factory=lambda: "same")

    with pytest.raises(IdentifierNamespaceExhaustedError):
        partitioner.partition(job, 2, set())


def test_partition_rejects_non_positive_task_count() -> None:
    with pytest.raises(PartitioningError):
        TaskPartitioner().partition(make_job(), 0, set())


@pytest.mark.parametrize("token", ["", "a/b"])
def test_partition_rejects_unusable_tokens(token: str) -> None:
    partitioner = TaskPartitioner(token_factory=lambda: token)

    with pytest.raises(PartitioningError):
        partitioner.partition(make_job(), 1, set())


def test_snapshot_is_empty_when_location_is_missing() -> None:
    file_system = InMemoryFileSystem(FS_URI, InMemoryObjectStore())

    assert take_snapshot(file_system, make_job()) == frozenset()


def test_snapshot_lists_every_entry_regardless_of_prefix() -> None:
    store = InMemoryObjectStore()
    store.put("/out/day1__x")
    store.put("/out/unrelated")
    file_system = InMemoryFileSystem(FS_URI, store)

    assert take_snapshot(file_system, make_job()) == frozenset(
        {f"{FS_URI}/out/day1__x", f"{FS_URI}/out/unrelated"}
    )
