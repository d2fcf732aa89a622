from __future__ import annotations

from collections.abc import Mapping, Sequence

import pytest

from simpl_bulk_writer.application.services import DirectoryReconciler, validate_job_description
from simpl_bulk_writer.domain.errors import (
    DirectoryNotEmptyError,
    PartialDeleteError,
    TargetNotADirectoryError,
)
from simpl_bulk_writer.domain.job_models import JobConfig
from simpl_bulk_writer.infrastructure.filesystems import InMemoryFileSystem, InMemoryObjectStore

FS_URI = "mem://cluster"


def make_job(write_mode: str, path: str = "/out") -> JobConfig:
    return validate_job_description(
        {
            "defaultFS": FS_URI,
            "path": path,
            "fileType": "TEXT",
            "fileName": "day1",
            "column": [{"name": "id", "type": "INT"}],
            "writeMode": write_mode,
            "fieldDelimiter": ",",
        }
    )


def seeded_store(*paths: str) -> InMemoryObjectStore:
    store = InMemoryObjectStore()
    for path in paths:
        store.put(path, b"data")
    return store


class FailingDeleteFileSystem(InMemoryFileSystem):
    """Refuses to delete one identifier and reports it."""

    def __init__(self, store: InMemoryObjectStore, refused: str) -> None:
        super().__init__(FS_URI, store)
        self._refused = refused

    def delete(self, identifiers: Sequence[str]) -> Mapping[str, str | None]:
        allowed = [identifier for identifier in identifiers if identifier != self._refused]
        results = dict(super().delete(allowed))
        if self._refused in identifiers:
            results[self._refused] = "PermissionError: denied"
        return results


class RecordingFileSystem(InMemoryFileSystem):
    """Records every listing and delete request it receives."""

    def __init__(self, store: InMemoryObjectStore) -> None:
        super().__init__(FS_URI, store)
        self.calls: list[str] = []

    def list_entries(self, path: str, prefix: str | None = None) -> list[str]:
        self.calls.append("list_entries")
        return super().list_entries(path, prefix)

    def delete(self, identifiers: Sequence[str]) -> Mapping[str, str | None]:
        self.calls.append("delete")
        return super().delete(identifiers)

def test_missing_location_is_a_no_op_for_every_mode() -> None:
    store = seeded_store("/other/file")
    file_system = InMemoryFileSystem(FS_URI, store)

    for mode in ("truncate", "append", "nonconflict"):
        DirectoryReconciler(file_system).reconcile(make_job(mode))

    assert store.paths() == ["/other/file"]


def test_location_that_is_a_file_is_rejected() -> None:
    store = seeded_store("/out")
    file_system = InMemoryFileSystem(FS_URI, store)

    with pytest.raises(TargetNotADirectoryError) as exc_info:
        DirectoryReconciler(file_system).reconcile(make_job("append"))

    assert "/out/" in str(exc_info.value)


def test_truncate_deletes_only_prefix_matching_entries() -> None:
    store = seeded_store("/out/day1__a", "/out/day1__b", "/out/other")
    file_system = InMemoryFileSystem(FS_URI, store)

    DirectoryReconciler(file_system).reconcile(make_job("truncate"))

    assert store.paths() == ["/out/other"]


def test_truncate_removes_prefix_matching_subdirectories() -> None:
    store = seeded_store("/out/day1_parts/x", "/out/keep")
    file_system = InMemoryFileSystem(FS_URI, store)

    DirectoryReconciler(file_system).reconcile(make_job("truncate"))

    assert store.paths() == ["/out/keep"]


def test_truncate_reports_every_failed_delete() -> None:
    store = seeded_store("/out/day1__a", "/out/day1__b")
    file_system = FailingDeleteFileSystem(store, refused=f"{FS_URI}/out/day1__b")

    with pytest.raises(PartialDeleteError) as exc_info:
        DirectoryReconciler(file_system).reconcile(make_job("truncate"))

    assert exc_info.value.failures == {f"{FS_URI}/out/day1__b": "PermissionError: denied"}
    assert store.paths() == ["/out/day1__b"]


def test_append_never_deletes() -> None:
    store = seeded_store("/out/day1__a", "/out/other")
    file_system = InMemoryFileSystem(FS_URI, store)

    DirectoryReconciler(file_system).reconcile(make_job("append"))

    assert store.paths() == ["/out/day1__a", "/out/other"]


def test_append_neither_lists_nor_deletes_existing_entries() -> None:
    store = seeded_store("/out/day1__a", "/out/other")
    file_system = RecordingFileSystem(store)

    DirectoryReconciler(file_system).reconcile(make_job("append"))

    assert file_system.calls == []
    assert store.paths() == ["/out/day1__a", "/out/other"]


def test_truncate_lists_and_deletes_through_the_file_system() -> None:
    store = seeded_store("/out/day1__a", "/out/other")
    file_system = RecordingFileSystem(store)

    DirectoryReconciler(file_system).reconcile(make_job("truncate"))

    assert file_system.calls == ["list_entries", "delete"]
    assert store.paths() == ["/out/other"]


def test_nonconflict_accepts_empty_directory() -> None:
    store = InMemoryObjectStore()
    store.make_directory("/out")
    file_system = InMemoryFileSystem(FS_URI, store)

    DirectoryReconciler(file_system).reconcile(make_job("nonconflict"))


def test_nonconflict_rejects_any_entry_even_without_the_prefix() -> None:
    store = seeded_store("/out/unrelated", "/out/day1__a")
    file_system = InMemoryFileSystem(FS_URI, store)

    with pytest.raises(DirectoryNotEmptyError) as exc_info:
        DirectoryReconciler(file_system).reconcile(make_job("nonconflict"))

    assert exc_info.value.conflicts == (
        f"{FS_URI}/out/day1__a",
        f"{FS_URI}/out/unrelated",
    )
    assert store.paths() == ["/out/day1__a", "/out/unrelated"]
