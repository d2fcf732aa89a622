"""In-memory file system for local development and tests."""

from __future__ import annotations

import io
import threading
from collections.abc import Mapping, Sequence

from simpl_bulk_writer.domain.ports import FileSystemFacade, WritableSink


class InMemoryObjectStore:
    """Thread-safe object store shared by every handle opened on one URI."""

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}
        self._directories: set[str] = set()
        self._lock = threading.Lock()
        self._open_handles = 0

    @property
    def open_handles(self) -> int:
        """Number of handles acquired and not yet closed."""

        with self._lock:
            return self._open_handles

    def acquire_handle(self) -> None:
        with self._lock:
            self._open_handles += 1

    def release_handle(self) -> None:
        with self._lock:
            self._open_handles -= 1

    def put(self, path: str, payload: bytes = b"") -> None:
        """Store an object, replacing any previous content."""

        with self._lock:
            self._objects[_normalize(path)] = payload

    def get(self, path: str) -> bytes:
        """Return object content; raise `FileNotFoundError` when missing."""

        with self._lock:
            try:
                return self._objects[_normalize(path)]
            except KeyError:
                raise FileNotFoundError(path) from None

    def make_directory(self, path: str) -> None:
        """Register an empty directory."""

        with self._lock:
            self._directories.add(_normalize(path))

    def paths(self) -> list[str]:
        """Return every object path in sorted order."""

        with self._lock:
            return sorted(self._objects)

    def is_object(self, path: str) -> bool:
        with self._lock:
            return _normalize(path) in self._objects

    def is_directory(self, path: str) -> bool:
        normalized = _normalize(path)
        with self._lock:
            if normalized in self._objects:
                return False
            if normalized == "/" or normalized in self._directories:
                return True
            return any(_is_under(candidate, normalized) for candidate in self._all_paths())

    def children(self, path: str) -> list[str]:
        """Return the paths of entries directly under ``path``."""

        directory = _normalize(path)
        base = "" if directory == "/" else directory
        names: set[str] = set()
        with self._lock:
            for candidate in self._all_paths():
                if _is_under(candidate, directory):
                    names.add(candidate[len(base) + 1 :].split("/", 1)[0])
        return [f"{base}/{name}" for name in sorted(names)]

    def create(self, path: str) -> None:
        normalized = _normalize(path)
        with self._lock:
            if normalized in self._objects or normalized in self._directories:
                raise FileExistsError(path)
            self._objects[normalized] = b""

    def remove(self, path: str) -> None:
        normalized = _normalize(path)
        with self._lock:
            if self._objects.pop(normalized, None) is not None:
                return
            nested = [
                candidate for candidate in self._all_paths() if _is_under(candidate, normalized)
            ]
            if not nested and normalized not in self._directories:
                raise FileNotFoundError(path)
            for candidate in nested:
                self._objects.pop(candidate, None)
                self._directories.discard(candidate)
            self._directories.discard(normalized)

    def _all_paths(self) -> set[str]:
        return set(self._objects) | self._directories


class _InMemorySink(io.BytesIO):
    """Object sink that publishes its bytes to the store on close."""

    def __init__(self, store: InMemoryObjectStore, path: str) -> None:
        super().__init__()
        self._store = store
        self._path = path
        self._aborted = False

    def close(self) -> None:
        if not self.closed and not self._aborted:
            self._store.put(self._path, self.getvalue())
        super().close()

    def abort(self) -> None:
        if self.closed:
            return
        self._aborted = True
        try:
            self._store.remove(self._path)
        finally:
            super().close()


class InMemoryFileSystem(FileSystemFacade):
    """File system handle over an `InMemoryObjectStore`."""

    def __init__(self, uri: str, store: InMemoryObjectStore | None = None) -> None:
        self._uri = uri.rstrip("/")
        self._store = store or InMemoryObjectStore()
        self._store.acquire_handle()
        self._closed = False

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def store(self) -> InMemoryObjectStore:
        return self._store

    def exists(self, path: str) -> bool:
        self._ensure_open()
        return self._store.is_object(path) or self._store.is_directory(path)

    def is_directory(self, path: str) -> bool:
        self._ensure_open()
        return self._store.is_directory(path)

    def list_entries(self, path: str, prefix: str | None = None) -> list[str]:
        self._ensure_open()
        entries = self._store.children(path)
        if prefix is not None:
            entries = [entry for entry in entries if entry.rsplit("/", 1)[-1].startswith(prefix)]
        return [f"{self._uri}{entry}" for entry in entries]

    def delete(self, identifiers: Sequence[str]) -> Mapping[str, str | None]:
        self._ensure_open()
        results: dict[str, str | None] = {}
        for identifier in identifiers:
            try:
                self._store.remove(self._to_path(identifier))
            except (FileNotFoundError, ValueError) as exc:
                results[identifier] = f"{type(exc).__name__}: {exc}"
            else:
                results[identifier] = None
        return results

    def create_for_write(self, identifier: str) -> WritableSink:
        self._ensure_open()
        path = self._to_path(identifier)
        self._store.create(path)
        return _InMemorySink(self._store, path)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store.release_handle()

    def _to_path(self, identifier: str) -> str:
        if identifier.startswith(f"{self._uri}/"):
            return identifier[len(self._uri) :]
        raise ValueError(f"Identifier '{identifier}' is outside file system '{self._uri}'.")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError(f"File system handle for '{self._uri}' is closed.")


class InMemoryFileSystemRegistry:
    """Open handles that share one store per file system URI."""

    def __init__(self) -> None:
        self._stores: dict[str, InMemoryObjectStore] = {}
        self._lock = threading.Lock()

    def store(self, uri: str) -> InMemoryObjectStore:
        """Return the store for ``uri``, creating it on first use."""

        key = uri.rstrip("/")
        with self._lock:
            return self._stores.setdefault(key, InMemoryObjectStore())

    def open(self, uri: str) -> InMemoryFileSystem:
        return InMemoryFileSystem(uri, self.store(uri))


def _normalize(path: str) -> str:
    stripped = path.rstrip("/")
    return stripped or "/"


def _is_under(candidate: str, directory: str) -> bool:
    if directory == "/":
        return candidate != "/"
    return candidate.startswith(f"{directory}/")


__all__ = ["InMemoryFileSystem", "InMemoryFileSystemRegistry", "InMemoryObjectStore"]
