"""Domain exceptions for bulk file writing."""

from __future__ import annotations

from collections.abc import Mapping, Sequence


class FileWriterError(Exception):
    """Base class for file writer errors."""


class ConfigurationError(FileWriterError):
    """Raised before any I/O when a job description is invalid."""


class MissingRequiredKeyError(ConfigurationError):
    """Raised when a required job description key is absent or blank."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Missing required job description key '{key}'.")
        self.key = key


class InvalidLocationError(ConfigurationError):
    """Raised when the output path is relative or contains wildcards."""


class InvalidDefaultFileSystemError(ConfigurationError):
    """Raised when the default file system is not a bare scheme://authority URI."""


class InvalidFileFormatError(ConfigurationError):
    """Raised when the file type is neither TEXT nor ORC."""


class InvalidWriteModeError(ConfigurationError):
    """Raised when the write mode is not truncate, append or nonconflict."""


class InvalidDelimiterError(ConfigurationError):
    """Raised when the field delimiter is not exactly one character."""


class InvalidCompressionError(ConfigurationError):
    """Raised when compression is not allowed for the declared file type."""


class InvalidEncodingError(ConfigurationError):
    """Raised when the text encoding does not resolve to a known charset."""


class EmptyColumnListError(ConfigurationError):
    """Raised when no columns are declared."""


class ColumnMissingNameOrTypeError(ConfigurationError):
    """Raised when a declared column lacks a name or a type."""


class UnsupportedColumnTypeError(ConfigurationError):
    """Raised when a declared column type cannot be encoded."""


class UnsupportedFileSystemError(ConfigurationError):
    """Raised when no file system adapter serves the default file system URI."""


class ReconciliationError(FileWriterError):
    """Raised when the target directory cannot be brought in line with the write mode."""


class TargetNotADirectoryError(ReconciliationError):
    """Raised when the output path exists but is not a directory."""

    def __init__(self, location: str) -> None:
        super().__init__(
            f"Output path '{location}' exists but is not a directory. "
            "Check for a file with the same name."
        )
        self.location = location


class DirectoryNotEmptyError(ReconciliationError):
    """Raised in nonconflict mode when the output directory has any entry."""

    def __init__(self, location: str, conflicts: Sequence[str]) -> None:
        self.location = location
        self.conflicts = tuple(conflicts)
        super().__init__(
            f"Output path '{location}' is not empty; conflicting entries: "
            f"[{', '.join(self.conflicts)}]."
        )


class PartialDeleteError(ReconciliationError):
    """Raised in truncate mode when one or more entries could not be deleted."""

    def __init__(self, location: str, failures: Mapping[str, str]) -> None:
        self.location = location
        self.failures = dict(failures)
        details = ", ".join(f"{path}: {reason}" for path, reason in self.failures.items())
        super().__init__(
            f"Failed to delete {len(self.failures)} entries under '{location}': [{details}]."
        )


class PartitioningError(FileWriterError):
    """Raised when task configurations cannot be derived."""


class IdentifierNamespaceExhaustedError(PartitioningError):
    """Raised when no unused output identifier was found within the retry cap."""


class TaskIOError(FileWriterError):
    """Raised when a single write task fails; other tasks are unaffected."""


class OutputCreationError(TaskIOError):
    """Raised when the task output object cannot be created."""


class EncoderError(TaskIOError):
    """Raised when an output encoder fails fatally."""


class DirtyRecordLimitExceededError(TaskIOError):
    """Raised by a dirty-record collector once its threshold is exceeded."""

    def __init__(self, limit: int, count: int) -> None:
        super().__init__(f"Dirty record limit {limit} exceeded ({count} dirty records).")
        self.limit = limit
        self.count = count


class DirtyRecordError(FileWriterError):
    """Per-record failure; reported to a collector, never raised out of a task."""


__all__ = [
    "ColumnMissingNameOrTypeError",
    "ConfigurationError",
    "DirectoryNotEmptyError",
    "DirtyRecordError",
    "DirtyRecordLimitExceededError",
    "EmptyColumnListError",
    "EncoderError",
    "FileWriterError",
    "IdentifierNamespaceExhaustedError",
    "InvalidCompressionError",
    "InvalidDefaultFileSystemError",
    "InvalidDelimiterError",
    "InvalidEncodingError",
    "InvalidFileFormatError",
    "InvalidLocationError",
    "InvalidWriteModeError",
    "MissingRequiredKeyError",
    "OutputCreationError",
    "PartialDeleteError",
    "PartitioningError",
    "ReconciliationError",
    "TargetNotADirectoryError",
    "TaskIOError",
    "UnsupportedColumnTypeError",
    "UnsupportedFileSystemError",
]
