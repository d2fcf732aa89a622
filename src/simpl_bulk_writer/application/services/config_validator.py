"""Job description parsing and normalization.

Validation is total: every check runs before any storage call, and either a
frozen `JobConfig` is returned or a `ConfigurationError` naming the offending
value is raised.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import urlsplit

from simpl_bulk_writer.domain.errors import (
    ColumnMissingNameOrTypeError,
    EmptyColumnListError,
    InvalidCompressionError,
    InvalidDefaultFileSystemError,
    InvalidDelimiterError,
    InvalidEncodingError,
    InvalidFileFormatError,
    InvalidLocationError,
    InvalidWriteModeError,
    MissingRequiredKeyError,
    UnsupportedColumnTypeError,
)
from simpl_bulk_writer.domain.job_models import (
    ALLOWED_COMPRESSIONS,
    DEFAULT_ENCODING,
    ColumnSpec,
    ColumnType,
    Compression,
    FileFormat,
    JobConfig,
    WriteMode,
)

KEY_DEFAULT_FS = "defaultFS"
KEY_PATH = "path"
KEY_FILE_TYPE = "fileType"
KEY_FILE_NAME = "fileName"
KEY_COLUMN = "column"
KEY_WRITE_MODE = "writeMode"
KEY_FIELD_DELIMITER = "fieldDelimiter"
KEY_COMPRESS = "compress"
KEY_ENCODING = "encoding"

_WILDCARD_CHARACTERS = ("*", "?")

logger = logging.getLogger(__name__)


def validate_job_description(raw: Mapping[str, Any]) -> JobConfig:
    """Validate a raw job description and return the normalized configuration."""

    default_fs = normalize_default_fs(_required_str(raw, KEY_DEFAULT_FS))
    file_format = parse_file_format(_required_str(raw, KEY_FILE_TYPE))
    location = normalize_location(_required_str(raw, KEY_PATH))
    file_name_prefix = _required_str(raw, KEY_FILE_NAME)
    columns = parse_columns(raw.get(KEY_COLUMN))
    write_mode = parse_write_mode(_required_str(raw, KEY_WRITE_MODE))
    field_delimiter = parse_field_delimiter(raw.get(KEY_FIELD_DELIMITER))
    compression = parse_compression(file_format, raw.get(KEY_COMPRESS))
    encoding = parse_encoding(raw.get(KEY_ENCODING))

    return JobConfig(
        default_fs=default_fs,
        location=location,
        file_format=file_format,
        file_name_prefix=file_name_prefix,
        columns=columns,
        write_mode=write_mode,
        field_delimiter=field_delimiter,
        compression=compression,
        encoding=encoding,
    )


def normalize_default_fs(value: str) -> str:
    """Return ``scheme://authority`` with a lower-case scheme.

    Output identifiers are this URI followed by the output path, so a path,
    query or fragment here is rejected.
    """

    parsed = urlsplit(value.strip())
    if not parsed.scheme or not parsed.netloc:
        raise InvalidDefaultFileSystemError(
            f"Default file system '{value}' must look like scheme://authority."
        )
    if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
        raise InvalidDefaultFileSystemError(
            f"Default file system '{value}' must not carry a path, query or fragment; "
            "put the directory in 'path'."
        )
    return f"{parsed.scheme.lower()}://{parsed.netloc}"


def parse_file_format(value: str) -> FileFormat:
    """Map a case-insensitive file type tag to a `FileFormat`."""

    normalized = value.strip().upper()
    try:
        return FileFormat(normalized)
    except ValueError:
        raise InvalidFileFormatError(
            f"Only TEXT and ORC file types are supported, got '{value}'."
        ) from None


def normalize_location(value: str) -> str:
    """Ensure the output path is absolute, wildcard-free, and ends with '/'."""

    if not value.startswith("/"):
        message = f"Output path '{value}' must be an absolute path."
        logger.error(message)
        raise InvalidLocationError(message)
    if any(character in value for character in _WILDCARD_CHARACTERS):
        message = f"Output path '{value}' must not contain '*' or '?'."
        logger.error(message)
        raise InvalidLocationError(message)
    return value if value.endswith("/") else f"{value}/"


def parse_columns(value: object) -> tuple[ColumnSpec, ...]:
    """Parse the ordered column list; every column needs a name and a type."""

    if not value:
        raise EmptyColumnListError(f"Job description key '{KEY_COLUMN}' must list columns.")
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ColumnMissingNameOrTypeError(
            f"Job description key '{KEY_COLUMN}' must be a list of name/type objects, "
            f"got '{value}'."
        )

    columns: list[ColumnSpec] = []
    for index, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise ColumnMissingNameOrTypeError(
                f"Column #{index} must be an object with 'name' and 'type', got '{item}'."
            )
        name = item.get("name")
        type_name = item.get("type")
        if not _is_present(name) or not _is_present(type_name):
            raise ColumnMissingNameOrTypeError(
                f"Column #{index} must declare both 'name' and 'type', got '{dict(item)}'."
            )
        normalized_type = str(type_name).strip().upper()
        try:
            column_type = ColumnType(normalized_type)
        except ValueError:
            raise UnsupportedColumnTypeError(
                f"Column '{name}' declares unsupported type '{type_name}'."
            ) from None
        columns.append(ColumnSpec(name=str(name).strip(), type=column_type))
    return tuple(columns)


def parse_write_mode(value: str) -> WriteMode:
    """Map a trimmed, case-folded write mode tag to a `WriteMode`."""

    normalized = value.strip().lower()
    try:
        return WriteMode(normalized)
    except ValueError:
        raise InvalidWriteModeError(
            "Only truncate, append and nonconflict write modes are supported, "
            f"got '{value}'."
        ) from None


def parse_field_delimiter(value: object) -> str:
    """Return the delimiter; it must be exactly one character."""

    if value is None:
        raise MissingRequiredKeyError(KEY_FIELD_DELIMITER)
    delimiter = str(value)
    if len(delimiter) != 1:
        raise InvalidDelimiterError(
            f"Field delimiter must be a single character, got '{delimiter}'."
        )
    return delimiter


def parse_compression(file_format: FileFormat, value: object) -> Compression | None:
    """Normalize compression and check it against the file type's allowed set.

    Unset compression means no compression for TEXT and `Compression.NONE`
    for ORC.
    """

    if value is None:
        return Compression.NONE if file_format is FileFormat.COLUMNAR else None

    normalized = str(value).strip().upper()
    allowed = ALLOWED_COMPRESSIONS[file_format]
    try:
        compression = Compression(normalized)
    except ValueError:
        compression = None
    if compression is None or compression not in allowed:
        supported = ", ".join(sorted(allowed))
        raise InvalidCompressionError(
            f"{file_format.value} files support only {supported} compression, got '{value}'."
        )
    return compression


def parse_encoding(value: object) -> str:
    """Return the trimmed encoding name after checking it resolves to a charset."""

    encoding = DEFAULT_ENCODING if value is None else str(value).strip()
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise InvalidEncodingError(f"Unsupported text encoding '{value}'.") from None
    return encoding


def _required_str(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if not _is_present(value):
        raise MissingRequiredKeyError(key)
    return str(value)


def _is_present(value: object) -> bool:
    if value is None:
        return False
    return not (isinstance(value, str) and not value.strip())


__all__ = [
    "KEY_COLUMN",
    "KEY_COMPRESS",
    "KEY_DEFAULT_FS",
    "KEY_ENCODING",
    "KEY_FIELD_DELIMITER",
    "KEY_FILE_NAME",
    "KEY_FILE_TYPE",
    "KEY_PATH",
    "KEY_WRITE_MODE",
    "normalize_default_fs",
    "normalize_location",
    "parse_columns",
    "parse_compression",
    "parse_encoding",
    "parse_field_delimiter",
    "parse_file_format",
    "parse_write_mode",
    "validate_job_description",
]
