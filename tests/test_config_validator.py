from __future__ import annotations

from typing import Any

import pytest

from simpl_bulk_writer.application.services import validate_job_description
from simpl_bulk_writer.domain.errors import (
    ColumnMissingNameOrTypeError,
    ConfigurationError,
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
from simpl_bulk_writer.domain.job_models import ColumnType, Compression, FileFormat, WriteMode


def job_description(**overrides: Any) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "defaultFS": "mem://cluster",
        "path": "/out",
        "fileType": "text",
        "fileName": "day1",
        "column": [
            {"name": "id", "type": "int"},
            {"name": "label", "type": "string"},
        ],
        "writeMode": "append",
        "fieldDelimiter": ",",
    }
    raw.update(overrides)
    return {key: value for key, value in raw.items() if value is not None}


def test_normalizes_a_minimal_text_job() -> None:
    job = validate_job_description(job_description())

    assert job.default_fs == "mem://cluster"
    assert job.location == "/out/"
    assert job.file_format is FileFormat.DELIMITED
    assert job.file_name_prefix == "day1"
    assert [column.type for column in job.columns] == [ColumnType.INT, ColumnType.STRING]
    assert job.write_mode is WriteMode.APPEND
    assert job.field_delimiter == ","
    assert job.compression is None
    assert job.encoding == "UTF-8"
    assert job.target_uri == "mem://cluster/out/"


def test_keeps_trailing_slash_and_strips_default_fs_slash() -> None:
    job = validate_job_description(job_description(defaultFS="mem://cluster/", path="/out/"))

    assert job.location == "/out/"
    assert job.target_uri == "mem://cluster/out/"


def test_default_fs_scheme_is_lower_cased() -> None:
    job = validate_job_description(job_description(defaultFS=" S3://bucket-a "))

    assert job.default_fs == "s3://bucket-a"
    assert job.target_uri == "s3://bucket-a/out/"


@pytest.mark.parametrize(
    "default_fs",
    [
        "s3://bucket-a/warehouse",
        "s3://bucket-a/warehouse/",
        "mem://cluster?replicas=2",
        "mem://cluster#frag",
        "bucket-a",
        "s3://",
    ],
)
def test_rejects_default_fs_that_is_not_scheme_and_authority(default_fs: str) -> None:
    with pytest.raises(InvalidDefaultFileSystemError) as exc_info:
        validate_job_description(job_description(defaultFS=default_fs))

    assert default_fs in str(exc_info.value)


def test_write_mode_and_compression_are_trimmed_and_case_folded() -> None:
    job = validate_job_description(
        job_description(writeMode="  TRUNCATE ", compress=" gzip ", encoding=" latin-1 ")
    )

    assert job.write_mode is WriteMode.TRUNCATE
    assert job.compression is Compression.GZIP
    assert job.encoding == "latin-1"


def test_orc_compression_defaults_to_none() -> None:
    job = validate_job_description(job_description(fileType="ORC"))

    assert job.file_format is FileFormat.COLUMNAR
    assert job.compression is Compression.NONE


@pytest.mark.parametrize(
    ("file_type", "compress"),
    [("TEXT", "GZIP"), ("TEXT", "BZIP2"), ("ORC", "NONE"), ("ORC", "ZLIB"), ("ORC", "SNAPPY")],
)
def test_accepts_compression_allowed_for_file_type(file_type: str, compress: str) -> None:
    job = validate_job_description(job_description(fileType=file_type, compress=compress))

    assert job.compression == Compression(compress)


@pytest.mark.parametrize(
    ("file_type", "compress"),
    [
        ("TEXT", "SNAPPY"),
        ("TEXT", "NONE"),
        ("ORC", "GZIP"),
        ("ORC", "BZIP2"),
        ("ORC", "LZ4"),
        ("TEXT", "  "),
    ],
)
def test_rejects_compression_not_allowed_for_file_type(file_type: str, compress: str) -> None:
    with pytest.raises(InvalidCompressionError):
        validate_job_description(job_description(fileType=file_type, compress=compress))


@pytest.mark.parametrize(
    "missing_key", ["defaultFS", "path", "fileType", "fileName", "writeMode", "fieldDelimiter"]
)
def test_missing_required_key_is_named(missing_key: str) -> None:
    raw = job_description()
    raw.pop(missing_key)

    with pytest.raises(MissingRequiredKeyError) as exc_info:
        validate_job_description(raw)

    assert exc_info.value.key == missing_key
    assert missing_key in str(exc_info.value)


def test_blank_required_value_counts_as_missing() -> None:
    with pytest.raises(MissingRequiredKeyError):
        validate_job_description(job_description(fileName="   "))


@pytest.mark.parametrize("path", ["out", "relative/dir", "/out/*", "/out/day?"])
def test_rejects_relative_or_wildcard_paths(path: str) -> None:
    with pytest.raises(InvalidLocationError) as exc_info:
        validate_job_description(job_description(path=path))

    assert path in str(exc_info.value)


def test_rejects_unknown_file_type() -> None:
    with pytest.raises(InvalidFileFormatError):
        validate_job_description(job_description(fileType="PARQUET"))


def test_rejects_unknown_write_mode() -> None:
    with pytest.raises(InvalidWriteModeError) as exc_info:
        validate_job_description(job_description(writeMode="overwrite"))

    assert "overwrite" in str(exc_info.value)


@pytest.mark.parametrize("delimiter", ["", ",,", "\t\t"])
def test_rejects_delimiter_that_is_not_one_character(delimiter: str) -> None:
    with pytest.raises(InvalidDelimiterError):
        validate_job_description(job_description(fieldDelimiter=delimiter))


def test_accepts_tab_delimiter() -> None:
    job = validate_job_description(job_description(fieldDelimiter="\t"))

    assert job.field_delimiter == "\t"


def test_rejects_unknown_encoding() -> None:
    with pytest.raises(InvalidEncodingError):
        validate_job_description(job_description(encoding="no-such-charset"))


@pytest.mark.parametrize("columns", [[], None])
def test_rejects_empty_column_list(columns: list[Any] | None) -> None:
    raw = job_description()
    raw["column"] = columns
    if columns is None:
        raw.pop("column")

    with pytest.raises(EmptyColumnListError):
        validate_job_description(raw)


@pytest.mark.parametrize(
    "column",
    [{"name": "id"}, {"type": "int"}, {"name": " ", "type": "int"}, "id:int"],
)
def test_rejects_column_without_name_or_type(column: Any) -> None:
    with pytest.raises(ColumnMissingNameOrTypeError):
        validate_job_description(job_description(column=[column]))


def test_rejects_unsupported_column_type() -> None:
    with pytest.raises(UnsupportedColumnTypeError) as exc_info:
        validate_job_description(job_description(column=[{"name": "tags", "type": "array"}]))

    assert "array" in str(exc_info.value)


def test_every_configuration_failure_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        validate_job_description(job_description(writeMode="bogus"))
