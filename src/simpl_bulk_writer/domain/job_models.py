"""Validated job and task configuration models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class FileFormat(StrEnum):
    """Output encodings, keyed by the job description file type tag."""

    DELIMITED = "TEXT"
    COLUMNAR = "ORC"


class WriteMode(StrEnum):
    """Policy applied to pre-existing directory content before writing."""

    TRUNCATE = "truncate"
    APPEND = "append"
    NONCONFLICT = "nonconflict"


class Compression(StrEnum):
    """Compression codecs across both output encodings."""

    NONE = "NONE"
    GZIP = "GZIP"
    BZIP2 = "BZIP2"
    ZLIB = "ZLIB"
    SNAPPY = "SNAPPY"


class ColumnType(StrEnum):
    """Column types accepted in a job description."""

    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INT = "INT"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    VARCHAR = "VARCHAR"
    CHAR = "CHAR"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"


ALLOWED_COMPRESSIONS: dict[FileFormat, frozenset[Compression]] = {
    FileFormat.DELIMITED: frozenset({Compression.GZIP, Compression.BZIP2}),
    FileFormat.COLUMNAR: frozenset({Compression.NONE, Compression.ZLIB, Compression.SNAPPY}),
}

DEFAULT_ENCODING = "UTF-8"


class JobModel(BaseModel):
    """Base model for immutable job description payloads."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class ColumnSpec(JobModel):
    """One declared output column."""

    name: str
    type: ColumnType


class JobConfig(JobModel):
    """Normalized job description, frozen once validation succeeds."""

    default_fs: str = Field(alias="defaultFS")
    location: str = Field(alias="path")
    file_format: FileFormat = Field(alias="fileType")
    file_name_prefix: str = Field(alias="fileName")
    columns: tuple[ColumnSpec, ...] = Field(alias="column")
    write_mode: WriteMode = Field(alias="writeMode")
    field_delimiter: str = Field(alias="fieldDelimiter")
    compression: Compression | None = Field(default=None, alias="compress")
    encoding: str = DEFAULT_ENCODING

    @property
    def target_uri(self) -> str:
        """Fully qualified URI of the output directory."""

        return f"{self.default_fs}{self.location}"


class TaskConfig(JobConfig):
    """Job configuration bound to one exclusively-owned output identifier."""

    output_uri: str = Field(alias="outputUri")

    @classmethod
    def bind(cls, job: JobConfig, output_uri: str) -> TaskConfig:
        """Clone ``job`` and attach the task's output identifier."""

        return cls.model_validate({**job.model_dump(), "output_uri": output_uri})


__all__ = [
    "ALLOWED_COMPRESSIONS",
    "ColumnSpec",
    "ColumnType",
    "Compression",
    "DEFAULT_ENCODING",
    "FileFormat",
    "JobConfig",
    "TaskConfig",
    "WriteMode",
]
