"""Delimited text output with optional stream compression."""

from __future__ import annotations

import bz2
import codecs
import gzip
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, BinaryIO, cast

from simpl_bulk_writer.domain.errors import DirtyRecordError
from simpl_bulk_writer.domain.job_models import Compression, TaskConfig
from simpl_bulk_writer.domain.ports import RecordEncoder, WritableSink

_LINE_TERMINATOR = "\n"


class DelimitedTextEncoder(RecordEncoder):
    """Write each record as one line of fields joined by a single delimiter.

    Fields are not quoted. Nulls become empty fields, booleans are written
    as ``true``/``false``, dates and timestamps in ISO format.
    """

    def __init__(
        self,
        sink: WritableSink,
        field_delimiter: str,
        encoding: str,
        compression: Compression | None = None,
    ) -> None:
        self._sink = sink
        self._field_delimiter = field_delimiter
        self._encoder = codecs.getincrementalencoder(encoding)(errors="strict")
        self._stream: BinaryIO | WritableSink = sink
        self._compressor: gzip.GzipFile | bz2.BZ2File | None = None
        if compression is Compression.GZIP:
            self._compressor = gzip.GzipFile(fileobj=cast(BinaryIO, sink), mode="wb")
        elif compression is Compression.BZIP2:
            self._compressor = bz2.BZ2File(cast(BinaryIO, sink), mode="wb")
        if self._compressor is not None:
            self._stream = self._compressor

    @classmethod
    def for_task(cls, task: TaskConfig, sink: WritableSink) -> DelimitedTextEncoder:
        return cls(
            sink,
            field_delimiter=task.field_delimiter,
            encoding=task.encoding,
            compression=task.compression,
        )

    def write(self, values: Sequence[Any]) -> None:
        line = self._field_delimiter.join(_format_field(value) for value in values)
        try:
            payload = self._encoder.encode(line + _LINE_TERMINATOR)
        except UnicodeEncodeError as exc:
            raise DirtyRecordError(f"Record cannot be encoded: {exc}") from exc
        self._stream.write(payload)

    def close(self) -> None:
        tail = self._encoder.encode("", final=True)
        if tail:
            self._stream.write(tail)
        if self._compressor is not None:
            self._compressor.close()
        self._sink.close()


def _format_field(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


__all__ = ["DelimitedTextEncoder"]
