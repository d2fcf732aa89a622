"""ORC columnar output backed by pyarrow."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pyarrow as pa
from pyarrow import orc

from simpl_bulk_writer.domain.job_models import ColumnSpec, ColumnType, Compression, TaskConfig
from simpl_bulk_writer.domain.ports import RecordEncoder, WritableSink

_DEFAULT_BATCH_SIZE = 1024

_ARROW_TYPES: dict[ColumnType, pa.DataType] = {
    ColumnType.TINYINT: pa.int8(),
    ColumnType.SMALLINT: pa.int16(),
    ColumnType.INT: pa.int32(),
    ColumnType.BIGINT: pa.int64(),
    ColumnType.FLOAT: pa.float32(),
    ColumnType.DOUBLE: pa.float64(),
    ColumnType.STRING: pa.string(),
    ColumnType.VARCHAR: pa.string(),
    ColumnType.CHAR: pa.string(),
    ColumnType.BOOLEAN: pa.bool_(),
    ColumnType.DATE: pa.date32(),
    ColumnType.TIMESTAMP: pa.timestamp("us"),
}

_ORC_COMPRESSION = {
    Compression.NONE: "uncompressed",
    Compression.ZLIB: "zlib",
    Compression.SNAPPY: "snappy",
}


def build_arrow_schema(columns: Sequence[ColumnSpec]) -> pa.Schema:
    """Map declared columns to an Arrow schema."""

    return pa.schema([pa.field(column.name, _ARROW_TYPES[column.type]) for column in columns])


class OrcColumnarEncoder(RecordEncoder):
    """Buffer records into Arrow batches and write them as ORC stripes."""

    def __init__(
        self,
        sink: WritableSink,
        columns: Sequence[ColumnSpec],
        compression: Compression | None = Compression.NONE,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> None:
        self._sink = sink
        self._schema = build_arrow_schema(columns)
        self._batch_size = max(1, batch_size)
        self._pending: list[list[Any]] = [[] for _ in columns]
        self._pending_rows = 0
        self._rows_flushed = 0
        self._writer = orc.ORCWriter(
            sink,
            compression=_ORC_COMPRESSION[compression or Compression.NONE],
        )

    @classmethod
    def for_task(
        cls,
        task: TaskConfig,
        sink: WritableSink,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> OrcColumnarEncoder:
        return cls(
            sink,
            columns=task.columns,
            compression=task.compression,
            batch_size=batch_size,
        )

    def write(self, values: Sequence[Any]) -> None:
        for column_values, value in zip(self._pending, values):
            column_values.append(value)
        self._pending_rows += 1
        if self._pending_rows >= self._batch_size:
            self._flush()

    def close(self) -> None:
        self._flush()
        if self._rows_flushed == 0:
            # ORC needs at least one write to emit a readable footer.
            self._writer.write(self._schema.empty_table())
        self._writer.close()
        self._sink.close()

    def _flush(self) -> None:
        if self._pending_rows == 0:
            return
        arrays = [
            pa.array(column_values, type=field.type)
            for column_values, field in zip(self._pending, self._schema)
        ]
        self._writer.write(pa.Table.from_arrays(arrays, schema=self._schema))
        self._rows_flushed += self._pending_rows
        self._pending = [[] for _ in self._schema]
        self._pending_rows = 0


__all__ = ["OrcColumnarEncoder", "build_arrow_schema"]
