"""Coerce raw record fields to declared column types."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from datetime import date, datetime, timezone
from typing import Any

from simpl_bulk_writer.domain.errors import DirtyRecordError
from simpl_bulk_writer.domain.job_models import ColumnSpec, ColumnType
from simpl_bulk_writer.domain.task_models import Record

_INTEGER_BITS = {
    ColumnType.TINYINT: 8,
    ColumnType.SMALLINT: 16,
    ColumnType.INT: 32,
    ColumnType.BIGINT: 64,
}
_FLOAT32_MAX = 3.4028234663852886e38
_TRUE_LITERALS = frozenset({"true", "1"})
_FALSE_LITERALS = frozenset({"false", "0"})


def coerce_record(record: Record, columns: Sequence[ColumnSpec]) -> list[Any]:
    """Return field values converted to the declared types.

    Raises `DirtyRecordError` when the field count differs from the column
    count or a field cannot be converted. ``None`` passes through as null.
    """

    if isinstance(record, (str, bytes)) or not isinstance(record, Sequence):
        raise DirtyRecordError(
            f"Record must be a sequence of {len(columns)} fields, got {type(record).__name__}."
        )
    if len(record) != len(columns):
        raise DirtyRecordError(
            f"Record has {len(record)} fields, expected {len(columns)} columns."
        )

    values: list[Any] = []
    for column, value in zip(columns, record):
        if value is None:
            values.append(None)
            continue
        converter = _CONVERTERS[column.type]
        try:
            values.append(converter(column.type, value))
        except (TypeError, ValueError, OverflowError) as exc:
            raise DirtyRecordError(
                f"Column '{column.name}' cannot hold {value!r} as {column.type.value}: {exc}"
            ) from exc
    return values


def _to_int(column_type: ColumnType, value: Any) -> int:
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("fractional value")
        result = int(value)
    elif isinstance(value, str):
        result = int(value.strip())
    else:
        result = int(value)
    bound = 1 << (_INTEGER_BITS[column_type] - 1)
    if not -bound <= result < bound:
        raise OverflowError(f"out of range for {column_type.value}")
    return result


def _to_float(column_type: ColumnType, value: Any) -> float:
    result = float(value.strip()) if isinstance(value, str) else float(value)
    if column_type is ColumnType.FLOAT and math.isfinite(result) and abs(result) > _FLOAT32_MAX:
        raise OverflowError("out of range for FLOAT")
    return result


def _to_str(_: ColumnType, value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _to_bool(_: ColumnType, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    literal = str(value).strip().lower()
    if literal in _TRUE_LITERALS:
        return True
    if literal in _FALSE_LITERALS:
        return False
    raise ValueError("expected true/false/1/0")


def _to_date(_: ColumnType, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise TypeError(f"unsupported date value type {type(value).__name__}")


def _to_datetime(_: ColumnType, value: Any) -> datetime:
    if isinstance(value, datetime):
        return _as_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return _as_naive_utc(datetime.fromisoformat(value.strip()))
    raise TypeError(f"unsupported timestamp value type {type(value).__name__}")


def _as_naive_utc(value: datetime) -> datetime:
    # Offset-aware timestamps are stored as UTC wall-clock time in every format.
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


_CONVERTERS: dict[ColumnType, Callable[[ColumnType, Any], Any]] = {
    ColumnType.TINYINT: _to_int,
    ColumnType.SMALLINT: _to_int,
    ColumnType.INT: _to_int,
    ColumnType.BIGINT: _to_int,
    ColumnType.FLOAT: _to_float,
    ColumnType.DOUBLE: _to_float,
    ColumnType.STRING: _to_str,
    ColumnType.VARCHAR: _to_str,
    ColumnType.CHAR: _to_str,
    ColumnType.BOOLEAN: _to_bool,
    ColumnType.DATE: _to_date,
    ColumnType.TIMESTAMP: _to_datetime,
}


__all__ = ["coerce_record"]
