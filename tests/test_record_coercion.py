from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from simpl_bulk_writer.domain.errors import DirtyRecordError
from simpl_bulk_writer.domain.job_models import ColumnSpec, ColumnType
from simpl_bulk_writer.domain.record_coercion import coerce_record


def columns(*types: ColumnType) -> tuple[ColumnSpec, ...]:
    return tuple(
        ColumnSpec(name=f"c{index}", type=column_type) for index, column_type in enumerate(types)
    )


def test_fields_are_converted_to_declared_types() -> None:
    declared = columns(
        ColumnType.BIGINT,
        ColumnType.FLOAT,
        ColumnType.VARCHAR,
        ColumnType.BOOLEAN,
        ColumnType.DATE,
        ColumnType.TIMESTAMP,
    )

    values = coerce_record(
        [" 42 ", "1.5", b"caf\xc3\xa9", "0", datetime(2024, 5, 1, 8), date(2024, 5, 2)],
        declared,
    )

    assert values == [42, 1.5, "café", False, date(2024, 5, 1), datetime(2024, 5, 2)]


def test_nulls_pass_through() -> None:
    assert coerce_record((None, None), columns(ColumnType.INT, ColumnType.DATE)) == [None, None]


def test_integral_floats_are_accepted_for_integer_columns() -> None:
    assert coerce_record((3.0,), columns(ColumnType.SMALLINT)) == [3]


@pytest.mark.parametrize(
    ("column_type", "value"),
    [
        (ColumnType.INT, 1.5),
        (ColumnType.INT, 2**31),
        (ColumnType.SMALLINT, -(2**15) - 1),
        (ColumnType.DOUBLE, "n/a"),
        (ColumnType.BOOLEAN, "yes"),
        (ColumnType.DATE, "01/05/2024"),
        (ColumnType.TIMESTAMP, 1714550400),
        (ColumnType.FLOAT, 1e300),
        (ColumnType.FLOAT, "-3.5e38"),
    ],
)
def test_unconvertible_field_makes_record_dirty(column_type: ColumnType, value: object) -> None:
    with pytest.raises(DirtyRecordError) as exc_info:
        coerce_record((value,), columns(column_type))

    assert "c0" in str(exc_info.value)


@pytest.mark.parametrize("record", [(1, 2), (), "12", 12])
def test_wrong_shape_makes_record_dirty(record: object) -> None:
    with pytest.raises(DirtyRecordError):
        coerce_record(record, columns(ColumnType.INT))  # type: ignore[arg-type]


def test_double_keeps_values_beyond_float_range() -> None:
    assert coerce_record(("1e300",), columns(ColumnType.DOUBLE)) == [1e300]


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), 3.4e38, -3.4e38])
def test_float_accepts_infinities_and_values_inside_its_range(value: float) -> None:
    assert coerce_record((value,), columns(ColumnType.FLOAT)) == [value]


@pytest.mark.parametrize(
    "value",
    [
        datetime(2024, 5, 1, 13, 30, tzinfo=timezone(timedelta(hours=5))),
        "2024-05-01T13:30:00+05:00",
        "2024-05-01T08:30:00Z",
    ],
)
def test_offset_aware_timestamps_become_naive_utc(value: object) -> None:
    assert coerce_record((value,), columns(ColumnType.TIMESTAMP)) == [datetime(2024, 5, 1, 8, 30)]


def test_naive_timestamps_are_kept_as_given() -> None:
    value = datetime(2024, 5, 1, 13, 30)

    assert coerce_record((value,), columns(ColumnType.TIMESTAMP)) == [value]
