# core/aggr_fns.py

"""
Built-in aggregate functions for the Grades engine.

Row-aggregate functions reduce across the columns of a single row and are referenced by `AggrColHdr`.
Their `args` list names the columns to combine; an empty list means every numeric score column.

Column-aggregate functions reduce across the student rows of a single column and are referenced by `AggrRowHdr`.
Aggregate rows are never included in their own inputs.

Every function returns a `Response` whose `data["value"]` holds the computed entry.
Empty or missing inputs yield None (or 0 for counts and sums) rather than an error.

`ROW_AGGR_FNS` and `COL_AGGR_FNS` are the default registries passed to `Grades`.
"""

from __future__ import annotations

from statistics import mean
from typing import Any, Callable

from core.response import Response
from core.validation import is_number
from models.section_info import NumScoreColHdr, SectionInfo
from models.types import ColAggrFn, Entry, RowAggrFn, SectionData


def aggr_value(value: Entry) -> Response:
    return Response.succeed(data={"value": value})


# === row aggregates ===


def _row_entries(
    info: SectionInfo, data: SectionData, row_id: str, args: list[Any]
) -> Response:
    """
    Collects the entries of `row_id` for the columns named in `args`.

    Returns:
        Response: On success, data["entries"] holds the list of entries (None included).
            Fails with `ErrorCode.BAD_CONTENT` if `args` names an unknown column.
    """
    if args:
        col_ids = [str(arg) for arg in args]
    else:
        col_ids = [
            h.id for h in info.col_hdrs.values() if isinstance(h, NumScoreColHdr)
        ]

    unknown = [col_id for col_id in col_ids if col_id not in info.col_hdrs]
    if unknown:
        return Response.bad_content(
            f"Aggregate refers to unknown column(s) in section '{info.id}': {', '.join(unknown)}."
        )

    row = data.get(row_id, {})
    return Response.succeed(data={"entries": [row.get(col_id) for col_id in col_ids]})


def _numeric_row_fn(reduce: Callable[[list[float]], Entry]) -> RowAggrFn:
    def row_fn(
        info: SectionInfo, data: SectionData, row_id: str, args: list[Any]
    ) -> Response:
        entries_response = _row_entries(info, data, row_id, args)

        if not entries_response.success:
            return entries_response

        values = [e for e in entries_response.data["entries"] if is_number(e)]
        return aggr_value(reduce(values))

    return row_fn


def row_count(
    info: SectionInfo, data: SectionData, row_id: str, args: list[Any]
) -> Response:
    entries_response = _row_entries(info, data, row_id, args)

    if not entries_response.success:
        return entries_response

    return aggr_value(sum(1 for e in entries_response.data["entries"] if e is not None))


def _drop_low_avg(values: list[float]) -> Entry:
    if len(values) <= 1:
        return mean(values) if values else None
    return mean(sorted(values)[1:])


# === column aggregates ===


def _col_entries(info: SectionInfo, data: SectionData, col_id: str) -> list[Entry]:
    return [
        row.get(col_id) for row_id, row in data.items() if not info.is_aggr_row(row_id)
    ]


def _numeric_col_fn(reduce: Callable[[list[float]], Entry]) -> ColAggrFn:
    def col_fn(
        info: SectionInfo, data: SectionData, col_id: str, args: list[Any]
    ) -> Response:
        values = [e for e in _col_entries(info, data, col_id) if is_number(e)]
        return aggr_value(reduce(values))

    return col_fn


def col_count(
    info: SectionInfo, data: SectionData, col_id: str, args: list[Any]
) -> Response:
    return aggr_value(
        sum(1 for e in _col_entries(info, data, col_id) if e is not None)
    )


# === registries ===


def _avg(values: list[float]) -> Entry:
    return mean(values) if values else None


def _min(values: list[float]) -> Entry:
    return min(values) if values else None


def _max(values: list[float]) -> Entry:
    return max(values) if values else None


ROW_AGGR_FNS: dict[str, RowAggrFn] = {
    "sum": _numeric_row_fn(sum),
    "avg": _numeric_row_fn(_avg),
    "min": _numeric_row_fn(_min),
    "max": _numeric_row_fn(_max),
    "count": row_count,
    "dropLowAvg": _numeric_row_fn(_drop_low_avg),
}

COL_AGGR_FNS: dict[str, ColAggrFn] = {
    "sum": _numeric_col_fn(sum),
    "avg": _numeric_col_fn(_avg),
    "min": _numeric_col_fn(_min),
    "max": _numeric_col_fn(_max),
    "count": col_count,
}
