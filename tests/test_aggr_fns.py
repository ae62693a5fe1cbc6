# tests/test_aggr_fns.py

import pytest

from core.aggr_fns import COL_AGGR_FNS, ROW_AGGR_FNS
from core.response import ErrorCode
from models.section_info import (
    AggrRowHdr,
    NumScoreColHdr,
    SectionInfo,
    StudentColHdr,
    TextScoreColHdr,
)


@pytest.fixture
def info():
    return SectionInfo(
        "sec",
        [
            StudentColHdr("id"),
            NumScoreColHdr("hw1", 0, 10),
            NumScoreColHdr("hw2", 0, 10),
            NumScoreColHdr("hw3", 0, 10),
            TextScoreColHdr("note", ["ok", "late"]),
        ],
        [AggrRowHdr("avg", "avg")],
    )


@pytest.fixture
def data():
    return {
        "avg": {"id": "avg", "hw1": 100, "hw2": None, "hw3": None, "note": None},
        "s1": {"id": "s1", "hw1": 4, "hw2": 8, "hw3": 10, "note": "ok"},
        "s2": {"id": "s2", "hw1": 6, "hw2": None, "hw3": 2, "note": None},
    }


@pytest.mark.parametrize(
    "name, expected",
    [("sum", 22), ("avg", 22 / 3), ("min", 4), ("max", 10), ("count", 3), ("dropLowAvg", 9)],
)
def test_row_fns_default_to_numeric_columns(info, data, name, expected):
    response = ROW_AGGR_FNS[name](info, data, "s1", [])
    assert response.success
    assert response.data["value"] == pytest.approx(expected)


def test_row_fn_with_args_skips_missing(info, data):
    assert ROW_AGGR_FNS["sum"](info, data, "s2", ["hw1", "hw2"]).data["value"] == 6
    assert ROW_AGGR_FNS["count"](info, data, "s2", ["hw1", "hw2"]).data["value"] == 1


def test_row_fns_on_empty_row(info, data):
    data["s2"] = {"id": "s2", "hw1": None, "hw2": None, "hw3": None, "note": None}

    assert ROW_AGGR_FNS["sum"](info, data, "s2", []).data["value"] == 0
    assert ROW_AGGR_FNS["avg"](info, data, "s2", []).data["value"] is None
    assert ROW_AGGR_FNS["dropLowAvg"](info, data, "s2", []).data["value"] is None


def test_row_fn_unknown_column(info, data):
    response = ROW_AGGR_FNS["sum"](info, data, "s1", ["hw9"])
    assert not response.success
    assert response.error == ErrorCode.BAD_CONTENT


def test_col_fns_ignore_aggregate_rows(info, data):
    assert COL_AGGR_FNS["sum"](info, data, "hw1", []).data["value"] == 10
    assert COL_AGGR_FNS["avg"](info, data, "hw1", []).data["value"] == 5
    assert COL_AGGR_FNS["min"](info, data, "hw2", []).data["value"] == 8
    assert COL_AGGR_FNS["max"](info, data, "hw3", []).data["value"] == 10
    assert COL_AGGR_FNS["count"](info, data, "hw2", []).data["value"] == 1


def test_col_fns_on_text_column(info, data):
    assert COL_AGGR_FNS["avg"](info, data, "note", []).data["value"] is None
    assert COL_AGGR_FNS["count"](info, data, "note", []).data["value"] == 1
