# tests/test_section_info.py

import pytest

from models.section_info import (
    AggrColHdr,
    AggrRowHdr,
    NumScoreColHdr,
    SectionInfo,
    StudentColHdr,
    StudentRowHdr,
    TextScoreColHdr,
    col_hdr_from_dict,
    row_hdr_from_dict,
)


def test_section_info_to_dict(sample_section_info):
    data = sample_section_info.to_dict()

    assert data["id"] == "cs101"
    assert data["name"] == "CS 101"
    assert [h["id"] for h in data["col_hdrs"]] == [
        "id",
        "first_name",
        "last_name",
        "quiz1",
        "quiz2",
        "grade",
        "total",
    ]
    assert data["col_hdrs"][3] == {
        "kind": "numScore",
        "id": "quiz1",
        "name": "quiz1",
        "min": 0,
        "max": 10,
    }
    assert data["row_hdrs"][0] == {
        "kind": "aggrRow",
        "id": "avg",
        "aggr_fn_name": "avg",
        "args": [],
    }


def test_section_info_from_dict(sample_section_info):
    info = SectionInfo.from_dict(sample_section_info.to_dict())

    assert info == sample_section_info
    assert list(info.col_hdrs) == list(sample_section_info.col_hdrs)
    assert isinstance(info.col_hdrs["grade"], TextScoreColHdr)
    assert info.col_hdrs["grade"].vals == ["A", "B", "C"]
    assert info.col_hdrs["total"].args == ["quiz1", "quiz2"]


def test_section_info_views(sample_section_info):
    assert [h.id for h in sample_section_info.aggr_col_hdrs] == ["total"]
    assert [h.id for h in sample_section_info.aggr_row_hdrs] == ["avg", "count"]
    assert sample_section_info.non_student_col_ids == ["quiz1", "quiz2", "grade", "total"]
    assert sample_section_info.raw_col_ids == [
        "id",
        "first_name",
        "last_name",
        "quiz1",
        "quiz2",
        "grade",
    ]
    assert sample_section_info.is_aggr_row("avg")
    assert not sample_section_info.is_aggr_row("s1")


def test_student_row_hdr_is_not_aggregate():
    info = SectionInfo("sec", [StudentColHdr("id")], [StudentRowHdr("s1")])
    assert not info.is_aggr_row("s1")
    assert row_hdr_from_dict({"kind": "student", "id": "s1"}) == StudentRowHdr("s1")


def test_unknown_header_kind():
    with pytest.raises(ValueError):
        col_hdr_from_dict({"kind": "formula", "id": "x"})

    with pytest.raises(ValueError):
        row_hdr_from_dict({"kind": "formula", "id": "x"})


def test_invalid_headers():
    with pytest.raises(ValueError):
        NumScoreColHdr("q", 10, 0)

    with pytest.raises(ValueError):
        StudentColHdr("email")

    with pytest.raises(ValueError):
        SectionInfo("sec", [NumScoreColHdr("q", 0, 1), TextScoreColHdr("q", ["a"])])


def test_student_col_hdr_key_defaults_to_id():
    assert StudentColHdr("last_name").key == "last_name"
    assert StudentColHdr("surname", key="last_name").key == "last_name"


def test_aggr_col_hdr_from_dict():
    hdr = col_hdr_from_dict({"kind": "aggrCol", "id": "t", "aggr_fn_name": "sum"})

    assert isinstance(hdr, AggrColHdr)
    assert hdr.args == []
    assert hdr.name == "t"
    assert not hdr.is_scorable


def test_aggr_row_hdr_args():
    hdr = AggrRowHdr("top", "max", ["x"])
    assert row_hdr_from_dict(hdr.to_dict()).args == ["x"]
