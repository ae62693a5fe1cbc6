# tests/test_validation.py

import math

import pytest

from core.response import ErrorCode
from core.validation import is_number, is_valid_score, validate_score
from models.section_info import (
    AggrColHdr,
    NumScoreColHdr,
    StudentColHdr,
    TextScoreColHdr,
)

NUM_COL = NumScoreColHdr("quiz", 0, 10)
TEXT_COL = TextScoreColHdr("grade", ["pass", "fail"])


def test_none_is_always_valid():
    for col_hdr in (NUM_COL, TEXT_COL, AggrColHdr("t", "sum"), StudentColHdr("id")):
        assert validate_score(col_hdr, None).success


@pytest.mark.parametrize("score", [0, 10, 5, 9.99])
def test_numeric_in_range(score):
    assert is_valid_score(NUM_COL, score)


@pytest.mark.parametrize(
    "score", [-0.01, 10.01, math.inf, math.nan, 10**400, -(10**400)]
)
def test_numeric_out_of_range(score):
    response = validate_score(NUM_COL, score)
    assert not response.success
    assert response.error == ErrorCode.BAD_CONTENT
    assert "quiz" in response.detail


def test_numeric_wrong_type():
    assert not is_valid_score(NUM_COL, "5")
    assert not is_valid_score(NUM_COL, False)


def test_text_scores():
    assert is_valid_score(TEXT_COL, "pass")
    assert not is_valid_score(TEXT_COL, "PASS")
    assert validate_score(TEXT_COL, 1).error == ErrorCode.BAD_CONTENT


def test_unscorable_columns_reject_values():
    assert not is_valid_score(AggrColHdr("t", "sum"), 3)
    assert not is_valid_score(StudentColHdr("id"), "s1")


def test_is_number():
    assert is_number(3)
    assert is_number(2.5)
    assert not is_number(True)
    assert not is_number("3")
    assert not is_number(None)
