# core/validation.py

"""
Pure validation rules for candidate scores.

A score is checked against the header of the column it is written to:
    - None is always valid (it clears the cell).
    - Numeric columns accept an int or float (never a bool) within [min, max], inclusive.
    - Text columns accept a string drawn from the column's allowed values.
    - Identity and aggregate columns accept no score at all.

Violations are reported as `ErrorCode.BAD_CONTENT` responses, never coerced or clamped.
"""

from __future__ import annotations

import math

from core.response import Response
from models.section_info import ColHdr, NumScoreColHdr, TextScoreColHdr
from models.types import Entry


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_score(col_hdr: ColHdr, score: Entry) -> Response:
    """
    Checks whether `score` may be stored in the column described by `col_hdr`.

    Args:
        col_hdr (ColHdr): The header of the target column.
        score (Entry): The candidate value.

    Returns:
        Response: A structured response with the following contract:
            - success (bool):
                - True if the score may be stored.
                - False if the score violates the column's type or constraints.
            - detail (str | None):
                - On failure, a human-readable explanation of the violation.
            - error (ErrorCode | str | None):
                - `ErrorCode.BAD_CONTENT` for any violation.
            - data (dict | None):
                - Always empty, this method does not return any payload.
    """
    if score is None:
        return Response.succeed()

    if isinstance(col_hdr, NumScoreColHdr):
        if not is_number(score):
            return Response.bad_content(
                f"Score {score!r} for column '{col_hdr.id}' is not a number."
            )

        out_of_range = score < col_hdr.min or score > col_hdr.max  # type: ignore[operator]

        if out_of_range or (isinstance(score, float) and not math.isfinite(score)):
            return Response.bad_content(
                f"Score {score!r} for column '{col_hdr.id}' is outside the range [{col_hdr.min}, {col_hdr.max}]."
            )

        return Response.succeed()

    if isinstance(col_hdr, TextScoreColHdr):
        if not isinstance(score, str):
            return Response.bad_content(
                f"Score {score!r} for column '{col_hdr.id}' is not text."
            )

        if score not in col_hdr.vals:
            return Response.bad_content(
                f"Score {score!r} for column '{col_hdr.id}' is not one of the allowed values: {', '.join(col_hdr.vals)}."
            )

        return Response.succeed()

    return Response.bad_content(
        f"Column '{col_hdr.id}' does not accept scores ({col_hdr.kind} column)."
    )


def is_valid_score(col_hdr: ColHdr, score: Entry) -> bool:
    return validate_score(col_hdr, score).success
