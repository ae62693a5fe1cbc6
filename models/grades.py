# models/grades.py

"""
The Grades model is the in-memory "source of truth" for students, section schemas, and section score tables.

Students are stored globally and shared across sections. Each section has a `SectionInfo` describing its
columns and rows, and a score table mapping row ids (student ids or aggregate row ids) to column entries.

Every mutation that changes a section's table triggers a full, two-phase recomputation of its aggregates:
    1. Row aggregates: for every row and every `AggrColHdr`, the named row-aggregate function computes that cell.
    2. Column aggregates: for every non-identity column and every `AggrRowHdr`, the named column-aggregate
       function computes that cell.
Column aggregates therefore see the row aggregates of the same pass, but row aggregates never see the
column aggregates of the same pass. Recomputation is not incremental: its cost is
O(rows x aggregate columns + columns x aggregate rows) per write, which suits class-sized rosters.

Mutations are staged on a copy of the section table and committed only after recomputation succeeds,
so a failed call never leaves a partial write behind.

All public methods return a `Response` and never raise for invalid input.
"""

from __future__ import annotations

import logging
import traceback

from core.response import ErrorCode, Response
from core.validation import validate_score
from models.section_info import (
    ColHdr,
    SectionInfo,
    StudentColHdr,
)
from models.student import Student
from models.types import ColAggrFn, Entry, RowAggrFn, RowData, SectionData

logger = logging.getLogger(__name__)


class Grades:

    def __init__(
        self,
        row_aggr_fns: dict[str, RowAggrFn],
        col_aggr_fns: dict[str, ColAggrFn],
    ):
        self._row_aggr_fns: dict[str, RowAggrFn] = dict(row_aggr_fns)
        self._col_aggr_fns: dict[str, ColAggrFn] = dict(col_aggr_fns)
        self._students: dict[str, Student] = {}
        self._section_infos: dict[str, SectionInfo] = {}
        self._sections: dict[str, SectionData] = {}

    # === properties ===

    @property
    def students(self) -> dict[str, Student]:
        return self._students

    @property
    def section_infos(self) -> dict[str, SectionInfo]:
        return self._section_infos

    # === data accessors ===

    def get_student(self, student_id: str) -> Response:
        """
        Finds a `Student` by id.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the student is known.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NOT_FOUND` if the student id is unknown.
                - data (dict): On success, "record" (Student) holds the matched student.
        """
        student = self._students.get(student_id)

        if student is None:
            return Response.not_found(f'Unknown student id "{student_id}".')

        return Response.succeed(data={"record": student})

    def get_section_info(self, section_id: str) -> Response:
        """
        Finds the `SectionInfo` for a section id.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the section is known.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NOT_FOUND` if the section id is unknown.
                - data (dict): On success, "record" (SectionInfo) holds the section's schema.
        """
        info = self._section_infos.get(section_id)

        if info is None:
            return Response.not_found(f'Unknown section id "{section_id}".')

        return Response.succeed(data={"record": info})

    def get_enrolled_student_ids(self, section_id: str) -> Response:
        info_response = self.get_section_info(section_id)

        if not info_response.success:
            return info_response

        info: SectionInfo = info_response.data["record"]
        student_ids = [
            row_id for row_id in self._sections[section_id] if not info.is_aggr_row(row_id)
        ]

        return Response.succeed(data={"student_ids": student_ids})

    def is_enrolled(self, section_id: str, student_id: str) -> bool:
        info = self._section_infos.get(section_id)

        if info is None or info.is_aggr_row(student_id):
            return False

        return student_id in self._sections.get(section_id, {})

    def get_entry(self, section_id: str, row_id: str, col_id: str) -> Response:
        """
        Returns the entry stored at [section_id][row_id][col_id].

        Args:
            section_id (str): The id of the section.
            row_id (str): A student id or an aggregate row id.
            col_id (str): A column id declared in the section's `SectionInfo`.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the cell exists.
                    - False if the section, row, or column cannot be resolved.
                - detail (str | None):
                    - On failure, a human-readable explanation of the problem.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NOT_FOUND` for an unknown section, row, or column.
                    - `ErrorCode.BAD_CONTENT` if `row_id` is a known student who is not enrolled.
                - status_code (int | None):
                    - 200 on success
                    - 404 or 422 on failure
                - data (dict): Payload with the following keys:
                    - On success:
                        - "entry" (Entry): The stored value, which may be a computed aggregate.

        Notes:
            - This method is read-only and does not trigger recomputation.
        """
        info_response = self.get_section_info(section_id)

        if not info_response.success:
            return info_response

        info: SectionInfo = info_response.data["record"]

        if col_id not in info.col_hdrs:
            return Response.not_found(
                f'Unknown column id "{col_id}" in section "{section_id}".'
            )

        row_response = self._check_row_id(section_id, row_id)

        if not row_response.success:
            return row_response

        return Response.succeed(
            data={"entry": self._sections[section_id][row_id].get(col_id)}
        )

    def get_section_data(
        self,
        section_id: str,
        row_ids: list[str] | None = None,
        col_ids: list[str] | None = None,
    ) -> Response:
        """
        Returns the full table for a section, including aggregate rows and columns.

        Args:
            section_id (str): The id of the section.
            row_ids (list[str] | None): If non-empty, only these rows are returned, in the given order.
            col_ids (list[str] | None): If non-empty and `row_ids` is empty, every row is projected to these
                columns, in the given order.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the table was produced.
                    - False if recomputation failed or an id cannot be resolved.
                - detail (str | None):
                    - On failure, a human-readable explanation of the problem.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NOT_FOUND` for an unknown section, row, or column.
                    - `ErrorCode.BAD_CONTENT` if a requested row is a known student who is not enrolled.
                    - Any error produced by an aggregate function during recomputation.
                - status_code (int | None):
                    - 200 on success
                    - 404, 422, or 500 on failure
                - data (dict): Payload with the following keys:
                    - On success:
                        - "section_data" (SectionData): A copy of the requested rows.

        Notes:
            - Aggregates are recomputed before the table is read.
            - When both `row_ids` and `col_ids` are given, row selection takes precedence and every column is
              returned for the selected rows.
            - With no filters, rows are returned in insertion order: aggregate rows first, then students in
              enrollment order.
        """
        if section_id in self._section_infos:
            recompute_response = self.recompute(section_id)

            if not recompute_response.success:
                return recompute_response

        info_response = self.get_section_info(section_id)

        if not info_response.success:
            return info_response

        info: SectionInfo = info_response.data["record"]
        section = self._sections[section_id]
        row_ids = row_ids or []
        col_ids = col_ids or []

        for row_id in row_ids:
            row_response = self._check_row_id(section_id, row_id)

            if not row_response.success:
                return row_response

        for col_id in col_ids:
            if col_id not in info.col_hdrs:
                return Response.not_found(
                    f'Unknown column id "{col_id}" in section "{section_id}".'
                )

        if row_ids:
            result = {row_id: dict(section[row_id]) for row_id in row_ids}

        elif col_ids:
            result = {
                row_id: {col_id: row.get(col_id) for col_id in col_ids}
                for row_id, row in section.items()
            }

        else:
            result = _copy_section_data(section)

        return Response.succeed(data={"section_data": result})

    # === data manipulators ===

    # --- student manipulation ---

    def add_student(self, student: Student) -> Response:
        """
        Adds or replaces a `Student` in the global student mapping.

        Returns:
            Response: Always successful; the operation is an idempotent upsert.

        Notes:
            - Student ids are not checked against aggregate row ids. A student whose id matches an aggregate
              row of a section can be added but is refused by `enroll_student` for that section.
        """
        self._students[student.id] = student

        return Response.succeed(detail=f"{student.full_name} successfully added.")

    # --- section info manipulation ---

    def check_section_info(self, info: SectionInfo) -> Response:
        """
        Verifies that every aggregate header in `info` names a registered aggregate function.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if every aggregate function name is known.
                - error (ErrorCode | str | None):
                    - `ErrorCode.BAD_CONTENT` if an aggregate column names an unknown row-aggregate function,
                      or an aggregate row names an unknown column-aggregate function.
        """
        for col_hdr in info.aggr_col_hdrs:
            if col_hdr.aggr_fn_name not in self._row_aggr_fns:
                return Response.bad_content(
                    f'Unknown aggregate function "{col_hdr.aggr_fn_name}" for column "{col_hdr.id}".'
                )

        for row_hdr in info.aggr_row_hdrs:
            if row_hdr.aggr_fn_name not in self._col_aggr_fns:
                return Response.bad_content(
                    f'Unknown aggregate function "{row_hdr.aggr_fn_name}" for row "{row_hdr.id}".'
                )

        return Response.succeed()

    def add_section_info(self, info: SectionInfo) -> Response:
        """
        Adds or replaces the `SectionInfo` for `info.id`.

        Args:
            info (SectionInfo): The section schema.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the section was created or replaced.
                    - False if an aggregate function name is unknown or recomputation failed.
                - error (ErrorCode | str | None):
                    - `ErrorCode.BAD_CONTENT` for an unknown aggregate function name.
                    - Any error produced by an aggregate function during recomputation.

        Notes:
            - Replacing a section discards its previous table, including enrollments and scores.
            - A data row is created for every aggregate row, seeded with placeholder identity fields.
            - Aggregate row ids share the row namespace with student ids. Known students whose id matches an
              aggregate row are not rejected here, but can no longer be enrolled in this section.
        """
        check_response = self.check_section_info(info)

        if not check_response.success:
            return check_response

        return self._commit(info, _new_section_data(info))

    def add_section_info_no_check(self, info: SectionInfo) -> Response:
        """Installs `info` and a fresh table without checking function names or recomputing."""
        self._section_infos[info.id] = info
        self._sections[info.id] = _new_section_data(info)

        return Response.succeed()

    def remove_section(self, section_id: str) -> Response:
        if section_id not in self._section_infos:
            return Response.not_found(f'Unknown section id "{section_id}".')

        del self._section_infos[section_id]
        del self._sections[section_id]

        return Response.succeed(detail=f'Section "{section_id}" successfully removed.')

    def clear(self) -> Response:
        self._students.clear()
        self._section_infos.clear()
        self._sections.clear()

        return Response.succeed()

    # --- enrollment manipulation ---

    def check_enroll_student(self, section_id: str, student_id: str) -> Response:
        """
        Errors:
            NOT_FOUND: unknown section_id or student_id.
            BAD_CONTENT: student_id is also an aggregate row id of the section.
        """
        info = self._section_infos.get(section_id)

        if info is None:
            return Response.not_found(f'Unknown section id "{section_id}".')

        if student_id not in self._students:
            return Response.not_found(f'Unknown student id "{student_id}".')

        if info.is_aggr_row(student_id):
            return Response.bad_content(
                f'Student id "{student_id}" clashes with an aggregate row of section "{section_id}".'
            )

        return Response.succeed()

    def enroll_student(self, section_id: str, student_id: str) -> Response:
        """
        Enrolls the student `student_id` in section `section_id`.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the student is enrolled (including when already enrolled).
                    - False if either id is unknown or recomputation failed.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NOT_FOUND` for an unknown section or student.
                    - `ErrorCode.BAD_CONTENT` if the student id is also an aggregate row id of the section.

        Notes:
            - Enrollment is idempotent: re-enrolling leaves the existing row untouched.
            - A new row copies the student's identity fields and starts every other column as None.
        """
        check_response = self.check_enroll_student(section_id, student_id)

        if not check_response.success:
            return check_response

        if self.is_enrolled(section_id, student_id):
            return Response.succeed(detail="Student is already enrolled.")

        info = self._section_infos[section_id]
        data = _copy_section_data(self._sections[section_id])
        data[student_id] = _new_student_row(info, student_id, self._students[student_id])

        return self._commit(info, data)

    def enroll_student_no_check(self, section_id: str, student_id: str) -> Response:
        """Creates the student's row if missing, without checking ids or recomputing."""
        info = self._section_infos[section_id]
        section = self._sections[section_id]

        if student_id not in section:
            section[student_id] = _new_student_row(
                info, student_id, self._students.get(student_id)
            )

        return Response.succeed()

    # --- score manipulation ---

    def check_add_score(
        self, section_id: str, student_id: str, col_id: str, score: Entry
    ) -> Response:
        """
        Errors:
            NOT_FOUND: unknown section_id, student_id or col_id.
            BAD_CONTENT: student not enrolled in section, or score inappropriate for col_id.
        """
        info_response = self.get_section_info(section_id)

        if not info_response.success:
            return info_response

        info: SectionInfo = info_response.data["record"]

        if student_id not in self._students:
            return Response.not_found(f'Unknown student id "{student_id}".')

        col_hdr: ColHdr | None = info.col_hdrs.get(col_id)

        if col_hdr is None:
            return Response.not_found(
                f'Unknown column id "{col_id}" in section "{section_id}".'
            )

        if not self.is_enrolled(section_id, student_id):
            return Response.bad_content(
                f'Student "{student_id}" is not enrolled in section "{section_id}".'
            )

        return validate_score(col_hdr, score)

    def add_score(
        self, section_id: str, student_id: str, col_id: str, score: Entry
    ) -> Response:
        """
        Adds or replaces the score of `student_id` for column `col_id` in section `section_id`.

        Args:
            section_id (str): The id of the section.
            student_id (str): The id of an enrolled student.
            col_id (str): The id of a numeric or text score column.
            score (Entry): The new value, or None to clear the cell.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the score was stored and aggregates recomputed.
                    - False if the request was rejected or recomputation failed.
                - detail (str | None):
                    - On failure, a human-readable explanation of the problem.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NOT_FOUND` for an unknown section, student, or column.
                    - `ErrorCode.BAD_CONTENT` if the student is not enrolled or the score fails validation.
                    - Any error produced by an aggregate function during recomputation.
                - status_code (int | None):
                    - 200 on success
                    - 404, 422, or 500 on failure
                - data (dict | None):
                    - Always None, this method does not return any payload.

        Notes:
            - On any failure the section table is left exactly as it was before the call.
        """
        check_response = self.check_add_score(section_id, student_id, col_id, score)

        if not check_response.success:
            return check_response

        info = self._section_infos[section_id]
        data = _copy_section_data(self._sections[section_id])
        data[student_id][col_id] = score

        return self._commit(info, data)

    def add_score_no_check(
        self, section_id: str, student_id: str, col_id: str, score: Entry
    ) -> Response:
        """Stores `score` directly, without validation or recomputation."""
        self._sections[section_id].setdefault(student_id, {})[col_id] = score

        return Response.succeed()

    # --- aggregate computation ---

    def recompute(self, section_id: str) -> Response:
        """
        Runs the two-phase aggregate computation for `section_id`.

        Errors:
            NOT_FOUND: unknown section_id.
            Any error produced by an aggregate function.
        """
        info_response = self.get_section_info(section_id)

        if not info_response.success:
            return info_response

        info: SectionInfo = info_response.data["record"]

        return self._commit(info, _copy_section_data(self._sections[section_id]))

    def _commit(self, info: SectionInfo, data: SectionData) -> Response:
        """Recomputes aggregates over the staged `data`, and stores it only if that succeeds."""
        compute_response = self._compute_aggregates(info, data)

        if not compute_response.success:
            logger.warning(
                "Aggregate recomputation failed for section %s: %s",
                info.id,
                compute_response.detail,
            )
            return compute_response

        self._section_infos[info.id] = info
        self._sections[info.id] = data

        return Response.succeed()

    def _compute_aggregates(self, info: SectionInfo, data: SectionData) -> Response:
        # phase 1: row aggregates, for every row (student or aggregate)
        for row_id in list(data):
            for col_hdr in info.aggr_col_hdrs:
                row_fn = self._row_aggr_fns.get(col_hdr.aggr_fn_name)

                if row_fn is None:
                    return Response.bad_content(
                        f'Unknown aggregate function "{col_hdr.aggr_fn_name}" for column "{col_hdr.id}".'
                    )

                result = _call_aggr_fn(row_fn, info, data, row_id, col_hdr.args)

                if not result.success:
                    return result

                data[row_id][col_hdr.id] = result.data.get("value")

        # phase 2: column aggregates, which may summarize phase 1 results
        for col_id in info.non_student_col_ids:
            for row_hdr in info.aggr_row_hdrs:
                col_fn = self._col_aggr_fns.get(row_hdr.aggr_fn_name)

                if col_fn is None:
                    return Response.bad_content(
                        f'Unknown aggregate function "{row_hdr.aggr_fn_name}" for row "{row_hdr.id}".'
                    )

                result = _call_aggr_fn(col_fn, info, data, col_id, row_hdr.args)

                if not result.success:
                    return result

                data.setdefault(row_hdr.id, {})[col_id] = result.data.get("value")

        logger.debug(
            "Recomputed aggregates for section %s (%d rows)", info.id, len(data)
        )
        return Response.succeed()

    # === helper methods ===

    def _check_row_id(self, section_id: str, row_id: str) -> Response:
        if row_id in self._sections[section_id]:
            return Response.succeed()

        if row_id in self._students:
            return Response.bad_content(
                f'Student "{row_id}" is not enrolled in section "{section_id}".'
            )

        return Response.not_found(
            f'Unknown row id "{row_id}" in section "{section_id}".'
        )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"Grades(students={len(self._students)}, sections={list(self._section_infos)})"


# === module helpers ===


def _call_aggr_fn(
    fn: RowAggrFn, info: SectionInfo, data: SectionData, key: str, args: list
) -> Response:
    try:
        result = fn(info, data, key, args)

    except Exception as e:
        return Response.fail(
            detail=f"Unexpected error in aggregate function: {e}",
            error=ErrorCode.INTERNAL_ERROR,
            trace=traceback.format_exc(),
        )

    if not isinstance(result, Response):
        return Response.fail(
            detail=f"Aggregate function returned {type(result).__name__}, expected Response.",
            error=ErrorCode.INTERNAL_ERROR,
        )

    return result


def _copy_section_data(section: SectionData) -> SectionData:
    return {row_id: dict(row) for row_id, row in section.items()}


def _placeholder_identity(col_hdr: StudentColHdr, row_id: str) -> Entry:
    return row_id if col_hdr.key == "id" else ""


def _new_section_data(info: SectionInfo) -> SectionData:
    data: SectionData = {}

    for row_hdr in info.aggr_row_hdrs:
        row: RowData = {}

        for col_hdr in info.col_hdrs.values():
            if isinstance(col_hdr, StudentColHdr):
                row[col_hdr.id] = _placeholder_identity(col_hdr, row_hdr.id)
            else:
                row[col_hdr.id] = None

        data[row_hdr.id] = row

    return data


def _new_student_row(
    info: SectionInfo, student_id: str, student: Student | None
) -> RowData:
    row: RowData = {}

    for col_hdr in info.col_hdrs.values():
        if not isinstance(col_hdr, StudentColHdr):
            row[col_hdr.id] = None
        elif student is not None:
            row[col_hdr.id] = student.field(col_hdr.key)
        else:
            row[col_hdr.id] = _placeholder_identity(col_hdr, student_id)

    return row
