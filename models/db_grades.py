# models/db_grades.py

"""
DbGrades wraps an in-memory `Grades` cache with a durable `GradesDao`.

Mutations are write-ahead: each request is first checked against the cache, then written to storage,
and only after storage succeeds applied to the cache. A storage failure therefore leaves the cache
consistent with the previously durable state. Storage errors are returned unchanged and never retried.

Reads are served from the cache, which `make_db_grades()` rehydrates from storage at startup.
"""

from __future__ import annotations

import logging

from core.response import ErrorCode, Response
from models.grades import Grades
from models.section_info import SectionInfo
from models.student import Student
from models.types import ColAggrFn, Entry, RowAggrFn, SectionData
from persistence.grades_dao import GradesDao, JsonGradesDao, SectionDoc

logger = logging.getLogger(__name__)


async def make_db_grades(
    data_dir: str,
    row_aggr_fns: dict[str, RowAggrFn],
    col_aggr_fns: dict[str, ColAggrFn],
) -> Response:
    """
    Opens a JSON document store in `data_dir` and returns a rehydrated `DbGrades`.

    Returns:
        Response: A structured response with the following contract:
            - success (bool): True if the store was opened and the cache rebuilt.
            - error (ErrorCode | str | None):
                - `ErrorCode.DB` on storage failures.
                - `ErrorCode.BAD_CONTENT` if a stored section names an unknown aggregate function.
            - data (dict): On success, "grades" (DbGrades) holds the durable grades object.
    """
    dao_response = await JsonGradesDao.make(data_dir)

    if not dao_response.success:
        return dao_response

    return await make_db_grades_from_dao(
        dao_response.data["dao"], row_aggr_fns, col_aggr_fns
    )


async def make_db_grades_from_dao(
    dao: GradesDao,
    row_aggr_fns: dict[str, RowAggrFn],
    col_aggr_fns: dict[str, ColAggrFn],
) -> Response:
    """
    Builds a `Grades` cache from every record in `dao`.

    Stored records are replayed in order: students, then for each section its info, its enrollments
    (without enrollment checks), and its scores (without validation), followed by one recomputation.
    """
    cache = Grades(row_aggr_fns, col_aggr_fns)

    students_response = await dao.get_students()

    if not students_response.success:
        return students_response

    for student in students_response.data["records"]:
        cache.add_student(student)

    sections_response = await dao.get_sections()

    if not sections_response.success:
        return sections_response

    section: SectionDoc
    for section in sections_response.data["records"]:
        check_response = cache.check_section_info(section.info)

        if not check_response.success:
            return check_response

        cache.add_section_info_no_check(section.info)

        for student_id in section.enrolled_students:
            cache.enroll_student_no_check(section.id, student_id)

        for student_id, scores in section.scores.items():
            for col_id, score in scores.items():
                cache.add_score_no_check(section.id, student_id, col_id, score)

        recompute_response = cache.recompute(section.id)

        if not recompute_response.success:
            return recompute_response

    logger.info(
        "Rehydrated grades cache: %d students, %d sections",
        len(cache.students),
        len(cache.section_infos),
    )
    return Response.succeed(data={"grades": DbGrades(dao, cache)})


class DbGrades:

    def __init__(self, dao: GradesDao, cache: Grades):
        self._dao = dao
        self._cache = cache

    @property
    def cache(self) -> Grades:
        return self._cache

    # === lifecycle ===

    async def close(self) -> Response:
        return await self._dao.close()

    async def clear(self) -> Response:
        """Removes all students and sections. Errors: DB."""
        result = await self._dao.clear()

        if result.success:
            self._cache.clear()

        return result

    # === students ===

    async def add_student(self, student: Student) -> Response:
        result = await self._dao.add_student(student)

        if result.success:
            self._cache.add_student(student)

        return result

    async def get_student(self, student_id: str) -> Response:
        response = self._cache.get_student(student_id)

        if response.success:
            return response

        result = await self._dao.get_student(student_id)

        if result.success:
            self._cache.add_student(result.data["record"])

        return result

    # === sections ===

    async def add_section_info(self, info: SectionInfo) -> Response:
        """
        Adds or replaces section info.

        Errors:
            BAD_CONTENT: section contains an unknown aggregate function name.
            DB: storage failure.
        """
        check_response = self._cache.check_section_info(info)

        if not check_response.success:
            return check_response

        result = await self._dao.add_section_info(info)

        if not result.success:
            return result

        return self._cache.add_section_info(info)

    async def get_section_info(self, section_id: str) -> Response:
        return self._cache.get_section_info(section_id)

    async def enroll_student(self, section_id: str, student_id: str) -> Response:
        """
        Enrolls `student_id` in `section_id`; re-enrolling is not an error.

        Errors:
            NOT_FOUND: unknown section_id or student_id.
            BAD_CONTENT: student_id is also an aggregate row id of the section.
            DB: storage failure.
        """
        check_response = self._cache.check_enroll_student(section_id, student_id)

        if not check_response.success:
            return check_response

        result = await self._dao.enroll_student(section_id, student_id)

        if not result.success:
            return result

        return self._cache.enroll_student(section_id, student_id)

    async def get_enrolled_student_ids(self, section_id: str) -> Response:
        return self._cache.get_enrolled_student_ids(section_id)

    async def add_score(
        self, section_id: str, student_id: str, col_id: str, score: Entry
    ) -> Response:
        """
        Adds or replaces a score.

        Errors:
            NOT_FOUND: unknown section_id, student_id or col_id.
            BAD_CONTENT: student not enrolled, or score inappropriate for col_id.
            DB: storage failure.
        """
        check_response = self._cache.check_add_score(
            section_id, student_id, col_id, score
        )

        if not check_response.success:
            return check_response

        result = await self._dao.add_score(section_id, student_id, col_id, score)

        if not result.success:
            return result

        return self._cache.add_score(section_id, student_id, col_id, score)

    async def get_entry(self, section_id: str, row_id: str, col_id: str) -> Response:
        return self._cache.get_entry(section_id, row_id, col_id)

    async def get_section_data(
        self,
        section_id: str,
        row_ids: list[str] | None = None,
        col_ids: list[str] | None = None,
    ) -> Response:
        return self._cache.get_section_data(section_id, row_ids, col_ids)

    async def remove_section(self, section_id: str) -> Response:
        """
        Removes section info, enrollments, and scores for `section_id`.

        Errors:
            NOT_FOUND: unknown section_id.
            DB: storage failure.
        """
        result = await self._dao.remove_section(section_id)

        if result.success:
            self._cache.remove_section(section_id)

        return result

    # === convenience methods ===

    async def add_students(self, students: list[Student]) -> Response:
        for student in students:
            result = await self.add_student(student)

            if not result.success:
                return result

        return Response.succeed(detail=f"{len(students)} students successfully added.")

    async def get_raw_data(self, section_id: str) -> Response:
        """Returns identity and score columns (no aggregates) for every enrolled student."""
        info_response = await self.get_section_info(section_id)

        if not info_response.success:
            return info_response

        info: SectionInfo = info_response.data["record"]

        ids_response = await self.get_enrolled_student_ids(section_id)

        if not ids_response.success:
            return ids_response

        student_ids: list[str] = ids_response.data["student_ids"]

        if not student_ids:
            return Response.succeed(data={"section_data": {}})

        data_response = await self.get_section_data(section_id, student_ids)

        if not data_response.success:
            return data_response

        section_data: SectionData = data_response.data["section_data"]
        raw_col_ids = info.raw_col_ids

        return Response.succeed(
            data={
                "section_data": {
                    row_id: {col_id: row.get(col_id) for col_id in raw_col_ids}
                    for row_id, row in section_data.items()
                }
            }
        )

    async def get_student_data(self, section_id: str, student_id: str) -> Response:
        """Returns the single row, aggregates included, for `student_id`."""
        return await self.get_section_data(section_id, [student_id])

    async def get_aggr_rows(self, section_id: str) -> Response:
        info_response = await self.get_section_info(section_id)

        if not info_response.success:
            return info_response

        info: SectionInfo = info_response.data["record"]
        row_ids = [row_hdr.id for row_hdr in info.aggr_row_hdrs]

        if not row_ids:
            return Response.succeed(data={"section_data": {}})

        return await self.get_section_data(section_id, row_ids)

    async def load_section(self, info: SectionInfo, data: SectionData) -> Response:
        """
        Creates or replaces a section and fills it from `data`.

        Every row id in `data` is enrolled (the students must already exist), then every scorable
        entry is added. Identity and aggregate columns in `data` are ignored.

        Errors:
            NOT_FOUND, BAD_CONTENT, DB as appropriate; loading stops at the first failure.
        """
        section_id = info.id

        remove_response = await self.remove_section(section_id)

        if not remove_response.success and remove_response.error is not ErrorCode.NOT_FOUND:
            return remove_response

        info_response = await self.add_section_info(info)

        if not info_response.success:
            return info_response

        for student_id in data:
            enroll_response = await self.enroll_student(section_id, student_id)

            if not enroll_response.success:
                return enroll_response

        for student_id, row in data.items():
            for col_id, score in row.items():
                col_hdr = info.col_hdrs.get(col_id)

                if col_hdr is not None and not col_hdr.is_scorable:
                    continue

                score_response = await self.add_score(
                    section_id, student_id, col_id, score
                )

                if not score_response.success:
                    return score_response

        return Response.succeed(detail=f'Section "{section_id}" successfully loaded.')
