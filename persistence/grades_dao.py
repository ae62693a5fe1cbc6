# persistence/grades_dao.py

"""
Durable storage for students and sections.

`GradesDao` is the asynchronous contract used by `DbGrades`: per-student CRUD by id, per-section CRUD of
(info, enrolled student ids, sparse score table), and bulk listing used to rehydrate the in-memory cache.
Every method returns a `Response`; storage failures are reported as `ErrorCode.DB` with the underlying
message, and are never retried here.

`JsonGradesDao` is a document store kept in a directory as two JSON files:
    - students.json: a list of student records `{"id", "first_name", "last_name"}`.
    - sections.json: a list of section records `{"id", "info", "enrolled_students", "scores"}`.
Each write stages the change on a copy of the documents, writes the affected file, and only then updates
its in-memory documents, so a failed write leaves the store at its previously durable state.
"""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import anyio

from core.response import ErrorCode, Response
from models.section_info import SectionInfo
from models.student import Student
from models.types import Entry

logger = logging.getLogger(__name__)


def database_error(operation: str, error: Exception) -> Response:
    logger.error("%s failed: %s", operation, error)
    return Response.db_error(str(error))


class SectionDoc:
    """The persisted shape of a section: its info, enrolled student ids, and sparse scores."""

    def __init__(
        self,
        info: SectionInfo,
        enrolled_students: list[str] | None = None,
        scores: dict[str, dict[str, Entry]] | None = None,
    ):
        self._info = info
        self._enrolled_students: list[str] = list(enrolled_students or [])
        self._scores: dict[str, dict[str, Entry]] = scores or {}

    @property
    def id(self) -> str:
        return self._info.id

    @property
    def info(self) -> SectionInfo:
        return self._info

    @property
    def enrolled_students(self) -> list[str]:
        return self._enrolled_students

    @property
    def scores(self) -> dict[str, dict[str, Entry]]:
        return self._scores

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "info": self._info.to_dict(),
            "enrolled_students": list(self._enrolled_students),
            "scores": {
                student_id: dict(row) for student_id, row in self._scores.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> SectionDoc:
        return cls(
            info=SectionInfo.from_dict(data["info"]),
            enrolled_students=data.get("enrolled_students", []),
            scores=data.get("scores", {}),
        )


class GradesDao(ABC):

    @abstractmethod
    async def close(self) -> Response: ...

    @abstractmethod
    async def clear(self) -> Response: ...

    # --- students ---

    @abstractmethod
    async def add_student(self, student: Student) -> Response: ...

    @abstractmethod
    async def get_student(self, student_id: str) -> Response:
        """On success, data["record"] holds the `Student`."""

    @abstractmethod
    async def get_students(self) -> Response:
        """On success, data["records"] holds every stored `Student`."""

    # --- sections ---

    @abstractmethod
    async def add_section_info(self, info: SectionInfo) -> Response:
        """Creates or replaces a section document with no enrollments or scores."""

    @abstractmethod
    async def get_section(self, section_id: str) -> Response:
        """On success, data["record"] holds the `SectionDoc`."""

    @abstractmethod
    async def get_sections(self) -> Response:
        """On success, data["records"] holds every stored `SectionDoc`."""

    @abstractmethod
    async def enroll_student(self, section_id: str, student_id: str) -> Response: ...

    @abstractmethod
    async def add_score(
        self, section_id: str, student_id: str, col_id: str, score: Entry
    ) -> Response: ...

    @abstractmethod
    async def remove_section(self, section_id: str) -> Response: ...


class JsonGradesDao(GradesDao):
    STUDENTS_FILE = "students.json"
    SECTIONS_FILE = "sections.json"

    def __init__(
        self,
        data_dir: str,
        students: dict[str, dict[str, Any]] | None = None,
        sections: dict[str, dict[str, Any]] | None = None,
    ):
        self._data_dir = anyio.Path(data_dir)
        self._students: dict[str, dict[str, Any]] = students or {}
        self._sections: dict[str, dict[str, Any]] = sections or {}
        self._closed = False

    @property
    def data_dir(self) -> str:
        return str(self._data_dir)

    # === public classmethods ===

    @classmethod
    async def make(cls, data_dir: str) -> Response:
        """
        Opens (creating if needed) a JSON document store in `data_dir`.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the store was opened.
                - error (ErrorCode | str | None):
                    - `ErrorCode.DB` if the directory cannot be created or a file cannot be read or parsed.
                - data (dict): On success, "dao" (JsonGradesDao) holds the opened store.
        """
        dao = cls(data_dir)

        try:
            await dao._data_dir.mkdir(parents=True, exist_ok=True)
            dao._students = _index_by_id(await dao._read_json(cls.STUDENTS_FILE))
            dao._sections = _index_by_id(await dao._read_json(cls.SECTIONS_FILE))

        except (OSError, ValueError, KeyError, TypeError) as e:
            return database_error("Open", e)

        logger.info(
            "Opened grades store at %s (%d students, %d sections)",
            data_dir,
            len(dao._students),
            len(dao._sections),
        )
        return Response.succeed(data={"dao": dao})

    # === lifecycle ===

    async def close(self) -> Response:
        self._closed = True
        return Response.succeed()

    async def clear(self) -> Response:
        if self._closed:
            return self._closed_error()

        try:
            await self._write_json(self.STUDENTS_FILE, [])
            await self._write_json(self.SECTIONS_FILE, [])

        except (OSError, TypeError, ValueError) as e:
            return database_error("Clear", e)

        self._students = {}
        self._sections = {}
        return Response.succeed()

    # === students ===

    async def add_student(self, student: Student) -> Response:
        if self._closed:
            return self._closed_error()

        students = copy.deepcopy(self._students)
        students[student.id] = student.to_dict()

        return await self._commit_students("Add Student", students)

    async def get_student(self, student_id: str) -> Response:
        if self._closed:
            return self._closed_error()

        record = self._students.get(student_id)

        if record is None:
            return Response.not_found(f'Unknown student id "{student_id}".')

        try:
            student = Student.from_dict(record)

        except (KeyError, TypeError, ValueError) as e:
            return database_error("Get Student", e)

        return Response.succeed(data={"record": student})

    async def get_students(self) -> Response:
        if self._closed:
            return self._closed_error()

        try:
            students = [Student.from_dict(record) for record in self._students.values()]

        except (KeyError, TypeError, ValueError) as e:
            return database_error("Get All Students", e)

        return Response.succeed(data={"records": students})

    # === sections ===

    async def add_section_info(self, info: SectionInfo) -> Response:
        if self._closed:
            return self._closed_error()

        sections = copy.deepcopy(self._sections)
        sections[info.id] = SectionDoc(info).to_dict()

        return await self._commit_sections("Add Section Info", sections)

    async def get_section(self, section_id: str) -> Response:
        if self._closed:
            return self._closed_error()

        record = self._sections.get(section_id)

        if record is None:
            return Response.not_found(f'Unknown section id "{section_id}".')

        try:
            section = SectionDoc.from_dict(record)

        except (KeyError, TypeError, ValueError) as e:
            return database_error("Get Section", e)

        return Response.succeed(data={"record": section})

    async def get_sections(self) -> Response:
        if self._closed:
            return self._closed_error()

        try:
            sections = [SectionDoc.from_dict(record) for record in self._sections.values()]

        except (KeyError, TypeError, ValueError) as e:
            return database_error("Get Sections", e)

        return Response.succeed(data={"records": sections})

    async def enroll_student(self, section_id: str, student_id: str) -> Response:
        if self._closed:
            return self._closed_error()

        if section_id not in self._sections:
            return Response.not_found(f'Unknown section id "{section_id}".')

        if student_id in self._sections[section_id]["enrolled_students"]:
            return Response.succeed()

        sections = copy.deepcopy(self._sections)
        sections[section_id]["enrolled_students"].append(student_id)

        return await self._commit_sections("Enroll Student", sections)

    async def add_score(
        self, section_id: str, student_id: str, col_id: str, score: Entry
    ) -> Response:
        if self._closed:
            return self._closed_error()

        if section_id not in self._sections:
            return Response.not_found(f'Unknown section id "{section_id}".')

        sections = copy.deepcopy(self._sections)
        sections[section_id]["scores"].setdefault(student_id, {})[col_id] = score

        return await self._commit_sections("Add Score", sections)

    async def remove_section(self, section_id: str) -> Response:
        if self._closed:
            return self._closed_error()

        if section_id not in self._sections:
            return Response.not_found(f'Unknown section id "{section_id}".')

        sections = copy.deepcopy(self._sections)
        del sections[section_id]

        return await self._commit_sections("Remove Section", sections)

    # === helper methods ===

    async def _commit_students(
        self, operation: str, students: dict[str, dict[str, Any]]
    ) -> Response:
        try:
            await self._write_json(self.STUDENTS_FILE, list(students.values()))

        except (OSError, TypeError, ValueError) as e:
            return database_error(operation, e)

        self._students = students
        return Response.succeed()

    async def _commit_sections(
        self, operation: str, sections: dict[str, dict[str, Any]]
    ) -> Response:
        try:
            await self._write_json(self.SECTIONS_FILE, list(sections.values()))

        except (OSError, TypeError, ValueError) as e:
            return database_error(operation, e)

        self._sections = sections
        return Response.succeed()

    async def _read_json(self, filename: str) -> list[Any]:
        path = self._data_dir / filename

        if not await path.exists():
            return []

        data = json.loads(await path.read_text(encoding="utf-8"))

        if not isinstance(data, list):
            raise ValueError(f"Expected {filename} to contain a list.")

        return data

    async def _write_json(self, filename: str, data: list[Any]) -> None:
        # serialize first so a TypeError never truncates the file
        text = json.dumps(data, indent=2, sort_keys=True)
        await (self._data_dir / filename).write_text(text, encoding="utf-8")

    def _closed_error(self) -> Response:
        return Response.fail(detail="Grades store is closed.", error=ErrorCode.DB)


def _index_by_id(records: list[Any]) -> dict[str, dict[str, Any]]:
    indexed: dict[str, dict[str, Any]] = {}

    for record in records:
        if not isinstance(record, dict):
            raise ValueError(f"Expected a JSON object, found: {record!r}")
        indexed[record["id"]] = record

    return indexed
