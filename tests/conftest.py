# tests/conftest.py

import pytest

from core.aggr_fns import COL_AGGR_FNS, ROW_AGGR_FNS
from models.grades import Grades
from models.section_info import (
    AggrColHdr,
    AggrRowHdr,
    NumScoreColHdr,
    SectionInfo,
    StudentColHdr,
    TextScoreColHdr,
)
from models.student import Student


# run async tests on asyncio only
@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sample_student():
    return Student("s1", "Ada", "Lovelace")


@pytest.fixture
def second_student():
    return Student("s2", "Alan", "Turing")


@pytest.fixture
def unenrolled_student():
    return Student("s3", "Grace", "Hopper")


@pytest.fixture
def sample_section_info():
    return SectionInfo(
        id="cs101",
        name="CS 101",
        col_hdrs=[
            StudentColHdr("id"),
            StudentColHdr("first_name"),
            StudentColHdr("last_name"),
            NumScoreColHdr("quiz1", 0, 10),
            NumScoreColHdr("quiz2", 0, 10),
            TextScoreColHdr("grade", ["A", "B", "C"]),
            AggrColHdr("total", "sum", ["quiz1", "quiz2"]),
        ],
        row_hdrs=[
            AggrRowHdr("avg", "avg"),
            AggrRowHdr("count", "count"),
        ],
    )


@pytest.fixture
def quiz_section_info():
    return SectionInfo(
        id="sec1",
        col_hdrs=[
            StudentColHdr("id"),
            NumScoreColHdr("quiz1", 0, 10),
            AggrColHdr("total", "sum", ["quiz1"]),
        ],
    )


@pytest.fixture
def sample_grades(
    sample_student, second_student, unenrolled_student, sample_section_info
):
    grades = Grades(ROW_AGGR_FNS, COL_AGGR_FNS)
    grades.add_student(sample_student)
    grades.add_student(second_student)
    grades.add_student(unenrolled_student)
    grades.add_section_info(sample_section_info)
    return grades


@pytest.fixture
def enrolled_grades(sample_grades):
    sample_grades.enroll_student("cs101", "s1")
    sample_grades.enroll_student("cs101", "s2")
    return sample_grades
