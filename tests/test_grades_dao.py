# tests/test_grades_dao.py

import json
import os

import pytest

from core.response import ErrorCode
from persistence.grades_dao import JsonGradesDao, SectionDoc

pytestmark = pytest.mark.anyio


async def open_dao(dir_path) -> JsonGradesDao:
    response = await JsonGradesDao.make(str(dir_path))
    assert response.success
    return response.data["dao"]


async def test_make_creates_directory(tmp_path):
    data_dir = tmp_path / "nested" / "store"
    dao = await open_dao(data_dir)

    assert os.path.isdir(data_dir)
    assert dao.data_dir == str(data_dir)
    assert (await dao.get_students()).data["records"] == []


async def test_add_student_and_save(tmp_path, sample_student):
    dao = await open_dao(tmp_path)

    response = await dao.add_student(sample_student)
    assert response.success

    students_path = os.path.join(tmp_path, "students.json")
    assert os.path.exists(students_path)

    with open(students_path) as f:
        data = json.load(f)

    assert isinstance(data, list)
    assert len(data) == 1
    assert data[0]["id"] == "s1"
    assert data[0]["last_name"] == "Lovelace"


async def test_students_persist_across_reopen(tmp_path, sample_student, second_student):
    dao = await open_dao(tmp_path)
    await dao.add_student(sample_student)
    await dao.add_student(second_student)

    reopened = await open_dao(tmp_path)

    response = await reopened.get_student("s2")
    assert response.success
    assert response.data["record"] == second_student
    assert len((await reopened.get_students()).data["records"]) == 2


async def test_get_student_unknown(tmp_path):
    dao = await open_dao(tmp_path)
    assert (await dao.get_student("nobody")).error == ErrorCode.NOT_FOUND


async def test_section_lifecycle(tmp_path, sample_section_info):
    dao = await open_dao(tmp_path)

    assert (await dao.add_section_info(sample_section_info)).success
    assert (await dao.enroll_student("cs101", "s1")).success
    assert (await dao.enroll_student("cs101", "s1")).success
    assert (await dao.add_score("cs101", "s1", "quiz1", 8)).success

    reopened = await open_dao(tmp_path)
    response = await reopened.get_section("cs101")
    assert response.success

    section: SectionDoc = response.data["record"]
    assert section.info == sample_section_info
    assert section.enrolled_students == ["s1"]
    assert section.scores == {"s1": {"quiz1": 8}}


async def test_add_section_info_replaces_document(tmp_path, sample_section_info):
    dao = await open_dao(tmp_path)
    await dao.add_section_info(sample_section_info)
    await dao.enroll_student("cs101", "s1")

    await dao.add_section_info(sample_section_info)

    section = (await dao.get_section("cs101")).data["record"]
    assert section.enrolled_students == []
    assert section.scores == {}


async def test_unknown_section_operations(tmp_path):
    dao = await open_dao(tmp_path)

    assert (await dao.get_section("nope")).error == ErrorCode.NOT_FOUND
    assert (await dao.enroll_student("nope", "s1")).error == ErrorCode.NOT_FOUND
    assert (await dao.add_score("nope", "s1", "q", 1)).error == ErrorCode.NOT_FOUND
    assert (await dao.remove_section("nope")).error == ErrorCode.NOT_FOUND


async def test_remove_section(tmp_path, sample_section_info):
    dao = await open_dao(tmp_path)
    await dao.add_section_info(sample_section_info)

    assert (await dao.remove_section("cs101")).success
    assert (await dao.get_sections()).data["records"] == []


async def test_clear(tmp_path, sample_student, sample_section_info):
    dao = await open_dao(tmp_path)
    await dao.add_student(sample_student)
    await dao.add_section_info(sample_section_info)

    assert (await dao.clear()).success

    reopened = await open_dao(tmp_path)
    assert (await reopened.get_students()).data["records"] == []
    assert (await reopened.get_sections()).data["records"] == []


async def test_corrupt_file_is_db_error(tmp_path):
    with open(os.path.join(tmp_path, "sections.json"), "w") as f:
        f.write("{not json")

    response = await JsonGradesDao.make(str(tmp_path))
    assert not response.success
    assert response.error == ErrorCode.DB
    assert response.status_code == 500


async def test_non_list_file_is_db_error(tmp_path):
    with open(os.path.join(tmp_path, "students.json"), "w") as f:
        json.dump({"id": "s1"}, f)

    response = await JsonGradesDao.make(str(tmp_path))
    assert response.error == ErrorCode.DB


async def test_closed_store_is_db_error(tmp_path, sample_student):
    dao = await open_dao(tmp_path)
    assert (await dao.close()).success

    response = await dao.add_student(sample_student)
    assert response.error == ErrorCode.DB
