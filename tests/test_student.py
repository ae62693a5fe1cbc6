# tests/test_student.py

import pytest

from models.student import Student


def test_student_to_dict(sample_student):
    data = sample_student.to_dict()

    assert data["id"] == "s1"
    assert data["first_name"] == "Ada"
    assert data["last_name"] == "Lovelace"


def test_student_from_dict():
    student = Student.from_dict(
        {
            "id": "s1",
            "first_name": "Ada",
            "last_name": "Lovelace",
        }
    )

    assert student.id == "s1"
    assert student.full_name == "Ada Lovelace"


def test_student_field(sample_student):
    assert sample_student.field("first_name") == "Ada"

    with pytest.raises(ValueError):
        sample_student.field("email")


def test_student_to_str(sample_student):
    assert str(sample_student) == "STUDENT: name: Ada Lovelace, id: s1"
