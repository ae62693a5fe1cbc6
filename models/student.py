# models/student.py

"""
Represents a student known to the Grades engine.

Students are owned globally and shared by reference across every section they are enrolled in.
A student row in a section copies the identity fields named by the section's student columns.
"""

from __future__ import annotations


class Student:

    IDENTITY_FIELDS: tuple[str, ...] = ("id", "first_name", "last_name")

    def __init__(self, id: str, first_name: str, last_name: str):
        self._id: str = id
        self._first_name: str = first_name
        self._last_name: str = last_name

    # === properties ===

    @property
    def id(self) -> str:
        return self._id

    @property
    def first_name(self) -> str:
        return self._first_name

    @first_name.setter
    def first_name(self, first_name: str) -> None:
        self._first_name = first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    @last_name.setter
    def last_name(self, last_name: str) -> None:
        self._last_name = last_name

    @property
    def full_name(self) -> str:
        return f"{self._first_name} {self._last_name}"

    def field(self, key: str) -> str:
        """Returns the identity field named by `key`, e.g. for a student column."""
        if key not in Student.IDENTITY_FIELDS:
            raise ValueError(f"Unknown student field: {key}")
        return getattr(self, key)

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "first_name": self._first_name,
            "last_name": self._last_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Student:
        return cls(
            id=data["id"],
            first_name=data["first_name"],
            last_name=data["last_name"],
        )

    # === dunder methods ===

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Student):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Student({self._id}, {self._first_name}, {self._last_name})"

    def __str__(self) -> str:
        return f"STUDENT: name: {self.full_name}, id: {self._id}"
