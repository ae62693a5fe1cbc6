# models/section_info.py

"""
Describes the schema of a single course section.

A `SectionInfo` holds an ordered mapping of column headers and an ordered mapping of row headers.
Order is insertion order and is meaningful for display.

Column headers:
- `StudentColHdr`: identity column copied from the enrolled `Student` (id, first name, last name).
- `NumScoreColHdr`: numeric score within an inclusive [min, max] range.
- `TextScoreColHdr`: text score drawn from an allowed-value set.
- `AggrColHdr`: derived column computed per row by a named row-aggregate function.

Row headers:
- `StudentRowHdr`: a student row (student rows are normally created by enrollment).
- `AggrRowHdr`: derived row computed per column by a named column-aggregate function.

Every header serializes to a dictionary carrying a "kind" tag used by `from_dict()` to rebuild it.
"""

from __future__ import annotations

from typing import Any

from models.student import Student

# === column headers ===


class ColHdr:
    kind: str = ""

    def __init__(self, id: str, name: str | None = None):
        self._id = id
        self._name = name if name is not None else id

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_scorable(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {"kind": self.kind, "id": self._id, "name": self._name}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColHdr):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()})"


class StudentColHdr(ColHdr):
    kind = "student"

    def __init__(self, id: str, key: str | None = None, name: str | None = None):
        super().__init__(id, name)
        self._key = key if key is not None else id

        if self._key not in Student.IDENTITY_FIELDS:
            raise ValueError(f"Unknown student field for column '{id}': {self._key}")

    @property
    def key(self) -> str:
        return self._key

    def to_dict(self) -> dict:
        return {**super().to_dict(), "key": self._key}

    @classmethod
    def from_dict(cls, data: dict) -> StudentColHdr:
        return cls(id=data["id"], key=data.get("key"), name=data.get("name"))


class NumScoreColHdr(ColHdr):
    kind = "numScore"

    def __init__(self, id: str, min: float, max: float, name: str | None = None):
        super().__init__(id, name)

        if min > max:
            raise ValueError(f"Column '{id}' has min {min} greater than max {max}.")

        self._min = min
        self._max = max

    @property
    def min(self) -> float:
        return self._min

    @property
    def max(self) -> float:
        return self._max

    @property
    def is_scorable(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {**super().to_dict(), "min": self._min, "max": self._max}

    @classmethod
    def from_dict(cls, data: dict) -> NumScoreColHdr:
        return cls(
            id=data["id"], min=data["min"], max=data["max"], name=data.get("name")
        )


class TextScoreColHdr(ColHdr):
    kind = "textScore"

    def __init__(self, id: str, vals: list[str], name: str | None = None):
        super().__init__(id, name)
        self._vals = list(vals)

    @property
    def vals(self) -> list[str]:
        return list(self._vals)

    @property
    def is_scorable(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {**super().to_dict(), "vals": list(self._vals)}

    @classmethod
    def from_dict(cls, data: dict) -> TextScoreColHdr:
        return cls(id=data["id"], vals=data["vals"], name=data.get("name"))


class AggrColHdr(ColHdr):
    kind = "aggrCol"

    def __init__(
        self,
        id: str,
        aggr_fn_name: str,
        args: list[Any] | None = None,
        name: str | None = None,
    ):
        super().__init__(id, name)
        self._aggr_fn_name = aggr_fn_name
        self._args = list(args or [])

    @property
    def aggr_fn_name(self) -> str:
        return self._aggr_fn_name

    @property
    def args(self) -> list[Any]:
        return list(self._args)

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "aggr_fn_name": self._aggr_fn_name,
            "args": list(self._args),
        }

    @classmethod
    def from_dict(cls, data: dict) -> AggrColHdr:
        return cls(
            id=data["id"],
            aggr_fn_name=data["aggr_fn_name"],
            args=data.get("args"),
            name=data.get("name"),
        )


_COL_HDR_KINDS: dict[str, type[ColHdr]] = {
    StudentColHdr.kind: StudentColHdr,
    NumScoreColHdr.kind: NumScoreColHdr,
    TextScoreColHdr.kind: TextScoreColHdr,
    AggrColHdr.kind: AggrColHdr,
}


def col_hdr_from_dict(data: dict) -> ColHdr:
    kind = data["kind"]
    if kind not in _COL_HDR_KINDS:
        raise ValueError(f"Unknown column header kind: {kind}")
    return _COL_HDR_KINDS[kind].from_dict(data)  # type: ignore[attr-defined]


# === row headers ===


class RowHdr:
    kind: str = ""

    def __init__(self, id: str):
        self._id = id

    @property
    def id(self) -> str:
        return self._id

    def to_dict(self) -> dict:
        return {"kind": self.kind, "id": self._id}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RowHdr):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()})"


class StudentRowHdr(RowHdr):
    kind = "student"

    @classmethod
    def from_dict(cls, data: dict) -> StudentRowHdr:
        return cls(id=data["id"])


class AggrRowHdr(RowHdr):
    kind = "aggrRow"

    def __init__(self, id: str, aggr_fn_name: str, args: list[Any] | None = None):
        super().__init__(id)
        self._aggr_fn_name = aggr_fn_name
        self._args = list(args or [])

    @property
    def aggr_fn_name(self) -> str:
        return self._aggr_fn_name

    @property
    def args(self) -> list[Any]:
        return list(self._args)

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "aggr_fn_name": self._aggr_fn_name,
            "args": list(self._args),
        }

    @classmethod
    def from_dict(cls, data: dict) -> AggrRowHdr:
        return cls(
            id=data["id"], aggr_fn_name=data["aggr_fn_name"], args=data.get("args")
        )


_ROW_HDR_KINDS: dict[str, type[RowHdr]] = {
    StudentRowHdr.kind: StudentRowHdr,
    AggrRowHdr.kind: AggrRowHdr,
}


def row_hdr_from_dict(data: dict) -> RowHdr:
    kind = data["kind"]
    if kind not in _ROW_HDR_KINDS:
        raise ValueError(f"Unknown row header kind: {kind}")
    return _ROW_HDR_KINDS[kind].from_dict(data)  # type: ignore[attr-defined]


# === section info ===


class SectionInfo:

    def __init__(
        self,
        id: str,
        col_hdrs: list[ColHdr],
        row_hdrs: list[RowHdr] | None = None,
        name: str | None = None,
    ):
        self._id = id
        self._name = name if name is not None else id
        self._col_hdrs: dict[str, ColHdr] = {}
        self._row_hdrs: dict[str, RowHdr] = {}

        for col_hdr in col_hdrs:
            if col_hdr.id in self._col_hdrs:
                raise ValueError(f"Duplicate column id in section '{id}': {col_hdr.id}")
            self._col_hdrs[col_hdr.id] = col_hdr

        for row_hdr in row_hdrs or []:
            if row_hdr.id in self._row_hdrs:
                raise ValueError(f"Duplicate row id in section '{id}': {row_hdr.id}")
            self._row_hdrs[row_hdr.id] = row_hdr

    # === properties ===

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def col_hdrs(self) -> dict[str, ColHdr]:
        return self._col_hdrs

    @property
    def row_hdrs(self) -> dict[str, RowHdr]:
        return self._row_hdrs

    # --- filtered views ---

    @property
    def aggr_col_hdrs(self) -> list[AggrColHdr]:
        return [h for h in self._col_hdrs.values() if isinstance(h, AggrColHdr)]

    @property
    def aggr_row_hdrs(self) -> list[AggrRowHdr]:
        return [h for h in self._row_hdrs.values() if isinstance(h, AggrRowHdr)]

    @property
    def non_student_col_ids(self) -> list[str]:
        return [
            h.id for h in self._col_hdrs.values() if not isinstance(h, StudentColHdr)
        ]

    @property
    def raw_col_ids(self) -> list[str]:
        """Ids of columns holding independent data: identity and score columns."""
        return [
            h.id for h in self._col_hdrs.values() if not isinstance(h, AggrColHdr)
        ]

    def is_aggr_row(self, row_id: str) -> bool:
        return isinstance(self._row_hdrs.get(row_id), AggrRowHdr)

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "name": self._name,
            "col_hdrs": [h.to_dict() for h in self._col_hdrs.values()],
            "row_hdrs": [h.to_dict() for h in self._row_hdrs.values()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> SectionInfo:
        return cls(
            id=data["id"],
            name=data.get("name"),
            col_hdrs=[col_hdr_from_dict(h) for h in data["col_hdrs"]],
            row_hdrs=[row_hdr_from_dict(h) for h in data.get("row_hdrs", [])],
        )

    # === dunder methods ===

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SectionInfo):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"SectionInfo({self._id}, {list(self._col_hdrs)}, {list(self._row_hdrs)})"

    def __str__(self) -> str:
        return f"SECTION: name: {self._name}, columns: {len(self._col_hdrs)}, id: {self._id}"
