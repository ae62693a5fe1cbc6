# models/types.py

"""
Holds type aliases shared by the Grades engine, aggregate functions, and persistence.
"""

from typing import Any, Callable, Union

from core.response import Response
from models.section_info import SectionInfo

Entry = Union[int, float, str, None]

RowData = dict[str, Entry]

SectionData = dict[str, RowData]

# (section_info, section_data, row_id, args) -> Response with data["value"]
RowAggrFn = Callable[[SectionInfo, SectionData, str, list[Any]], Response]

# (section_info, section_data, col_id, args) -> Response with data["value"]
ColAggrFn = Callable[[SectionInfo, SectionData, str, list[Any]], Response]
