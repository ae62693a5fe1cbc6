# cli/formatters.py

from textwrap import dedent

import core.formatters as core_formatters
from models.section_info import ColHdr, SectionInfo
from models.student import Student
from models.types import SectionData

# === Student formatters ===


def format_student_oneline(student: Student) -> str:
    return f"{student.full_name:<20} | {student.id}"


# === Section formatters ===


def format_section_oneline(info: SectionInfo) -> str:
    return f"{info.name:<20} | {len(info.col_hdrs)} columns | {info.id}"


def format_section_multiline(info: SectionInfo, enrolled_count: int) -> str:
    columns = core_formatters.format_list_with_and(list(info.col_hdrs))
    return dedent(
        f"""\
        Section {info.name}:
        ... Id: {info.id}
        ... Columns: {columns}
        ... Enrolled: {enrolled_count}
        """
    )


def format_col_hdr(col_hdr: ColHdr) -> str:
    return f"{col_hdr.name} [{col_hdr.kind}]"


def format_section_table(info: SectionInfo, data: SectionData, width: int = 10) -> str:
    """
    Renders a section table as fixed-width text, one line per row.

    Columns follow the section's declared order; cells wider than `width` are truncated.
    """
    col_ids = list(info.col_hdrs)

    def cell(text: str) -> str:
        return f"{text[:width]:<{width}}"

    header = " | ".join(cell(info.col_hdrs[col_id].name) for col_id in col_ids)
    rule = "-+-".join("-" * width for _ in col_ids)
    lines = [header, rule]

    for row in data.values():
        lines.append(
            " | ".join(
                cell(core_formatters.format_entry(row.get(col_id))) for col_id in col_ids
            )
        )

    return "\n".join(lines)
