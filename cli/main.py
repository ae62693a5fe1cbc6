# cli/main.py

"""
Menu-driven console front-end for the Grades application.

Opens the durable grades store configured by `GRADES_DATA_DIR`, then offers menus for listing sections,
viewing a section table, adding and enrolling students, recording scores, and loading a section from a
JSON file of the form `{"info": {...}, "data": {row_id: {col_id: score}}}`.
"""

import json
import logging
import os
from typing import cast

import anyio

import cli.formatters as formatters
import cli.menu_helpers as helpers
import core.formatters as core_formatters
from cli.menu_helpers import MenuSignal
from core.aggr_fns import COL_AGGR_FNS, ROW_AGGR_FNS
from core.app_logger import setup_logging
from core.config import Config
from models.db_grades import DbGrades, make_db_grades
from models.section_info import ColHdr, NumScoreColHdr, SectionInfo
from models.student import Student
from models.types import Entry

logger = logging.getLogger(__name__)


def run_cli() -> None:
    """
    Opens the grades store and runs the top-level menu loop.

    Raises:
        SystemExit: If the store cannot be opened, or when the user exits.
    """
    setup_logging()

    data_dir = Config.data_dir()
    print(f"\nOpening grades store at {data_dir} ...")

    response = anyio.run(make_db_grades, data_dir, ROW_AGGR_FNS, COL_AGGR_FNS)

    if not response.success:
        helpers.display_response_failure(response)
        raise SystemExit(1)

    grades: DbGrades = response.data["grades"]

    title = core_formatters.format_banner_text("GRADES MANAGER")
    options = [
        ("View Sections", view_sections),
        ("View Section Table", view_section_table),
        ("Add Student", add_student),
        ("Enroll Student", enroll_student),
        ("Record Score", record_score),
        ("Load Section From File", load_section_from_file),
    ]
    zero_option = "Exit Program"

    while True:
        menu_response = helpers.display_menu(title, options, zero_option)

        if menu_response is MenuSignal.EXIT:
            anyio.run(grades.close)
            exit_program()

        elif callable(menu_response):
            menu_response(grades)

        else:
            raise RuntimeError(f"Unexpected MenuResponse received: {menu_response}")


# === menu actions ===


def view_sections(grades: DbGrades) -> None:
    infos = list(grades.cache.section_infos.values())

    if not infos:
        print("\nThere are no sections.")
        return

    print(f"\n{core_formatters.format_banner_text('Sections')}")
    helpers.display_results(infos, True, formatters.format_section_oneline)


def view_section_table(grades: DbGrades) -> None:
    info = prompt_section(grades)

    if info is None:
        return

    response = anyio.run(grades.get_section_data, info.id)

    if not response.success:
        helpers.display_response_failure(response)
        return

    print(f"\n{core_formatters.format_banner_text(info.name)}")
    print(formatters.format_section_table(info, response.data["section_data"]))


def add_student(grades: DbGrades) -> None:
    fields = []

    for prompt in (
        "Enter the student id (leave blank to cancel):",
        "Enter the student's first name (leave blank to cancel):",
        "Enter the student's last name (leave blank to cancel):",
    ):
        value = helpers.prompt_user_input_or_cancel(prompt)

        if value is MenuSignal.CANCEL:
            return
        fields.append(cast(str, value))

    student = Student(*fields)
    response = anyio.run(grades.add_student, student)

    if not response.success:
        helpers.display_response_failure(response)
        return

    print(f"\n{formatters.format_student_oneline(student)} ... added.")


def enroll_student(grades: DbGrades) -> None:
    info = prompt_section(grades)

    if info is None:
        return

    student_id = helpers.prompt_user_input_or_cancel(
        "Enter the student id to enroll (leave blank to cancel):"
    )

    if student_id is MenuSignal.CANCEL:
        return

    response = anyio.run(grades.enroll_student, info.id, cast(str, student_id))

    if not response.success:
        helpers.display_response_failure(response)
        return

    print(f"\nStudent {student_id} enrolled in {info.name}.")


def record_score(grades: DbGrades) -> None:
    info = prompt_section(grades)

    if info is None:
        return

    student_id = helpers.prompt_user_input_or_cancel(
        "Enter the student id (leave blank to cancel):"
    )

    if student_id is MenuSignal.CANCEL:
        return

    scorable = [h for h in info.col_hdrs.values() if h.is_scorable]

    if not scorable:
        print(f"\nSection {info.name} has no scorable columns.")
        return

    print(f"\n{core_formatters.format_banner_text('Columns')}")
    helpers.display_results(scorable, True, formatters.format_col_hdr)

    choice = helpers.prompt_user_input("Select a column (0 to cancel):")

    if choice == "0":
        return

    try:
        col_hdr = scorable[int(choice) - 1]

    except (ValueError, IndexError):
        print("\nInvalid selection.")
        return

    raw = helpers.prompt_user_input_or_cancel(
        "Enter the score ('-' to clear, leave blank to cancel):"
    )

    if raw is MenuSignal.CANCEL:
        return

    response = anyio.run(
        grades.add_score,
        info.id,
        cast(str, student_id),
        col_hdr.id,
        parse_score(col_hdr, cast(str, raw)),
    )

    if not response.success:
        helpers.display_response_failure(response)
        return

    print("\nScore recorded.")


def load_section_from_file(grades: DbGrades) -> None:
    path = helpers.prompt_user_input_or_cancel(
        "Enter path to the section JSON file (leave blank to cancel):"
    )

    if path is MenuSignal.CANCEL:
        return

    path = os.path.abspath(os.path.expanduser(cast(str, path)))

    try:
        with open(path, "r") as f:
            payload = json.load(f)

        info = SectionInfo.from_dict(payload["info"])
        data = payload.get("data", {})

    except (OSError, ValueError, KeyError, TypeError) as e:
        print(f"\nCould not read section file {path}: {e}")
        return

    if info.id in grades.cache.section_infos:
        helpers.caution_banner()
        print(f"Section {info.id} already exists and will be replaced.")

        if not helpers.confirm_action("Do you wish to continue?"):
            return

    response = anyio.run(grades.load_section, info, data)

    if not response.success:
        helpers.display_response_failure(response)
        return

    print(f"\n{response.detail}")


# === helper methods ===


def prompt_section(grades: DbGrades) -> SectionInfo | None:
    section_id = helpers.prompt_user_input_or_cancel(
        "Enter the section id (leave blank to cancel):"
    )

    if section_id is MenuSignal.CANCEL:
        return None

    response = anyio.run(grades.get_section_info, cast(str, section_id))

    if not response.success:
        helpers.display_response_failure(response)
        return None

    return response.data["record"]


def parse_score(col_hdr: ColHdr, raw: str) -> Entry:
    """
    Converts console input into a score for `col_hdr`.

    "-" clears the cell. Numeric columns parse integers and decimals; anything unparseable is passed
    through as text so that validation reports it.
    """
    raw = raw.strip()

    if raw == "-":
        return None

    if isinstance(col_hdr, NumScoreColHdr):
        try:
            return int(raw)

        except ValueError:
            pass

        try:
            return float(raw)

        except ValueError:
            return raw

    return raw


def exit_program():
    """
    Displays an exit banner and terminates the CLI program.

    Raises:
        SystemExit: Always raised to immediately terminate execution.
    """
    exit_banner = core_formatters.format_banner_text("Exiting Program")
    print(f"\n{exit_banner}\n")

    raise SystemExit


if __name__ == "__main__":
    run_cli()
