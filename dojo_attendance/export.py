import logging
import os

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import PatternFill, Alignment, Font, Border, Side
from openpyxl.worksheet.page import PageMargins

from dojo_attendance.constants import (
    ABSENCE_MARKER,
    EXPORT_BRAND,
    RECORDS_FOLDER,
    SPREADSHEET_COLUMNS
)
from dojo_attendance.ledger import days_in_month, is_valid_month, month_key, student_days
from dojo_attendance.roster import absence_count, attendance_count

logger = logging.getLogger(__name__)

# ==================================================
# Fee summary workbook
# ==================================================

def spreadsheet_filename():
    return f"{EXPORT_BRAND} students and fees.xlsx"


def to_spreadsheet_rows(state):
    return [
        {
            "Name": student.name,
            "AbsenceCount": absence_count(student),
            "AbsenceDates": ", ".join(student.dates),
            "RemainingFee": student.total_fee,
            "AttendanceCount": attendance_count(student)
        }
        for student in state.students
    ]


def _style_workbook(file_path):
    wb = load_workbook(file_path)
    ws = wb.active

    header_fill = PatternFill("solid", start_color="FFD700")
    data_fill = PatternFill("solid", start_color="F0F8FF")
    header_font = Font(bold=True, size=12)
    data_font = Font(size=11)

    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = center
        cell.border = border

    for row in ws.iter_rows(min_row=2, max_row=ws.max_row, max_col=len(SPREADSHEET_COLUMNS)):
        for cell in row:
            cell.font = data_font
            cell.fill = data_fill
            cell.alignment = center
            cell.border = border

    ws.column_dimensions["A"].width = 25
    ws.column_dimensions["B"].width = 15
    ws.column_dimensions["C"].width = 40
    ws.column_dimensions["D"].width = 15
    ws.column_dimensions["E"].width = 17

    ws.page_margins = PageMargins(
        left=0.3, right=0.3,
        top=0.4, bottom=0.4,
        header=0.3, footer=0.3
    )
    ws.page_setup.orientation = ws.ORIENTATION_LANDSCAPE
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0

    wb.save(file_path)


def export_spreadsheet(state, folder=RECORDS_FOLDER):
    """Write the fee summary workbook and return its path.

    Nothing is written for an empty roster; ``None`` is returned instead.
    """
    if not state.students:
        logger.info("Roster is empty, spreadsheet export skipped")
        return None

    os.makedirs(folder, exist_ok=True)
    file_path = os.path.join(folder, spreadsheet_filename())

    df = pd.DataFrame(to_spreadsheet_rows(state), columns=SPREADSHEET_COLUMNS)
    df.to_excel(file_path, index=False, sheet_name=EXPORT_BRAND, engine="openpyxl")
    _style_workbook(file_path)

    logger.info("Exported %d student(s) to %s", len(df), file_path)
    return file_path

# ==================================================
# Monthly absence grid
# ==================================================

def csv_filename(year, month):
    return f"attendance_{month_key(year, month)}.csv"


def to_month_rows(state, year, month):
    if not is_valid_month(year, month):
        return ["Name"], []
    days = range(1, days_in_month(year, month) + 1)
    rows = []
    for student in state.students:
        marked = set(student_days(state, student.id, year, month))
        rows.append([student.name] + [ABSENCE_MARKER if d in marked else "" for d in days])
    return ["Name"] + [str(d) for d in days], rows


def to_csv(state, year, month):
    columns, rows = to_month_rows(state, year, month)
    df = pd.DataFrame(rows, columns=columns)
    return df.to_csv(index=False, lineterminator="\n")


def export_csv(state, year, month, folder=RECORDS_FOLDER):
    if not state.students:
        logger.info("Roster is empty, CSV export skipped")
        return None
    if not is_valid_month(year, month):
        logger.warning("Invalid month %r-%r, CSV export skipped", year, month)
        return None

    os.makedirs(folder, exist_ok=True)
    file_path = os.path.join(folder, csv_filename(year, month))
    with open(file_path, "w", encoding="utf-8", newline="") as f:
        f.write(to_csv(state, year, month))

    logger.info("Exported %s to %s", month_key(year, month), file_path)
    return file_path
