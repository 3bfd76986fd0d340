import json
import logging
import os

from dojo_attendance.constants import (
    DEFAULT_FEE,
    STATE_FILE,
    LEGACY_STUDENTS_FILE
)
from dojo_attendance.ledger import current_view, days_in_month, is_valid_month, parse_month_key
from dojo_attendance.models import AppState, Student, ViewState
from dojo_attendance.roster import new_student_id

logger = logging.getLogger(__name__)


def load_data(filepath, default):
    if not os.path.exists(filepath):
        return default
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s, falling back to defaults: %s", filepath, e)
        return default


def save_data(filepath, data):
    try:
        folder = os.path.dirname(filepath)
        if folder and not os.path.exists(folder):
            os.makedirs(folder)

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=4)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error("Failed to save %s: %s", filepath, e)
        return False

# ==================================================
# Envelope (de)serialization
# ==================================================

def state_to_dict(state):
    return {
        "students": [
            {
                "id": s.id,
                "name": s.name,
                "dates": list(s.dates),
                "totalFee": s.total_fee
            }
            for s in state.students
        ],
        "attendance": {
            key: {sid: list(days) for sid, days in month_ledger.items()}
            for key, month_ledger in state.attendance.items()
        },
        "view": {"year": state.view.year, "month": state.view.month}
    }


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _repair_fee(value):
    if not _is_number(value) or value != value:
        return DEFAULT_FEE
    return max(0, value)


def _repair_dates(value):
    if not isinstance(value, list):
        return ()
    dates = []
    for item in value:
        if item is None:
            continue
        item = str(item)
        if item not in dates:
            dates.append(item)
    return tuple(dates)


def _repair_students(raw_students):
    if not isinstance(raw_students, list):
        return ()

    students = []
    taken = set()
    for raw in raw_students:
        if not isinstance(raw, dict):
            continue

        name = raw.get("name")
        name = name.strip() if isinstance(name, str) else ""

        student_id = raw.get("id")
        if not isinstance(student_id, str) or not student_id or student_id in taken:
            student_id = new_student_id(taken)
        taken.add(student_id)

        students.append(Student(
            id=student_id,
            name=name,
            total_fee=_repair_fee(raw.get("totalFee")),
            dates=_repair_dates(raw.get("dates"))
        ))
    return tuple(students)


def _repair_days(value, max_day):
    if not isinstance(value, list):
        return ()
    days = {
        d for d in value
        if isinstance(d, int) and not isinstance(d, bool) and 1 <= d <= max_day
    }
    return tuple(sorted(days))


def _repair_attendance(raw_attendance, student_ids):
    if not isinstance(raw_attendance, dict):
        return {}

    attendance = {}
    for key, raw_month in raw_attendance.items():
        parsed = parse_month_key(key)
        if parsed is None:
            continue
        max_day = days_in_month(*parsed)

        month_ledger = {}
        if isinstance(raw_month, dict):
            for sid, raw_days in raw_month.items():
                if sid in student_ids:
                    month_ledger[sid] = _repair_days(raw_days, max_day)
        attendance[key] = month_ledger
    return attendance


def _repair_view(raw_view):
    if isinstance(raw_view, dict):
        year = raw_view.get("year")
        month = raw_view.get("month")
        if is_valid_month(year, month):
            return ViewState(year=year, month=month)
    return current_view()


def state_from_dict(data):
    """Rebuild an ``AppState`` from a decoded envelope.

    Accepts the full ``{students, attendance, view}`` envelope as well as the
    older bare list of ``{name, dates, totalFee}`` records. Anything that does
    not fit is replaced field by field with defaults instead of failing.
    """
    if isinstance(data, list):
        data = {"students": data}
    if not isinstance(data, dict):
        return empty_state()

    students = _repair_students(data.get("students"))
    student_ids = {s.id for s in students}
    return AppState(
        students=students,
        attendance=_repair_attendance(data.get("attendance"), student_ids),
        view=_repair_view(data.get("view"))
    )


def empty_state():
    return AppState(view=current_view())

# ==================================================
# Durable slot
# ==================================================

def load_state(filepath=STATE_FILE, legacy_filepath=LEGACY_STUDENTS_FILE):
    if os.path.exists(filepath):
        data = load_data(filepath, None)
    elif legacy_filepath and os.path.exists(legacy_filepath):
        logger.info("Importing roster from %s", legacy_filepath)
        data = load_data(legacy_filepath, None)
    else:
        data = None
    if data is None:
        return empty_state()
    return state_from_dict(data)


def save_state(state, filepath=STATE_FILE):
    return save_data(filepath, state_to_dict(state))
