import calendar
import re
from dataclasses import replace
from datetime import datetime

from dojo_attendance.models import ViewState
from dojo_attendance.roster import find_student

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

# ==================================================
# Calendar helpers
# ==================================================

def days_in_month(year, month):
    return calendar.monthrange(year, month)[1]


def month_key(year, month):
    return f"{year:04d}-{month:02d}"


def is_valid_month(year, month):
    return (
        _is_int(year) and _is_int(month)
        and 1 <= year <= 9999 and 1 <= month <= 12
    )


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def parse_month_key(key):
    """Return ``(year, month)`` for a ``YYYY-MM`` key, or ``None``."""
    match = MONTH_KEY_PATTERN.match(key) if isinstance(key, str) else None
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not is_valid_month(year, month):
        return None
    return year, month


def previous_month(year, month):
    month -= 1
    if month < 1:
        return year - 1, 12
    return year, month


def next_month(year, month):
    month += 1
    if month > 12:
        return year + 1, 1
    return year, month


def current_view(now=None):
    now = now or datetime.now()
    return ViewState(year=now.year, month=now.month)

# ==================================================
# Ledger operations
# ==================================================

def student_days(state, student_id, year, month):
    return state.attendance.get(month_key(year, month), {}).get(student_id, ())


def absence_total(state, student_id, year, month):
    return len(student_days(state, student_id, year, month))


def toggle_day(state, student_id, year, month, day):
    if find_student(state, student_id) is None:
        return state
    if not is_valid_month(year, month) or not _is_int(day):
        return state
    if not 1 <= day <= days_in_month(year, month):
        return state

    key = month_key(year, month)
    month_ledger = dict(state.attendance.get(key, {}))
    days = set(month_ledger.get(student_id, ()))
    if day in days:
        days.remove(day)
    else:
        days.add(day)
    month_ledger[student_id] = tuple(sorted(days))

    attendance = dict(state.attendance)
    attendance[key] = month_ledger
    return replace(state, attendance=attendance)


def clear_month(state, year, month):
    if not is_valid_month(year, month):
        return state
    attendance = dict(state.attendance)
    attendance[month_key(year, month)] = {}
    return replace(state, attendance=attendance)

# ==================================================
# View navigation
# ==================================================

def set_view(state, year, month):
    if not is_valid_month(year, month):
        return state
    return replace(state, view=ViewState(year=year, month=month))


def go_previous_month(state):
    return set_view(state, *previous_month(state.view.year, state.view.month))


def go_next_month(state):
    return set_view(state, *next_month(state.view.year, state.view.month))
