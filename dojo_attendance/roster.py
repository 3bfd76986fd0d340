import logging
import uuid
from dataclasses import replace
from datetime import datetime

from dojo_attendance.constants import (
    DEFAULT_FEE,
    ABSENCE_PENALTY,
    SESSIONS_PER_PERIOD,
    DATE_FORMAT
)
from dojo_attendance.models import Student

logger = logging.getLogger(__name__)

DUPLICATE_ABSENCE_MESSAGE = "absence for today already recorded"
UNKNOWN_STUDENT_MESSAGE = "student not found"

# ==================================================
# Identity
# ==================================================

def new_student_id(taken=()):
    taken = set(taken)
    while True:
        candidate = uuid.uuid4().hex[:8]
        if candidate not in taken:
            return candidate


def today_label(now=None):
    now = now or datetime.now()
    return now.strftime(DATE_FORMAT)


def split_names(raw_input):
    if not raw_input:
        return []
    return [name.strip() for name in raw_input.split(",") if name.strip()]


def find_student(state, student_id):
    for student in state.students:
        if student.id == student_id:
            return student
    return None

# ==================================================
# Adding / removing students
# ==================================================

def add_students(state, raw_input):
    return _append_students(state, split_names(raw_input))


def add_student(state, name):
    name = (name or "").strip()
    if not name:
        return state
    return _append_students(state, [name])


def _append_students(state, names):
    if not names:
        return state

    taken = {s.id for s in state.students}
    new_students = []
    for name in names:
        student_id = new_student_id(taken)
        taken.add(student_id)
        new_students.append(Student(id=student_id, name=name, total_fee=DEFAULT_FEE))

    logger.info("Added %d student(s)", len(new_students))
    return replace(state, students=state.students + tuple(new_students))


def remove_student(state, student_id):
    if find_student(state, student_id) is None:
        return state

    students = tuple(s for s in state.students if s.id != student_id)

    attendance = {}
    for key, month_ledger in state.attendance.items():
        attendance[key] = {
            sid: days for sid, days in month_ledger.items() if sid != student_id
        }

    logger.info("Removed student %s", student_id)
    return replace(state, students=students, attendance=attendance)

# ==================================================
# Fee tracking
# ==================================================

def mark_absence(state, student_id, date=None):
    """Record a fee-bearing absence for ``date`` (today by default).

    Returns ``(state, ok, message)``. A second mark on the same date is
    rejected and the original state is returned untouched.
    """
    student = find_student(state, student_id)
    if student is None:
        return state, False, UNKNOWN_STUDENT_MESSAGE

    date = date or today_label()
    if date in student.dates:
        return state, False, DUPLICATE_ABSENCE_MESSAGE

    updated = replace(
        student,
        dates=student.dates + (date,),
        total_fee=max(0, student.total_fee - ABSENCE_PENALTY)
    )
    students = tuple(updated if s.id == student_id else s for s in state.students)
    return replace(state, students=students), True, ""


def absence_count(student):
    return len(student.dates)


def attendance_count(student):
    return max(0, SESSIONS_PER_PERIOD - absence_count(student))
