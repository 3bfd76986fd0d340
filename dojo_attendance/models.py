from dataclasses import dataclass, field
from typing import Dict, Tuple

from dojo_attendance.constants import DEFAULT_FEE


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    total_fee: float = DEFAULT_FEE
    dates: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ViewState:
    year: int
    month: int


# attendance: {"YYYY-MM": {student_id: (day, ...)}}
MonthLedger = Dict[str, Tuple[int, ...]]


@dataclass(frozen=True)
class AppState:
    view: ViewState
    students: Tuple[Student, ...] = ()
    attendance: Dict[str, MonthLedger] = field(default_factory=dict)
