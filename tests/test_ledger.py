import pytest

from dojo_attendance.ledger import (
    absence_total,
    clear_month,
    days_in_month,
    go_next_month,
    go_previous_month,
    is_valid_month,
    month_key,
    next_month,
    parse_month_key,
    previous_month,
    set_view,
    student_days,
    toggle_day,
)
from dojo_attendance.models import AppState, ViewState
from dojo_attendance.roster import add_students, remove_student


def make_state(names="Ana, Boris"):
    return add_students(AppState(view=ViewState(2025, 11)), names)


@pytest.mark.parametrize("year, month, expected", [
    (2024, 2, 29),
    (2023, 2, 28),
    (2000, 2, 29),
    (1900, 2, 28),
    (2025, 1, 31),
    (2025, 4, 30),
    (2025, 12, 31),
])
def test_days_in_month(year, month, expected):
    assert days_in_month(year, month) == expected


def test_month_key_is_zero_padded():
    assert month_key(2025, 3) == "2025-03"
    assert month_key(2025, 11) == "2025-11"


def test_month_keys_sort_chronologically():
    months = [(2025, 10), (2024, 12), (2025, 2), (999, 7), (2025, 1)]
    keys = [month_key(y, m) for y, m in months]
    assert sorted(keys) == [month_key(y, m) for y, m in sorted(months)]


def test_parse_month_key():
    assert parse_month_key("2025-03") == (2025, 3)
    assert parse_month_key("2025-13") is None
    assert parse_month_key("2025-3") is None
    assert parse_month_key("march") is None
    assert parse_month_key(202503) is None


def test_month_navigation_rolls_over_year():
    assert next_month(2025, 12) == (2026, 1)
    assert previous_month(2025, 1) == (2024, 12)
    assert next_month(2025, 5) == (2025, 6)
    assert previous_month(2025, 5) == (2025, 4)


def test_toggle_day_twice_restores_membership():
    state = make_state()
    ana = state.students[0].id

    once = toggle_day(state, ana, 2025, 11, 5)
    assert student_days(once, ana, 2025, 11) == (5,)

    twice = toggle_day(once, ana, 2025, 11, 5)
    assert student_days(twice, ana, 2025, 11) == ()


def test_toggle_day_keeps_days_sorted():
    state = make_state()
    ana = state.students[0].id
    for day in (20, 3, 11):
        state = toggle_day(state, ana, 2025, 11, day)

    assert student_days(state, ana, 2025, 11) == (3, 11, 20)
    assert absence_total(state, ana, 2025, 11) == 3


def test_toggle_day_returns_new_snapshot():
    state = make_state()
    ana = state.students[0].id
    first = toggle_day(state, ana, 2025, 11, 1)
    second = toggle_day(first, ana, 2025, 11, 2)

    assert state.attendance == {}
    assert first.attendance is not second.attendance
    assert first.attendance["2025-11"] is not second.attendance["2025-11"]
    assert student_days(first, ana, 2025, 11) == (1,)


@pytest.mark.parametrize("day", [0, 31, 32, -1])
def test_toggle_out_of_range_day_is_noop(day):
    state = make_state()
    ana = state.students[0].id
    assert toggle_day(state, ana, 2025, 11, day) is state


def test_toggle_unknown_student_is_noop():
    state = make_state()
    assert toggle_day(state, "missing", 2025, 11, 5) is state


def test_clear_month_only_touches_that_month():
    state = make_state()
    ana = state.students[0].id
    state = toggle_day(state, ana, 2025, 11, 5)
    state = toggle_day(state, ana, 2025, 10, 7)

    cleared = clear_month(state, 2025, 11)

    assert cleared.attendance["2025-11"] == {}
    assert student_days(cleared, ana, 2025, 10) == (7,)


def test_remove_student_cascades_across_months():
    state = make_state()
    ana, boris = (s.id for s in state.students)
    for month in (9, 10, 11):
        state = toggle_day(state, ana, 2025, month, 1)
        state = toggle_day(state, boris, 2025, month, 2)

    state = remove_student(state, ana)

    for month_ledger in state.attendance.values():
        assert ana not in month_ledger
        assert month_ledger[boris] == (2,)


def test_view_navigation():
    state = AppState(view=ViewState(2025, 12))
    state = go_next_month(state)
    assert state.view == ViewState(2026, 1)
    state = go_previous_month(go_previous_month(state))
    assert state.view == ViewState(2025, 11)


def test_set_view_rejects_invalid_month():
    state = AppState(view=ViewState(2025, 11))
    assert set_view(state, 2025, 13) is state
    assert set_view(state, 2025, 0) is state
    assert set_view(state, 2024, 2).view == ViewState(2024, 2)


@pytest.mark.parametrize("year, month", [(2025, 13), (2025, 0), (0, 5), (10000, 1)])
def test_clear_invalid_month_is_noop(year, month):
    state = make_state()
    assert clear_month(state, year, month) is state


@pytest.mark.parametrize("year, month, day", [
    (10000, 1, 5),
    (0, 1, 5),
    (2025, 13, 5),
    (2025, 11, 5.0),
    (2025, 11, True),
    (2025, 11, "5"),
])
def test_toggle_day_rejects_values_that_cannot_be_stored(year, month, day):
    state = make_state()
    ana = state.students[0].id
    assert toggle_day(state, ana, year, month, day) is state


@pytest.mark.parametrize("year, month", [(10000, 1), (2025, 11.0), ("2025", 11)])
def test_set_view_rejects_unstorable_year_or_month(year, month):
    state = AppState(view=ViewState(2025, 11))
    assert set_view(state, year, month) is state


def test_is_valid_month_bounds():
    assert is_valid_month(1, 1)
    assert is_valid_month(9999, 12)
    assert not is_valid_month(10000, 1)
    assert not is_valid_month(2025, True)
