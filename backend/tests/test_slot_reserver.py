import pytest

from weekgrid.core.exceptions import CapacityError, ReservationConflictError
from weekgrid.schemas.generator import GenerationRequest
from weekgrid.services.request_normalizer import EngineOptions, normalize_request
from weekgrid.services.slot_reserver import reserve_fixed_slots, reserve_open_electives
from weekgrid.services.week_grid import ReservedKind, ReservedLabel, SubjectRef, WeekGrid

OPEN_ELECTIVE = ReservedLabel(ReservedKind.open_elective)


def reserve(configs, open_elective_hours=0, options=None):
    options = options or EngineOptions()
    request = GenerationRequest(
        special={"mode": "explicit", "configs": configs},
        open_elective_hours=open_elective_hours,
    )
    grid = WeekGrid()
    reserve_fixed_slots(grid, normalize_request(request, options), options)
    return grid


def fill_days(grid, days):
    for day in days:
        for period in range(1, 8):
            grid.place(day, period, SubjectRef("filler"))


def test_saturday_periods_are_reserved():
    grid = reserve(
        [{"special_type": "seminar", "total_hours": 2, "saturday_hours": 2, "saturday_periods": [3, 4]}]
    )
    assert grid.get(5, 3) == ReservedLabel(ReservedKind.seminar)
    assert grid.get(5, 4) == ReservedLabel(ReservedKind.seminar)
    assert grid.free_cells() == 40


def test_repeated_weekday_period_moves_to_the_next_weekday():
    grid = reserve(
        [
            {
                "special_type": "counselling",
                "total_hours": 3,
                "weekdays_hours": 3,
                "weekdays_periods": [7, 7, 7],
            }
        ]
    )
    label = ReservedLabel(ReservedKind.counselling)
    assert [grid.get(day, 7) for day in range(3)] == [label, label, label]
    assert grid.count(label) == 3


def test_single_day_allocation_uses_designated_weekday():
    grid = reserve(
        [{"special_type": "library", "total_hours": 2, "weekdays_hours": 2, "weekdays_periods": [1, 2]}],
        options=EngineOptions(weekday_allocation="single_day", designated_weekday=2),
    )
    label = ReservedLabel(ReservedKind.library)
    assert grid.periods_of(label, 2) == [1, 2]
    assert grid.days_with(label) == [2]


def test_weekday_periods_fill_monday_first():
    grid = reserve(
        [{"special_type": "library", "total_hours": 2, "weekdays_hours": 2, "weekdays_periods": [3, 5]}]
    )
    label = ReservedLabel(ReservedKind.library)
    assert grid.days_with(label) == [0]
    assert grid.periods_of(label, 0) == [3, 5]


def test_fill_forward_starts_at_designated_weekday():
    grid = reserve(
        [{"special_type": "library", "total_hours": 3, "weekdays_hours": 3, "weekdays_periods": [2, 2, 4]}],
        options=EngineOptions(designated_weekday=4),
    )
    label = ReservedLabel(ReservedKind.library)
    assert grid.periods_of(label, 4) == [2, 4]
    assert grid.periods_of(label, 0) == [2]


def test_spread_allocation_moves_each_period_to_a_new_weekday():
    grid = reserve(
        [{"special_type": "library", "total_hours": 2, "weekdays_hours": 2, "weekdays_periods": [3, 5]}],
        options=EngineOptions(weekday_allocation="spread"),
    )
    label = ReservedLabel(ReservedKind.library)
    assert grid.get(0, 3) == label
    assert grid.get(1, 5) == label


def test_weekday_periods_of_two_specials_conflict():
    with pytest.raises(ReservationConflictError) as exc_info:
        reserve(
            [
                {"special_type": "seminar", "total_hours": 1, "weekdays_hours": 1, "weekdays_periods": [3]},
                {"special_type": "library", "total_hours": 2, "weekdays_hours": 2, "weekdays_periods": [1, 3]},
            ]
        )
    assert exc_info.value.details == {"day": "Mon", "period": 3, "claimed_by": "seminar", "requested_by": "library"}


def test_open_electives_leave_morning_free_for_labs():
    grid = reserve([], open_elective_hours=12)
    for day in range(6):
        assert grid.block_is_free(day, 1, 4)


def test_overlapping_saturday_periods_raise_conflict():
    with pytest.raises(ReservationConflictError) as exc_info:
        reserve(
            [
                {"special_type": "seminar", "total_hours": 2, "saturday_hours": 2, "saturday_periods": [3, 4]},
                {"special_type": "library", "total_hours": 1, "saturday_hours": 1, "saturday_periods": [3]},
            ]
        )
    error = exc_info.value
    assert "Seminar" in error.message
    assert "Library" in error.message
    assert "Sat P3" in error.message
    assert error.details == {"day": "Sat", "period": 3, "claimed_by": "seminar", "requested_by": "library"}
    assert error.status_code == 409


def test_open_elective_hours_rotate_through_days():
    grid = reserve([], open_elective_hours=3)
    assert grid.get(0, 7) == OPEN_ELECTIVE
    assert grid.get(1, 7) == OPEN_ELECTIVE
    assert grid.get(2, 7) == OPEN_ELECTIVE
    assert grid.count(OPEN_ELECTIVE) == 3


def test_open_elective_daily_cap_is_relaxed_when_needed():
    grid = WeekGrid()
    fill_days(grid, range(1, 6))
    reserve_open_electives(grid, 3, EngineOptions(max_open_elective_per_day=2))
    assert grid.periods_of(OPEN_ELECTIVE, 0) == [5, 6, 7]


def test_open_elective_respects_cap_while_other_days_have_room():
    grid = reserve([], open_elective_hours=8)
    assert max(grid.count(OPEN_ELECTIVE, day) for day in range(6)) == 2
    assert grid.count(OPEN_ELECTIVE) == 8


def test_open_elective_without_free_periods_is_a_capacity_error():
    grid = WeekGrid()
    fill_days(grid, range(6))
    with pytest.raises(CapacityError):
        reserve_open_electives(grid, 1, EngineOptions())


def test_open_elective_skips_reserved_cells():
    grid = reserve(
        [{"special_type": "seminar", "total_hours": 1, "weekdays_hours": 1, "weekdays_periods": [7]}],
        open_elective_hours=1,
    )
    assert grid.get(0, 7) == ReservedLabel(ReservedKind.seminar)
    assert grid.get(0, 6) == OPEN_ELECTIVE
