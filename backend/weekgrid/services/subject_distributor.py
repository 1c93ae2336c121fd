from __future__ import annotations

import logging

from weekgrid.core.exceptions import CapacityError
from weekgrid.schemas.generator import Subject
from weekgrid.services.request_normalizer import NormalizedRequest
from weekgrid.services.week_grid import DAY_COUNT, WEEKDAY_INDICES, SubjectRef, WeekGrid, rotated_days

logger = logging.getLogger(__name__)


def pick_day(grid: WeekGrid, subject: Subject, cursor: int) -> int | None:
    """Free day holding the fewest hours of ``subject``; ties go to round-robin order."""
    eligible = WEEKDAY_INDICES if subject.weekday_only else range(DAY_COUNT)
    ref = SubjectRef(subject.id)
    best_day: int | None = None
    best_count = 0
    for day in rotated_days(cursor, eligible):
        if grid.free_cells(day) == 0:
            continue
        count = grid.count(ref, day)
        if best_day is None or count < best_count:
            best_day, best_count = day, count
    return best_day


def distribute_subjects(grid: WeekGrid, request: NormalizedRequest) -> None:
    required = sum(subject.hours_per_week for subject in request.distributable)
    available = grid.free_cells()
    if available < required:
        raise CapacityError(
            f"{required} theory/elective hours remain but only {available} periods are free",
            details={"required_hours": required, "free_periods": available},
        )
    weekday_required = sum(subject.hours_per_week for subject in request.distributable if subject.weekday_only)
    weekday_available = sum(grid.free_cells(day) for day in WEEKDAY_INDICES)
    if weekday_available < weekday_required:
        raise CapacityError(
            f"{weekday_required} weekday-only hours remain but only {weekday_available} weekday periods are free",
            details={"required_hours": weekday_required, "free_periods": weekday_available},
        )

    # Weekday-only subjects go first so Saturday is left for everything else.
    ordered = sorted(request.distributable, key=lambda subject: not subject.weekday_only)
    cursor = 0
    for subject in ordered:
        ref = SubjectRef(subject.id)
        for placed in range(subject.hours_per_week):
            day = pick_day(grid, subject, cursor)
            if day is None:
                scope = "weekday" if subject.weekday_only else "free"
                raise CapacityError(
                    f"No {scope} period left for {subject.name} (hour {placed + 1} of {subject.hours_per_week})",
                    details={"subject": subject.name, "placed": placed, "required": subject.hours_per_week},
                )
            grid.place(day, grid.first_free_period(day), ref)
            cursor = (day + 1) % DAY_COUNT
        logger.debug("Distributed %s | hours=%s", subject.name, subject.hours_per_week)
