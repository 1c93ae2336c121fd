from __future__ import annotations

import logging
from collections import Counter

from weekgrid.core.exceptions import CapacityError, ReservationConflictError
from weekgrid.services.request_normalizer import EngineOptions, FixedAllocation, NormalizedRequest
from weekgrid.services.week_grid import (
    DAY_COUNT,
    DAYS,
    RESERVED_LABELS,
    SATURDAY,
    WEEKDAY_INDICES,
    ReservedKind,
    ReservedLabel,
    WeekGrid,
    rotated_days,
    slot_name,
)

logger = logging.getLogger(__name__)


def weekday_rows(allocation: FixedAllocation, options: EngineOptions) -> list[tuple[int, int]]:
    """Map each configured weekday period to a (day, period) cell.

    ``fill_forward`` puts every period on the designated weekday and moves a
    period to the next weekday only when this allocation already holds it
    there. ``spread`` sends the i-th period to the i-th weekday after the
    designated one. ``single_day`` keeps them all on the designated weekday.
    """
    days = rotated_days(options.designated_weekday, WEEKDAY_INDICES)
    used: Counter[int] = Counter()
    cells: list[tuple[int, int]] = []
    for offset, period in enumerate(allocation.weekday_periods):
        if options.weekday_allocation == "single_day":
            day = options.designated_weekday
        elif options.weekday_allocation == "spread":
            day = (options.designated_weekday + offset) % len(WEEKDAY_INDICES)
        else:
            day = days[used[period]]
            used[period] += 1
        cells.append((day, period))
    return cells


def _claim(grid: WeekGrid, day: int, period: int, kind: ReservedKind) -> None:
    current = grid.get(day, period)
    if current is not None:
        if isinstance(current, ReservedLabel):
            holder, holder_label = current.kind.value, RESERVED_LABELS[current.kind]
        else:
            holder = holder_label = current.subject_id
        raise ReservationConflictError(
            f"{holder_label} and {RESERVED_LABELS[kind]} both claim {slot_name(day, period)}",
            details={
                "day": DAYS[day],
                "period": period,
                "claimed_by": holder,
                "requested_by": kind.value,
            },
        )
    grid.place(day, period, ReservedLabel(kind))


def reserve_special_hours(grid: WeekGrid, allocations: tuple[FixedAllocation, ...], options: EngineOptions) -> None:
    for allocation in allocations:
        for period in allocation.saturday_periods:
            _claim(grid, SATURDAY, period, allocation.kind)
        for day, period in weekday_rows(allocation, options):
            _claim(grid, day, period, allocation.kind)
        logger.debug(
            "Reserved %s | saturday=%s | weekdays=%s",
            allocation.kind.value,
            list(allocation.saturday_periods),
            list(allocation.weekday_periods),
        )


def reserve_open_electives(grid: WeekGrid, hours: int, options: EngineOptions) -> None:
    label = ReservedLabel(ReservedKind.open_elective)
    cursor = 0
    for placed in range(hours):
        chosen: int | None = None
        # Second pass drops the per-day cap; cells fill from P7 down.
        for capped in (True, False):
            for day in rotated_days(cursor):
                if grid.free_cells(day) == 0:
                    continue
                if capped and grid.count(label, day) >= options.max_open_elective_per_day:
                    continue
                chosen = day
                break
            if chosen is not None:
                break
        if chosen is None:
            raise CapacityError(
                f"No free period left for open elective hour {placed + 1} of {hours}",
                details={"open_elective_hours": hours, "placed": placed},
            )
        grid.place(chosen, grid.last_free_period(chosen), label)
        cursor = (chosen + 1) % DAY_COUNT


def reserve_fixed_slots(grid: WeekGrid, request: NormalizedRequest, options: EngineOptions) -> None:
    reserve_special_hours(grid, request.allocations, options)
    reserve_open_electives(grid, request.open_elective_hours, options)
