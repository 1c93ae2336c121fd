from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from typing import Literal

from weekgrid.core.exceptions import PlacementError, SchedulerError
from weekgrid.schemas.generator import LabPreference, Subject
from weekgrid.services.request_normalizer import EngineOptions, NormalizedRequest
from weekgrid.services.week_grid import (
    CELL_COUNT,
    DAY_COUNT,
    DAYS,
    MORNING_PERIODS,
    PERIOD_COUNT,
    SubjectRef,
    WeekGrid,
)

logger = logging.getLogger(__name__)

EVENING_START = 5
MORNING_LAST = MORNING_PERIODS[-1]

PlacementMode = Literal["morning", "evening", "any"]


def lab_order(
    labs: tuple[Subject, ...],
    preferences: dict[str, LabPreference],
    options: EngineOptions,
) -> list[Subject]:
    """Ascending priority; labs without one go last."""

    def sort_key(item: tuple[int, Subject]) -> tuple[float, int, int]:
        index, lab = item
        preference = preferences.get(lab.id)
        priority = preference.priority if preference and preference.priority is not None else math.inf
        length = -lab.hours_per_week if options.lab_tie_break == "longest_first" else 0
        return priority, length, index

    return [lab for _, lab in sorted(enumerate(labs), key=sort_key)]


def placement_mode(lab: Subject, preference: LabPreference | None) -> PlacementMode:
    if preference is None:
        return "any"
    if preference.morning_enabled:
        return "morning"
    if preference.evening_two_hour_start_at_5 and lab.hours_per_week == 2:
        return "evening"
    return "any"


def morning_starts(hours: int, preferred: int | None) -> list[int]:
    last_start = MORNING_LAST - hours + 1
    start = max(1, min(last_start, preferred or 1))
    return [start] + [candidate for candidate in range(1, last_start + 1) if candidate != start]


def day_order(grid: WeekGrid, lab_ids: set[str], prefer_one_lab_per_day: bool) -> list[int]:
    days = list(range(DAY_COUNT))
    if not prefer_one_lab_per_day:
        return days

    def has_lab(day: int) -> bool:
        return any(
            isinstance(grid.get(day, period), SubjectRef) and grid.get(day, period).subject_id in lab_ids
            for period in range(1, PERIOD_COUNT + 1)
        )

    free_days = [day for day in days if not has_lab(day)]
    return free_days + [day for day in days if day not in free_days]


def candidate_blocks(mode: PlacementMode, hours: int, preference: LabPreference | None, days: list[int]) -> Iterator[tuple[int, int]]:
    if mode == "morning":
        # Preferred start is tried on every day before any other morning start.
        for start in morning_starts(hours, preference.morning_start if preference else None):
            for day in days:
                yield day, start
    elif mode == "evening":
        for day in days:
            yield day, EVENING_START
    else:
        for day in days:
            for start in range(1, PERIOD_COUNT - hours + 2):
                yield day, start


def _failure_reason(mode: PlacementMode, hours: int) -> str:
    if mode == "morning":
        return f"no day has {hours} free periods inside the morning window P1-P{MORNING_LAST}"
    if mode == "evening":
        return f"P{EVENING_START}-P{EVENING_START + 1} is not free on any day"
    return f"no day has {hours} consecutive free periods"


def place_lab(
    grid: WeekGrid,
    lab: Subject,
    preference: LabPreference | None,
    lab_ids: set[str],
    options: EngineOptions,
) -> tuple[int, int]:
    hours = lab.hours_per_week
    mode = placement_mode(lab, preference)
    if hours > PERIOD_COUNT:
        raise PlacementError(lab.name, f"{hours} hours do not fit in one {PERIOD_COUNT}-period day", {"hours": hours})
    if mode == "morning" and hours > len(MORNING_PERIODS):
        raise PlacementError(
            lab.name,
            f"a {hours}-hour block does not fit the morning window P1-P{MORNING_LAST}",
            {"hours": hours, "mode": mode},
        )

    days = day_order(grid, lab_ids, options.prefer_one_lab_per_day)
    for step, (day, start) in enumerate(candidate_blocks(mode, hours, preference, days)):
        if step >= CELL_COUNT:
            raise SchedulerError(
                f"Lab placement scan for {lab.name} exceeded {CELL_COUNT} candidates",
                details={"lab": lab.name},
            )
        if grid.block_is_free(day, start, hours):
            grid.place_block(day, start, hours, SubjectRef(lab.id))
            logger.debug(
                "Placed lab %s | day=%s | periods=P%s-P%s | mode=%s",
                lab.name,
                DAYS[day],
                start,
                start + hours - 1,
                mode,
            )
            return day, start

    raise PlacementError(lab.name, _failure_reason(mode, hours), {"hours": hours, "mode": mode})


def place_labs(grid: WeekGrid, request: NormalizedRequest, options: EngineOptions) -> None:
    lab_ids = {lab.id for lab in request.labs}
    for lab in lab_order(request.labs, request.lab_preferences, options):
        if lab.hours_per_week <= 0:
            continue
        place_lab(grid, lab, request.lab_preferences.get(lab.id), lab_ids, options)
