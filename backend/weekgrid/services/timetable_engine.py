"""Weekly timetable generation for one department-year-section.

``generate`` runs the fixed pipeline (normalize, reserve fixed slots, place
labs, distribute the remaining subjects) and either returns a complete grid or
raises one of the ``SchedulerError`` subclasses; no partial grid escapes.
``validate`` re-checks any grid against the lab placement rules and always
returns a report.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from weekgrid.core.config import Settings
from weekgrid.schemas.generator import GenerationRequest, LabPreference, Subject, ValidationReport
from weekgrid.services.grid_validator import validate_grid
from weekgrid.services.lab_placer import place_labs
from weekgrid.services.request_normalizer import EngineOptions, normalize_request
from weekgrid.services.slot_reserver import reserve_fixed_slots
from weekgrid.services.subject_distributor import distribute_subjects
from weekgrid.services.week_grid import WeekGrid

logger = logging.getLogger(__name__)


def engine_options_from_settings(settings: Settings) -> EngineOptions:
    return EngineOptions(
        weekday_allocation=settings.engine_weekday_allocation,
        designated_weekday=settings.engine_designated_weekday,
        lab_tie_break=settings.engine_lab_tie_break,
        prefer_one_lab_per_day=settings.engine_prefer_one_lab_per_day,
        max_open_elective_per_day=settings.engine_max_open_elective_per_day,
    )


def generate(request: GenerationRequest, options: EngineOptions | None = None) -> WeekGrid:
    options = options or EngineOptions()
    normalized = normalize_request(request, options)
    grid = WeekGrid()
    reserve_fixed_slots(grid, normalized, options)
    place_labs(grid, normalized, options)
    distribute_subjects(grid, normalized)
    logger.debug(
        "Generated grid | total_hours=%s | free_periods=%s",
        normalized.total_hours,
        grid.free_cells(),
    )
    return grid


def validate(
    grid: WeekGrid,
    subjects: Iterable[Subject],
    lab_preferences: Mapping[str, LabPreference] | None = None,
) -> ValidationReport:
    return validate_grid(grid, subjects, lab_preferences)
