from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Literal

from weekgrid.core.exceptions import CapacityError, ConfigurationError
from weekgrid.schemas.generator import (
    ExplicitSpecialConfig,
    GenerationContext,
    GenerationRequest,
    LabPreference,
    LegacySpecialFlags,
    SpecialHoursConfig,
    Subject,
)
from weekgrid.services.week_grid import CELL_COUNT, WEEKDAY_INDICES, ReservedKind

logger = logging.getLogger(__name__)

# Saturday periods used when only the on/off flags are known.
LEGACY_SATURDAY_PERIODS: dict[str, tuple[int, ...]] = {
    "seminar": (3, 4),
    "library": (5,),
    "counselling": (6, 7),
}


@dataclass(frozen=True)
class EngineOptions:
    weekday_allocation: Literal["fill_forward", "spread", "single_day"] = "fill_forward"
    designated_weekday: int = 0
    lab_tie_break: Literal["input_order", "longest_first"] = "input_order"
    prefer_one_lab_per_day: bool = True
    max_open_elective_per_day: int = 2


@dataclass(frozen=True)
class FixedAllocation:
    kind: ReservedKind
    saturday_periods: tuple[int, ...]
    weekday_periods: tuple[int, ...]

    @property
    def hours(self) -> int:
        return len(self.saturday_periods) + len(self.weekday_periods)


@dataclass(frozen=True)
class NormalizedRequest:
    subjects: tuple[Subject, ...]
    labs: tuple[Subject, ...]
    distributable: tuple[Subject, ...]
    allocations: tuple[FixedAllocation, ...]
    lab_preferences: dict[str, LabPreference] = field(default_factory=dict)
    open_elective_hours: int = 0
    subject_hours: int = 0
    special_hours: int = 0
    context: GenerationContext | None = None

    @property
    def total_hours(self) -> int:
        return self.subject_hours + self.special_hours + self.open_elective_hours


def _check_special_config(config: SpecialHoursConfig, options: EngineOptions) -> None:
    name = config.special_type
    if config.total_hours != config.saturday_hours + config.weekdays_hours:
        raise ConfigurationError(
            f"{name}: total hours ({config.total_hours}) must equal Saturday hours "
            f"({config.saturday_hours}) + weekdays hours ({config.weekdays_hours})",
            details={"special_type": name},
        )
    if len(config.saturday_periods) != config.saturday_hours:
        raise ConfigurationError(
            f"{name}: {config.saturday_hours} Saturday hour(s) configured but "
            f"{len(config.saturday_periods)} Saturday period(s) selected",
            details={"special_type": name, "saturday_periods": list(config.saturday_periods)},
        )
    if len(config.weekdays_periods) != config.weekdays_hours:
        raise ConfigurationError(
            f"{name}: {config.weekdays_hours} weekday hour(s) configured but "
            f"{len(config.weekdays_periods)} weekday period(s) selected",
            details={"special_type": name, "weekdays_periods": list(config.weekdays_periods)},
        )
    repeated = [period for period, seen in Counter(config.saturday_periods).items() if seen > 1]
    if repeated:
        raise ConfigurationError(
            f"{name}: Saturday period(s) {repeated} selected more than once",
            details={"special_type": name, "saturday_periods": list(config.saturday_periods)},
        )
    if options.weekday_allocation == "single_day":
        repeated = [period for period, seen in Counter(config.weekdays_periods).items() if seen > 1]
        if repeated:
            raise ConfigurationError(
                f"{name}: weekday period(s) {repeated} repeat but all weekday hours share one day",
                details={"special_type": name, "weekdays_periods": list(config.weekdays_periods)},
            )
    else:
        # A repeated period takes the same period on the following weekday.
        repeated = [
            period
            for period, seen in Counter(config.weekdays_periods).items()
            if seen > len(WEEKDAY_INDICES)
        ]
        if repeated:
            raise ConfigurationError(
                f"{name}: weekday period(s) {repeated} repeat more often than there are weekdays",
                details={"special_type": name, "weekdays_periods": list(config.weekdays_periods)},
            )


def resolve_special_allocations(
    special: LegacySpecialFlags | ExplicitSpecialConfig,
    options: EngineOptions,
) -> tuple[FixedAllocation, ...]:
    if isinstance(special, LegacySpecialFlags):
        enabled = {
            "seminar": special.seminar,
            "library": special.library,
            "counselling": special.counselling,
        }
        return tuple(
            FixedAllocation(kind=ReservedKind(name), saturday_periods=periods, weekday_periods=())
            for name, periods in LEGACY_SATURDAY_PERIODS.items()
            if enabled[name]
        )

    allocations: list[FixedAllocation] = []
    seen_types: set[str] = set()
    for config in special.configs:
        if config.special_type in seen_types:
            raise ConfigurationError(
                f"{config.special_type} is configured more than once",
                details={"special_type": config.special_type},
            )
        seen_types.add(config.special_type)
        _check_special_config(config, options)
        if not config.is_active:
            logger.debug("Skipping inactive special hours config %s", config.special_type)
            continue
        allocations.append(
            FixedAllocation(
                kind=ReservedKind(config.special_type),
                saturday_periods=tuple(config.saturday_periods),
                weekday_periods=tuple(config.weekdays_periods),
            )
        )
    return tuple(allocations)


def normalize_request(request: GenerationRequest, options: EngineOptions | None = None) -> NormalizedRequest:
    options = options or EngineOptions()
    allocations = resolve_special_allocations(request.special, options)

    labs = tuple(subject for subject in request.subjects if subject.is_lab)
    distributable = tuple(
        subject for subject in request.subjects if subject.type in ("theory", "elective")
    )
    lab_ids = {lab.id for lab in labs}
    preferences: dict[str, LabPreference] = {}
    for subject_id, preference in request.lab_preferences.items():
        if subject_id not in lab_ids:
            logger.debug("Ignoring lab preference for non-lab subject %s", subject_id)
            continue
        preferences[subject_id] = preference

    subject_hours = sum(
        subject.hours_per_week for subject in request.subjects if not subject.is_open_elective
    )
    special_hours = sum(allocation.hours for allocation in allocations)
    total = subject_hours + special_hours + request.open_elective_hours
    if total > CELL_COUNT:
        raise CapacityError(
            f"Requested {total} hours but the week has only {CELL_COUNT} periods",
            details={
                "total_hours": total,
                "subject_hours": subject_hours,
                "special_hours": special_hours,
                "open_elective_hours": request.open_elective_hours,
                "capacity": CELL_COUNT,
            },
        )

    return NormalizedRequest(
        subjects=tuple(request.subjects),
        labs=labs,
        distributable=distributable,
        allocations=allocations,
        lab_preferences=preferences,
        open_elective_hours=request.open_elective_hours,
        subject_hours=subject_hours,
        special_hours=special_hours,
        context=request.context,
    )
