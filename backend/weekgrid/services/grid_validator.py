from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping

from weekgrid.schemas.generator import LabPreference, Subject, ValidationReport
from weekgrid.services.week_grid import DAYS, MORNING_PERIODS, SATURDAY, SubjectRef, WeekGrid, slot_name

EVENING_PAIR = [5, 6]


def _periods_text(periods: list[int]) -> str:
    return ", ".join(f"P{period}" for period in periods)


class GridValidator:
    """Re-derives lab placement facts from a finished grid, however it was produced."""

    def __init__(
        self,
        grid: WeekGrid,
        subjects: Iterable[Subject],
        lab_preferences: Mapping[str, LabPreference] | None = None,
    ):
        self.grid = grid
        self.subjects = list(subjects)
        self.lab_preferences = dict(lab_preferences or {})
        self.labs = [subject for subject in self.subjects if subject.is_lab]

    def validate(self) -> ValidationReport:
        errors: list[str] = []
        warnings: list[str] = []
        lab_days: dict[str, list[int]] = {}
        lab_ids_by_name: dict[str, str] = {}

        for lab in self.labs:
            ref = SubjectRef(lab.id)
            days = self.grid.days_with(ref)
            if lab.name in lab_ids_by_name:
                warnings.append(
                    f"Labs {lab_ids_by_name[lab.name]} and {lab.id} share the name {lab.name}; "
                    f"lab_days lists {lab_ids_by_name[lab.name]} only"
                )
            else:
                lab_ids_by_name[lab.name] = lab.id
                lab_days[lab.name] = days
            errors.extend(self._lab_errors(lab, days))

            placed = self.grid.count(ref)
            if not days and lab.hours_per_week > 0:
                warnings.append(f"Lab {lab.name} is not placed in the grid")
            elif placed != lab.hours_per_week:
                warnings.append(
                    f"Lab {lab.name} occupies {placed} period(s) but needs {lab.hours_per_week}"
                )

        warnings.extend(self._shared_lab_days(lab_days))
        warnings.extend(self._subject_warnings())

        return ValidationReport(valid=not errors, errors=errors, warnings=warnings, lab_days=lab_days)

    def _lab_errors(self, lab: Subject, days: list[int]) -> list[str]:
        errors: list[str] = []
        ref = SubjectRef(lab.id)
        if len(days) > 1:
            errors.append(
                f"Lab {lab.name} is split across days: {', '.join(DAYS[day] for day in days)}"
            )

        preference = self.lab_preferences.get(lab.id)
        for day in days:
            periods = self.grid.periods_of(ref, day)
            if len(days) == 1 and periods != list(range(periods[0], periods[-1] + 1)):
                errors.append(
                    f"Lab {lab.name} is not contiguous on {DAYS[day]}: {_periods_text(periods)}"
                )
            if preference is None:
                continue
            if preference.morning_enabled and not set(periods) <= set(MORNING_PERIODS):
                errors.append(
                    f"Lab {lab.name} should be in morning (P1-P4) but found in periods: {_periods_text(periods)}"
                )
            elif (
                not preference.morning_enabled
                and preference.evening_two_hour_start_at_5
                and lab.hours_per_week == 2
                and periods != EVENING_PAIR
            ):
                errors.append(
                    f"Lab {lab.name} should occupy P5-P6 but found in periods: {_periods_text(periods)}"
                )
        return errors

    def _shared_lab_days(self, lab_days: dict[str, list[int]]) -> list[str]:
        labs_by_day: dict[int, list[str]] = defaultdict(list)
        for name, days in lab_days.items():
            for day in days:
                labs_by_day[day].append(name)
        return [
            f"Day {DAYS[day]} has multiple labs: {', '.join(names)}"
            for day, names in sorted(labs_by_day.items())
            if len(names) > 1
        ]

    def _subject_warnings(self) -> list[str]:
        warnings: list[str] = []
        known = {subject.id: subject for subject in self.subjects}
        reported_unknown: set[str] = set()
        for day, period, cell in self.grid.slots():
            if not isinstance(cell, SubjectRef):
                continue
            subject = known.get(cell.subject_id)
            if subject is None:
                if cell.subject_id not in reported_unknown:
                    reported_unknown.add(cell.subject_id)
                    warnings.append(f"{slot_name(day, period)} holds unknown subject {cell.subject_id}")
            elif day == SATURDAY and subject.weekday_only:
                warnings.append(f"{subject.name} is weekday-only but scheduled at {slot_name(day, period)}")
        return warnings


def validate_grid(
    grid: WeekGrid,
    subjects: Iterable[Subject],
    lab_preferences: Mapping[str, LabPreference] | None = None,
) -> ValidationReport:
    return GridValidator(grid, subjects, lab_preferences).validate()
