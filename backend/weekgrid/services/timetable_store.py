from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from weekgrid.core.exceptions import ConfigurationError, ResourceNotFoundError
from weekgrid.models.timetable import (
    LabPreferenceRecord,
    OpenElectiveBudget,
    SectionTimetable,
    SpecialHoursConfigRecord,
)
from weekgrid.schemas.generator import ExplicitSpecialConfig, GridRows, LabPreference, SpecialHoursConfig

logger = logging.getLogger(__name__)


@dataclass
class GenerationInputs:
    special: ExplicitSpecialConfig | None = None
    lab_preferences: dict[str, LabPreference] = field(default_factory=dict)
    open_elective_hours: int = 0


def _to_special_config(record: SpecialHoursConfigRecord) -> SpecialHoursConfig:
    try:
        return SpecialHoursConfig.model_validate(record, from_attributes=True)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Stored special hours config '{record.special_type}' is invalid",
            details={"special_type": record.special_type, "errors": exc.errors(include_url=False)},
        ) from exc


def load_special_configs(db: Session, department: str, year: str) -> ExplicitSpecialConfig | None:
    """Explicit configuration rows, or None when the department/year has none."""
    records = db.execute(
        select(SpecialHoursConfigRecord)
        .where(
            SpecialHoursConfigRecord.department == department,
            SpecialHoursConfigRecord.year == year,
        )
        .order_by(SpecialHoursConfigRecord.created_at, SpecialHoursConfigRecord.special_type)
    ).scalars().all()
    if not records:
        return None
    return ExplicitSpecialConfig(configs=tuple(_to_special_config(record) for record in records))


def load_lab_preferences(db: Session, department: str, year: str, section: str) -> dict[str, LabPreference]:
    records = db.execute(
        select(LabPreferenceRecord).where(
            LabPreferenceRecord.department == department,
            LabPreferenceRecord.year == year,
            LabPreferenceRecord.section == section,
        )
    ).scalars().all()
    return {
        record.subject_id: LabPreference.model_validate(record, from_attributes=True)
        for record in records
    }


def load_open_elective_hours(db: Session, department: str, year: str) -> int:
    budget = db.execute(
        select(OpenElectiveBudget).where(
            OpenElectiveBudget.department == department,
            OpenElectiveBudget.year == year,
        )
    ).scalars().first()
    return budget.hours if budget is not None else 0


def load_generation_inputs(db: Session, department: str, year: str, section: str) -> GenerationInputs:
    inputs = GenerationInputs(
        special=load_special_configs(db, department, year),
        lab_preferences=load_lab_preferences(db, department, year, section),
        open_elective_hours=load_open_elective_hours(db, department, year),
    )
    logger.debug(
        "Loaded generation inputs | department=%s | year=%s | section=%s | explicit_specials=%s | lab_prefs=%s | open_elective=%s",
        department,
        year,
        section,
        inputs.special is not None,
        len(inputs.lab_preferences),
        inputs.open_elective_hours,
    )
    return inputs


def _find_section_timetable(db: Session, department: str, year: str, section: str) -> SectionTimetable | None:
    return db.execute(
        select(SectionTimetable).where(
            SectionTimetable.department == department,
            SectionTimetable.year == year,
            SectionTimetable.section == section,
        )
    ).scalars().first()


def save_section_grid(db: Session, department: str, year: str, section: str, rows: GridRows) -> SectionTimetable:
    record = _find_section_timetable(db, department, year, section)
    if record is None:
        record = SectionTimetable(department=department, year=year, section=section, grid=rows)
        db.add(record)
    else:
        record.grid = rows
    db.commit()
    db.refresh(record)
    return record


def get_section_grid(db: Session, department: str, year: str, section: str) -> SectionTimetable:
    record = _find_section_timetable(db, department, year, section)
    if record is None:
        raise ResourceNotFoundError("Section timetable", f"{department}/{year}/{section}")
    return record
