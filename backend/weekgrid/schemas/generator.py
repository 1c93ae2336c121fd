from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SubjectType = Literal["theory", "lab", "elective", "open elective"]
SpecialType = Literal["seminar", "library", "counselling"]

SSA_PATTERN = re.compile(r"\bSSA\b", re.IGNORECASE)

PeriodNumber = Annotated[int, Field(ge=1, le=7)]


class Subject(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    type: SubjectType
    hours_per_week: int = Field(ge=0, le=42)
    tags: tuple[str, ...] = ()
    code: str | None = Field(default=None, max_length=50)
    abbreviation: str | None = Field(default=None, max_length=50)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: str) -> str:
        if isinstance(value, str):
            cleaned = value.strip().lower().replace("_", " ").replace("-", " ")
            return cleaned
        return value

    @property
    def is_lab(self) -> bool:
        return self.type == "lab"

    @property
    def is_open_elective(self) -> bool:
        return self.type == "open elective"

    @property
    def weekday_only(self) -> bool:
        # SSA sessions never run on Saturday.
        return "SSA" in self.tags or bool(SSA_PATTERN.search(self.name))


class LabPreference(BaseModel):
    model_config = ConfigDict(frozen=True)

    morning_enabled: bool = False
    morning_start: int | None = Field(default=None, ge=1, le=4)
    evening_two_hour_start_at_5: bool = False
    priority: int | None = None


class SpecialHoursConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    special_type: SpecialType
    total_hours: int = Field(ge=0, le=42)
    saturday_hours: int = Field(default=0, ge=0, le=7)
    saturday_periods: tuple[PeriodNumber, ...] = ()
    weekdays_hours: int = Field(default=0, ge=0, le=35)
    weekdays_periods: tuple[PeriodNumber, ...] = ()
    is_active: bool = True

    @field_validator("special_type", mode="before")
    @classmethod
    def normalize_special_type(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class LegacySpecialFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["legacy"] = "legacy"
    seminar: bool = True
    library: bool = True
    counselling: bool = True


class ExplicitSpecialConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["explicit"] = "explicit"
    configs: tuple[SpecialHoursConfig, ...] = ()


SpecialConfiguration = Annotated[
    LegacySpecialFlags | ExplicitSpecialConfig,
    Field(discriminator="mode"),
]


class GenerationContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    department: str = Field(min_length=1, max_length=200)
    year: str = Field(min_length=1, max_length=20)
    section: str = Field(min_length=1, max_length=50)
    counsellor_name: str | None = Field(default=None, max_length=200)


def ensure_unique_subject_ids(subjects: Iterable[Subject]) -> None:
    seen: set[str] = set()
    for subject in subjects:
        if subject.id in seen:
            raise ValueError(f"Duplicate subject id: {subject.id}")
        seen.add(subject.id)


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    subjects: tuple[Subject, ...] = ()
    special: SpecialConfiguration = Field(default_factory=ExplicitSpecialConfig)
    lab_preferences: dict[str, LabPreference] = Field(default_factory=dict)
    open_elective_hours: int = Field(default=0, ge=0)
    context: GenerationContext | None = None

    @model_validator(mode="after")
    def validate_unique_subjects(self) -> "GenerationRequest":
        ensure_unique_subject_ids(self.subjects)
        return self


class ValidationReport(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    lab_days: dict[str, list[int]] = Field(default_factory=dict)


GridRows = list[list[str | None]]


class GenerateGridRequest(BaseModel):
    department: str = Field(min_length=1, max_length=200)
    year: str = Field(min_length=1, max_length=20)
    section: str = Field(min_length=1, max_length=50)
    counsellor_name: str | None = Field(default=None, max_length=200)
    subjects: list[Subject] = Field(default_factory=list, max_length=60)
    legacy_special: LegacySpecialFlags | None = None
    lab_preferences: dict[str, LabPreference] | None = None
    persist: bool = False

    @field_validator("subjects")
    @classmethod
    def validate_unique_subjects(cls, value: list[Subject]) -> list[Subject]:
        ensure_unique_subject_ids(value)
        return value


class GenerateGridResponse(BaseModel):
    department: str
    year: str
    section: str
    total_hours: int
    grid: GridRows
    validation: ValidationReport
    persisted: bool = False


class ValidateGridRequest(BaseModel):
    grid: GridRows
    subjects: list[Subject] = Field(default_factory=list, max_length=60)
    lab_preferences: dict[str, LabPreference] = Field(default_factory=dict)

    @field_validator("subjects")
    @classmethod
    def validate_unique_subjects(cls, value: list[Subject]) -> list[Subject]:
        ensure_unique_subject_ids(value)
        return value


class SectionGridOut(BaseModel):
    department: str
    year: str
    section: str
    grid: GridRows

    model_config = {"from_attributes": True}
