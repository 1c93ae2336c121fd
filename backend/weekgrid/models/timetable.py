from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from weekgrid.db.base import Base


class SpecialHoursConfigRecord(Base):
    __tablename__ = "special_hours_configs"
    __table_args__ = (
        UniqueConstraint("department", "year", "special_type", name="uq_special_hours_configs_identity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    department: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    year: Mapped[str] = mapped_column(String(20), nullable=False)
    special_type: Mapped[str] = mapped_column(String(40), nullable=False)
    total_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    saturday_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekdays_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    saturday_periods: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    weekdays_periods: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class LabPreferenceRecord(Base):
    __tablename__ = "lab_preferences"
    __table_args__ = (
        UniqueConstraint("department", "year", "section", "subject_id", name="uq_lab_preferences_identity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    department: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    year: Mapped[str] = mapped_column(String(20), nullable=False)
    section: Mapped[str] = mapped_column(String(50), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    morning_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    morning_start: Mapped[int | None] = mapped_column(Integer, nullable=True)
    evening_two_hour_start_at_5: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    priority: Mapped[int | None] = mapped_column(Integer, nullable=True)


class OpenElectiveBudget(Base):
    __tablename__ = "open_elective_budgets"
    __table_args__ = (UniqueConstraint("department", "year", name="uq_open_elective_budgets_identity"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    department: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    year: Mapped[str] = mapped_column(String(20), nullable=False)
    hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class SectionTimetable(Base):
    __tablename__ = "section_timetables"
    __table_args__ = (
        UniqueConstraint("department", "year", "section", name="uq_section_timetables_identity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    department: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    year: Mapped[str] = mapped_column(String(20), nullable=False)
    section: Mapped[str] = mapped_column(String(50), nullable=False)
    grid: Mapped[list] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
