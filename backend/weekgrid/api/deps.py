from collections.abc import Generator

from sqlalchemy.orm import Session

from weekgrid.core.config import Settings, get_settings
from weekgrid.db.session import SessionLocal
from weekgrid.services.request_normalizer import EngineOptions
from weekgrid.services.timetable_engine import engine_options_from_settings


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_engine_options() -> EngineOptions:
    settings: Settings = get_settings()
    return engine_options_from_settings(settings)
