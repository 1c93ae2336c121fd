import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient #gives a fake http client that can call the FastAPI routes without running a real server.
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weekgrid.api.deps import get_db
from weekgrid.db.base import Base
from weekgrid.main import app
from weekgrid.schemas.generator import GenerationRequest, Subject
import weekgrid.models  # noqa: F401


@pytest.fixture()
def session_factory():
    engine = create_engine( #create isolated DB
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_subject(subject_id, hours, subject_type="theory", name=None, tags=()):
    return Subject(
        id=subject_id,
        name=name or subject_id,
        type=subject_type,
        hours_per_week=hours,
        tags=tuple(tags),
    )


@pytest.fixture
def subject():
    return make_subject


@pytest.fixture
def example_request():
    """CN and ML theory with a morning ML LAB and a Saturday seminar."""
    return GenerationRequest(
        subjects=(
            make_subject("cn", 4, name="CN"),
            make_subject("ml", 4, name="ML"),
            make_subject("ml-lab", 4, "lab", name="ML LAB"),
        ),
        special={
            "mode": "explicit",
            "configs": [
                {
                    "special_type": "seminar",
                    "total_hours": 2,
                    "saturday_hours": 2,
                    "saturday_periods": [3, 4],
                }
            ],
        },
        lab_preferences={"ml-lab": {"morning_enabled": True, "morning_start": 1, "priority": 1}},
        open_elective_hours=0,
    )
