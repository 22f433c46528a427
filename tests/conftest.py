import os
import tempfile
from pathlib import Path

# Point the app at a throwaway SQLite file before anything imports the settings
_DB_DIR = tempfile.mkdtemp(prefix="scholarship-advisor-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ.pop("LEGACY_DATA_FILE", None)

import pytest
from fastapi.testclient import TestClient

from scholarship_advisor.core.security import session_store
from scholarship_advisor.db.base import Base
from scholarship_advisor.db.sessions import SessionLocal, engine
from scholarship_advisor.main import app


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session_store.clear()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def student_payload():
    return {
        "roll_number": "21CS1042",
        "btech_year": "3",
        "gender": "Female",
        "category": "SC",
        "quota_type": "Convener Quota",
        "present_cgpa": 9.0,
        "previous_cgpa": 8.4,
        "attendance": 82.5,
        "active_backlogs": "No",
    }
