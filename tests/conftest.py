# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# The database URL is read when clinic.db is imported, so it is pointed at a
# throwaway SQLite file BEFORE any clinic import. Every test starts from an
# empty schema.
# =============================================================================

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="clinic-tests-")
os.environ["CLINIC_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.sqlite')}"
os.environ["CLINIC_ADMIN_COOKIE_NAME"] = "admin-session"
os.environ["CLINIC_ADMIN_COOKIE_VALUE"] = "authenticated"

import pytest
from fastapi.testclient import TestClient

from clinic import services
from clinic.api_main import app
from clinic.config import ADMIN_COOKIE_NAME, ADMIN_COOKIE_VALUE
from clinic.db import reset_db
from clinic.schemas import PatientCreate, SessionCreate, TherapistCreate


@pytest.fixture(autouse=True)
def fresh_db():
    reset_db()
    yield


@pytest.fixture
def client():
    """Anonymous visitor."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client():
    """Client holding the admin cookie."""
    with TestClient(app, cookies={ADMIN_COOKIE_NAME: ADMIN_COOKIE_VALUE}) as c:
        yield c


# =============================================================================
# Data helpers
# =============================================================================

@pytest.fixture
def make_patient():
    def _make(name: str = "Ada Lovelace", dob: str | None = None) -> dict:
        return services.create_patient(PatientCreate(name=name, dob=dob))
    return _make


@pytest.fixture
def make_therapist():
    def _make(name: str = "Dr. Lee", specialty: str | None = "OT") -> dict:
        return services.create_therapist(TherapistCreate(name=name, specialty=specialty))
    return _make


@pytest.fixture
def make_session():
    def _make(patient_id: int, therapist_id: int, date: str = "2025-01-01T10:00:00Z", status: str | None = None) -> dict:
        return services.create_session(
            SessionCreate(patient_id=patient_id, therapist_id=therapist_id, date=date, status=status)
        )
    return _make
