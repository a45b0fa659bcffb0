from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError

from clinic.db import db_session
from clinic.errors import (
    ApiError,
    ConstraintViolationError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
    field_errors_from,
    translate_exception,
)
from clinic.models import Session as TherapySession
from clinic.models import SessionStatus
from clinic.schemas import PatientCreate


def _integrity(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO x", {}, Exception(message))


class TestTranslateException:

    @pytest.mark.parametrize(
        "exc, status, code",
        [
            (UnauthorizedError(), 401, "UNAUTHORIZED"),
            (NotFoundError("Patient not found"), 404, "NOT_FOUND"),
            (ConstraintViolationError("Cannot delete"), 400, "CONSTRAINT_VIOLATION"),
            (ValidationFailedError({"id": "bad"}), 400, "VALIDATION_ERROR"),
            (_integrity("UNIQUE constraint failed: patients.name"), 409, "DUPLICATE_RECORD"),
            (_integrity("FOREIGN KEY constraint failed"), 400, "FOREIGN_KEY_CONSTRAINT"),
            (_integrity("NOT NULL constraint failed: patients.name"), 400, "INVALID_DATA"),
            (NoResultFound(), 404, "RECORD_NOT_FOUND"),
            (OperationalError("SELECT 1", {}, Exception("disk I/O error")), 500, "DATABASE_ERROR"),
            (RuntimeError("boom"), 500, "INTERNAL_SERVER_ERROR"),
        ],
    )
    def test_mapping(self, exc, status, code):
        got_status, error = translate_exception(exc)
        assert got_status == status
        assert error.code == code

    def test_domain_message_is_kept(self):
        _, error = translate_exception(NotFoundError("Therapist not found"))
        assert error == ApiError("Therapist not found", "NOT_FOUND")

    def test_internal_details_are_hidden(self):
        _, error = translate_exception(RuntimeError("password=hunter2"))
        assert "hunter2" not in error.message

    def test_pydantic_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            PatientCreate(name="")

        status, error = translate_exception(exc_info.value)

        assert status == 400
        assert error.to_dict() == {
            "message": "Validation failed",
            "code": "VALIDATION_ERROR",
            "details": {"fieldErrors": {"name": "Name is required"}},
        }

    def test_server_errors_are_logged(self, caplog):
        with caplog.at_level("ERROR", logger="clinic.errors"):
            translate_exception(RuntimeError("boom"))
        assert any(r.levelname == "ERROR" for r in caplog.records)

    def test_real_foreign_key_violation(self):
        orphan = TherapySession(
            patient_id=41,
            therapist_id=42,
            date=datetime(2025, 1, 1, tzinfo=timezone.utc),
            status=SessionStatus.SCHEDULED,
        )
        with pytest.raises(IntegrityError) as exc_info:
            with db_session() as s:
                s.add(orphan)

        status, error = translate_exception(exc_info.value)

        assert status == 400
        assert error.code == "FOREIGN_KEY_CONSTRAINT"


class TestFieldErrors:

    def test_strips_location_prefix(self):
        errors = [{"loc": ("body", "patient_id"), "msg": "Value error, Patient ID must be a positive integer"}]
        assert field_errors_from(errors) == {"patient_id": "Patient ID must be a positive integer"}

    def test_first_message_wins(self):
        errors = [
            {"loc": ("body", "name"), "msg": "first"},
            {"loc": ("body", "name"), "msg": "second"},
        ]
        assert field_errors_from(errors) == {"name": "first"}

    def test_nested_path(self):
        errors = [{"loc": ("query", "filters", 0), "msg": "bad"}]
        assert field_errors_from(errors) == {"filters.0": "bad"}

    def test_whole_body(self):
        assert field_errors_from([{"loc": ("body",), "msg": "JSON decode error"}]) == {"body": "JSON decode error"}
