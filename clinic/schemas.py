"""
Request schemas for the admin API.

Create models carry the required fields; update models make every field
optional and the services only apply what the client actually sent
(`model_fields_set`).
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, field_validator
from pydantic_core import PydanticCustomError

from .models import SessionStatus

MAX_TEXT_LENGTH = 100

DOB_MESSAGE = "Date of birth must be a valid date in the past"
DATE_MESSAGE = "Date must be a valid date"
STATUS_MESSAGE = "Status must be one of: " + ", ".join(SessionStatus.values())


# =========================
# Field parsers
# =========================
def clean_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("name_required", "Name is required")
    value = value.strip()
    if len(value) > MAX_TEXT_LENGTH:
        raise PydanticCustomError("name_too_long", "Name must be less than 100 characters")
    return value


def clean_specialty(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise PydanticCustomError("specialty_type", "Specialty must be a string")
    value = value.strip()
    if len(value) > MAX_TEXT_LENGTH:
        raise PydanticCustomError("specialty_too_long", "Specialty must be less than 100 characters")
    return value or None


def _utc_date(value: datetime) -> date:
    return value.astimezone(timezone.utc).date() if value.tzinfo else value.date()


def parse_dob(value: Any) -> date | None:
    """Empty means no date; otherwise an ISO date (or datetime) not after today."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = _utc_date(value)
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        try:
            parsed = date.fromisoformat(raw)
        except ValueError:
            try:
                parsed = _utc_date(datetime.fromisoformat(raw))
            except ValueError:
                raise PydanticCustomError("dob_invalid", DOB_MESSAGE) from None
    else:
        raise PydanticCustomError("dob_invalid", DOB_MESSAGE)

    if parsed > date.today():
        raise PydanticCustomError("dob_future", DOB_MESSAGE)
    return parsed


def parse_datetime(value: Any) -> datetime:
    """ISO-8601 timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise PydanticCustomError("date_invalid", DATE_MESSAGE) from None
    else:
        raise PydanticCustomError("date_invalid", DATE_MESSAGE)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def positive_id(value: Any, label: str) -> int:
    # bool is an int subclass; JSON true must not pass as 1
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise PydanticCustomError("id_invalid", "{label} must be a positive integer", {"label": label})
    return value


def parse_status(value: Any) -> SessionStatus:
    if isinstance(value, SessionStatus):
        return value
    if isinstance(value, str):
        try:
            return SessionStatus(value.strip())
        except ValueError:
            pass
    raise PydanticCustomError("status_invalid", STATUS_MESSAGE)


def parse_numeric_id(value: Any) -> int | None:
    """Positive integer from an int or a numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        raw = value.strip()
        if raw.isascii() and raw.isdigit():
            num = int(raw)
            return num if num > 0 else None
    return None


# =========================
# Patients
# =========================
class PatientCreate(BaseModel):
    name: str
    dob: Optional[date] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return clean_name(v)

    @field_validator("dob", mode="before")
    @classmethod
    def _dob(cls, v: Any) -> date | None:
        return parse_dob(v)


class PatientUpdate(BaseModel):
    name: Optional[str] = None
    dob: Optional[date] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str | None:
        return None if v is None else clean_name(v)

    @field_validator("dob", mode="before")
    @classmethod
    def _dob(cls, v: Any) -> date | None:
        return parse_dob(v)


# =========================
# Therapists
# =========================
class TherapistCreate(BaseModel):
    name: str
    specialty: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return clean_name(v)

    @field_validator("specialty", mode="before")
    @classmethod
    def _specialty(cls, v: Any) -> str | None:
        return clean_specialty(v)


class TherapistUpdate(BaseModel):
    name: Optional[str] = None
    specialty: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str | None:
        return None if v is None else clean_name(v)

    @field_validator("specialty", mode="before")
    @classmethod
    def _specialty(cls, v: Any) -> str | None:
        return clean_specialty(v)


# =========================
# Sessions
# =========================
class SessionCreate(BaseModel):
    patient_id: int
    therapist_id: int
    date: datetime
    status: SessionStatus = SessionStatus.SCHEDULED

    @field_validator("patient_id", mode="before")
    @classmethod
    def _patient_id(cls, v: Any) -> int:
        return positive_id(v, "Patient ID")

    @field_validator("therapist_id", mode="before")
    @classmethod
    def _therapist_id(cls, v: Any) -> int:
        return positive_id(v, "Therapist ID")

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> datetime:
        return parse_datetime(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> SessionStatus:
        return SessionStatus.SCHEDULED if v is None else parse_status(v)


class SessionUpdate(BaseModel):
    """Every field optional; null on these non-nullable columns means "leave as is"."""

    patient_id: Optional[int] = None
    therapist_id: Optional[int] = None
    date: Optional[datetime] = None
    status: Optional[SessionStatus] = None

    @field_validator("patient_id", mode="before")
    @classmethod
    def _patient_id(cls, v: Any) -> int | None:
        return None if v is None else positive_id(v, "Patient ID")

    @field_validator("therapist_id", mode="before")
    @classmethod
    def _therapist_id(cls, v: Any) -> int | None:
        return None if v is None else positive_id(v, "Therapist ID")

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> datetime | None:
        return None if v is None else parse_datetime(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> SessionStatus | None:
        return None if v is None else parse_status(v)
