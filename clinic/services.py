from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Literal

from sqlalchemy import String, func, or_, select
from sqlalchemy.orm import selectinload

from .db import IS_SQLITE, db_session
from .errors import ConstraintViolationError, NotFoundError
from .models import Patient, SessionStatus, Therapist
from .models import Session as TherapySession
from .schemas import (
    PatientCreate,
    PatientUpdate,
    SessionCreate,
    SessionUpdate,
    TherapistCreate,
    TherapistUpdate,
)

logger = logging.getLogger(__name__)

SortOrder = Literal["asc", "desc"]


# =========================
# Serialization (flat dicts, safe outside the session)
# =========================
def iso_datetime(value: datetime) -> str:
    # SQLite gives naive values back; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def patient_dict(p: Patient) -> dict[str, Any]:
    return {"id": p.id, "name": p.name, "dob": p.dob.isoformat() if p.dob else None}


def therapist_dict(t: Therapist) -> dict[str, Any]:
    return {"id": t.id, "name": t.name, "specialty": t.specialty}


def session_dict(x: TherapySession) -> dict[str, Any]:
    return {
        "id": x.id,
        "patient_id": x.patient_id,
        "therapist_id": x.therapist_id,
        "date": iso_datetime(x.date),
        "status": x.status.value,
    }


def session_with_relations(x: TherapySession) -> dict[str, Any]:
    return {
        **session_dict(x),
        "patient": patient_dict(x.patient) if x.patient else None,
        "therapist": therapist_dict(x.therapist) if x.therapist else None,
    }


def _count_sessions(s, *criteria) -> int:
    return s.scalar(select(func.count()).select_from(TherapySession).where(*criteria)) or 0


# =========================
# Patients (admin)
# =========================
def list_patients() -> list[dict]:
    """All patients by name, each with its sessions as `{id, status}`."""
    with db_session() as s:
        rows = s.scalars(select(Patient).options(selectinload(Patient.sessions)).order_by(Patient.name, Patient.id))
        return [
            {
                **patient_dict(p),
                "sessions": [{"id": x.id, "status": x.status.value} for x in sorted(p.sessions, key=lambda x: x.id)],
            }
            for p in rows
        ]


def create_patient(data: PatientCreate) -> dict:
    with db_session() as s:
        p = Patient(name=data.name, dob=data.dob)
        s.add(p)
        s.flush()
        logger.info("created patient id=%s", p.id)
        return patient_dict(p)


def update_patient(patient_id: int, patch: PatientUpdate) -> dict:
    with db_session() as s:
        p = s.get(Patient, patient_id)
        if p is None:
            raise NotFoundError("Patient not found")

        fields = patch.model_fields_set
        if "name" in fields and patch.name is not None:
            p.name = patch.name
        if "dob" in fields:
            p.dob = patch.dob

        s.flush()
        logger.info("updated patient id=%s fields=%s", p.id, sorted(fields))
        return patient_dict(p)


def delete_patient(patient_id: int) -> dict:
    """Refuses while any session (whatever its status) still references the patient."""
    with db_session() as s:
        p = s.get(Patient, patient_id)
        if p is None:
            raise NotFoundError("Patient not found")

        if _count_sessions(s, TherapySession.patient_id == patient_id) > 0:
            logger.warning("refused delete of patient id=%s: has sessions", patient_id)
            raise ConstraintViolationError("Cannot delete patient with existing sessions")

        deleted = patient_dict(p)
        s.delete(p)
        logger.info("deleted patient id=%s", patient_id)
        return {"message": "Patient deleted successfully", "patient": deleted}


# =========================
# Therapists (admin)
# =========================
def list_therapists() -> list[dict]:
    """All therapists by name, each with its sessions and the patient's name."""
    with db_session() as s:
        rows = s.scalars(
            select(Therapist)
            .options(selectinload(Therapist.sessions).selectinload(TherapySession.patient))
            .order_by(Therapist.name, Therapist.id)
        )
        return [
            {
                **therapist_dict(t),
                "sessions": [
                    {
                        "id": x.id,
                        "status": x.status.value,
                        "patient": {"name": x.patient.name} if x.patient else None,
                    }
                    for x in sorted(t.sessions, key=lambda x: x.id)
                ],
            }
            for t in rows
        ]


def create_therapist(data: TherapistCreate) -> dict:
    with db_session() as s:
        t = Therapist(name=data.name, specialty=data.specialty)
        s.add(t)
        s.flush()
        logger.info("created therapist id=%s", t.id)
        return therapist_dict(t)


def update_therapist(therapist_id: int, patch: TherapistUpdate) -> dict:
    with db_session() as s:
        t = s.get(Therapist, therapist_id)
        if t is None:
            raise NotFoundError("Therapist not found")

        fields = patch.model_fields_set
        if "name" in fields and patch.name is not None:
            t.name = patch.name
        if "specialty" in fields:
            t.specialty = patch.specialty

        s.flush()
        logger.info("updated therapist id=%s fields=%s", t.id, sorted(fields))
        return therapist_dict(t)


def delete_therapist(therapist_id: int) -> dict:
    with db_session() as s:
        t = s.get(Therapist, therapist_id)
        if t is None:
            raise NotFoundError("Therapist not found")

        if _count_sessions(s, TherapySession.therapist_id == therapist_id) > 0:
            logger.warning("refused delete of therapist id=%s: has sessions", therapist_id)
            raise ConstraintViolationError("Cannot delete therapist with existing sessions")

        deleted = therapist_dict(t)
        s.delete(t)
        logger.info("deleted therapist id=%s", therapist_id)
        return {"message": "Therapist deleted successfully", "therapist": deleted}


# =========================
# Sessions (admin)
# =========================
def _require_patient(s, patient_id: int) -> Patient:
    p = s.get(Patient, patient_id)
    if p is None:
        raise NotFoundError("Patient not found")
    return p


def _require_therapist(s, therapist_id: int) -> Therapist:
    t = s.get(Therapist, therapist_id)
    if t is None:
        raise NotFoundError("Therapist not found")
    return t


def list_sessions() -> list[dict]:
    """All sessions, most recent first, with patient and therapist embedded."""
    with db_session() as s:
        rows = s.scalars(
            select(TherapySession)
            .options(selectinload(TherapySession.patient), selectinload(TherapySession.therapist))
            .order_by(TherapySession.date.desc(), TherapySession.id.desc())
        )
        return [session_with_relations(x) for x in rows]


def create_session(data: SessionCreate) -> dict:
    """
    Book a session after checking both ends exist.

    The check and the insert share one unit of work but no lock: a patient
    deleted concurrently is caught by the FOREIGN KEY constraint instead.
    """
    with db_session() as s:
        patient = _require_patient(s, data.patient_id)
        therapist = _require_therapist(s, data.therapist_id)

        x = TherapySession(patient=patient, therapist=therapist, date=data.date, status=data.status)
        s.add(x)
        s.flush()
        logger.info("created session id=%s patient=%s therapist=%s", x.id, patient.id, therapist.id)
        return session_with_relations(x)


def update_session(session_id: int, patch: SessionUpdate) -> dict:
    with db_session() as s:
        x = s.get(TherapySession, session_id)
        if x is None:
            raise NotFoundError("Session not found")

        if patch.patient_id is not None:
            x.patient = _require_patient(s, patch.patient_id)
        if patch.therapist_id is not None:
            x.therapist = _require_therapist(s, patch.therapist_id)
        if patch.date is not None:
            x.date = patch.date
        if patch.status is not None:
            x.status = patch.status

        s.flush()
        logger.info("updated session id=%s fields=%s", x.id, sorted(patch.model_fields_set))
        return session_with_relations(x)


def delete_session(session_id: int) -> dict:
    with db_session() as s:
        x = s.get(TherapySession, session_id)
        if x is None:
            raise NotFoundError("Session not found")

        deleted = session_with_relations(x)
        s.delete(x)
        logger.info("deleted session id=%s", session_id)
        return {"message": "Session deleted successfully", "session": deleted}


# =========================
# Public queries
# =========================
def _name_contains(column, term: str):
    """Case-insensitive substring match; `%` and `_` in `term` are literal."""
    if IS_SQLITE:
        return func.casefold(column, type_=String).contains(term.casefold(), autoescape=True)
    return column.icontains(term, autoescape=True)


def search_patients(name: str | None = None) -> list[dict]:
    with db_session() as s:
        q = select(Patient).order_by(Patient.name, Patient.id)
        if name and name.strip():
            q = q.where(_name_contains(Patient.name, name.strip()))
        return [patient_dict(p) for p in s.scalars(q)]


def search_therapists(name: str | None = None, specialty: str | None = None) -> list[dict]:
    with db_session() as s:
        q = select(Therapist).order_by(Therapist.name, Therapist.id)
        if name and name.strip():
            q = q.where(_name_contains(Therapist.name, name.strip()))
        if specialty and specialty.strip():
            q = q.where(Therapist.specialty == specialty.strip())
        return [therapist_dict(t) for t in s.scalars(q)]


def list_sessions_with_names(
    search: str | None = None,
    status: str | None = None,
    sort_order: SortOrder = "asc",
) -> list[dict]:
    """
    Flat session rows for the public listing:
    - `search` matches therapist OR patient name, case-insensitive
    - `status` is an exact match
    - sorted by date, ascending unless `sort_order == "desc"`
    """
    q = (
        select(
            TherapySession.id,
            TherapySession.date,
            TherapySession.status,
            Therapist.name.label("therapist_name"),
            Patient.name.label("patient_name"),
        )
        .outerjoin(Therapist, Therapist.id == TherapySession.therapist_id)
        .outerjoin(Patient, Patient.id == TherapySession.patient_id)
    )

    if search and search.strip():
        term = search.strip()
        q = q.where(or_(_name_contains(Therapist.name, term), _name_contains(Patient.name, term)))

    if status and status.strip():
        try:
            wanted = SessionStatus(status.strip())
        except ValueError:
            # not a stored value: nothing can match
            return []
        q = q.where(TherapySession.status == wanted)

    if sort_order == "desc":
        q = q.order_by(TherapySession.date.desc(), TherapySession.id.desc())
    else:
        q = q.order_by(TherapySession.date.asc(), TherapySession.id.asc())

    with db_session() as s:
        rows = s.execute(q).all()
        return [
            {
                "id": r.id,
                "date": iso_datetime(r.date),
                "status": r.status.value,
                "therapistName": r.therapist_name or "",
                "patientName": r.patient_name or "",
            }
            for r in rows
        ]


def update_session_status(session_id: int, status: SessionStatus) -> dict:
    with db_session() as s:
        x = s.get(TherapySession, session_id)
        if x is None:
            raise NotFoundError("Session not found")
        x.status = status
        s.flush()
        logger.info("session id=%s status=%s", x.id, status.value)
        return {"id": x.id, "status": x.status.value}
