from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from . import services
from .auth import require_admin
from .errors import ValidationFailedError
from .responses import EnvelopeRoute, success
from .schemas import (
    PatientCreate,
    PatientUpdate,
    SessionCreate,
    SessionUpdate,
    TherapistCreate,
    TherapistUpdate,
    parse_numeric_id,
)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    route_class=EnvelopeRoute,
    dependencies=[Depends(require_admin)],
)


def _id(raw: str) -> int:
    value = parse_numeric_id(raw)
    if value is None:
        raise ValidationFailedError({"id": "ID must be a positive integer"})
    return value


# Patients

@router.get("/patients")
def admin_list_patients() -> dict[str, Any]:
    return success(services.list_patients())


@router.post("/patients")
def admin_create_patient(payload: PatientCreate) -> dict[str, Any]:
    return success(services.create_patient(payload))


@router.put("/patients/{patient_id}")
def admin_update_patient(patient_id: str, payload: PatientUpdate) -> dict[str, Any]:
    return success(services.update_patient(_id(patient_id), payload))


@router.delete("/patients/{patient_id}")
def admin_delete_patient(patient_id: str) -> dict[str, Any]:
    return success(services.delete_patient(_id(patient_id)))


# Therapists

@router.get("/therapists")
def admin_list_therapists() -> dict[str, Any]:
    return success(services.list_therapists())


@router.post("/therapists")
def admin_create_therapist(payload: TherapistCreate) -> dict[str, Any]:
    return success(services.create_therapist(payload))


@router.put("/therapists/{therapist_id}")
def admin_update_therapist(therapist_id: str, payload: TherapistUpdate) -> dict[str, Any]:
    return success(services.update_therapist(_id(therapist_id), payload))


@router.delete("/therapists/{therapist_id}")
def admin_delete_therapist(therapist_id: str) -> dict[str, Any]:
    return success(services.delete_therapist(_id(therapist_id)))


# Sessions

@router.get("/sessions")
def admin_list_sessions() -> dict[str, Any]:
    return success(services.list_sessions())


@router.post("/sessions")
def admin_create_session(payload: SessionCreate) -> dict[str, Any]:
    return success(services.create_session(payload))


@router.put("/sessions/{session_id}")
def admin_update_session(session_id: str, payload: SessionUpdate) -> dict[str, Any]:
    return success(services.update_session(_id(session_id), payload))


@router.delete("/sessions/{session_id}")
def admin_delete_session(session_id: str) -> dict[str, Any]:
    return success(services.delete_session(_id(session_id)))
