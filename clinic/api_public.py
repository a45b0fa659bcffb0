from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from . import services
from .models import SessionStatus
from .responses import PlainErrorRoute
from .schemas import parse_numeric_id

router = APIRouter(prefix="/api", tags=["public"], route_class=PlainErrorRoute)


@router.get("/patients")
def public_patients(name: str | None = None) -> list[dict]:
    return services.search_patients(name)


@router.get("/therapists")
def public_therapists(name: str | None = None, specialty: str | None = None) -> list[dict]:
    return services.search_therapists(name, specialty)


@router.get("/sessions", response_model=None)
def public_sessions(
    search: str | None = None,
    status: str | None = None,
    sort_order: str | None = Query(None, alias="sortOrder"),
) -> list[dict] | JSONResponse:
    """
    Flat session listing.

    An empty result answers 404 rather than `[]`, unlike the patient and
    therapist listings; clients rely on it to show their "no sessions" state.
    """
    sessions = services.list_sessions_with_names(
        search=search,
        status=status,
        sort_order="desc" if sort_order == "desc" else "asc",
    )
    if not sessions:
        return JSONResponse(status_code=404, content={"error": "No sessions found"})
    return sessions


@router.patch("/sessions/{session_id}", response_model=None)
def public_update_session_status(
    session_id: str,
    id_param: str | None = Query(None, alias="id"),
    payload: Any = Body(None),
) -> dict | JSONResponse:
    """
    Set a session's status. No admin cookie required.

    The id comes from the path; `?id=` is accepted as a fallback when the path
    segment is not a usable id.
    """
    sid = parse_numeric_id(session_id) or parse_numeric_id(id_param)
    if sid is None:
        return JSONResponse(status_code=400, content={"error": "Invalid session id"})

    status = payload.get("status") if isinstance(payload, dict) else None
    if not isinstance(status, str) or not status.strip():
        return JSONResponse(status_code=400, content={"error": "Invalid status value"})

    try:
        new_status = SessionStatus(status.strip())
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid status value"})

    return services.update_session_status(sid, new_status)
