from __future__ import annotations

import argparse
import sys

from pydantic import ValidationError

from .client import ClinicApiError, ClinicClient
from .config import API_BASE
from .db import init_db, reset_db
from .errors import ClinicError, field_errors_from
from .log import setup_logging
from .models import SessionStatus
from .schemas import PatientCreate, SessionCreate, TherapistCreate
from .seed import seed_demo
from .services import (
    create_patient,
    create_session,
    create_therapist,
    list_patients,
    list_sessions,
    list_therapists,
    update_session_status,
)


def cmd_init(args: argparse.Namespace) -> None:
    if args.reset:
        reset_db()
    else:
        init_db()
    if args.seed:
        seed_demo()
    print("DB initialized" + (" and demo data loaded." if args.seed else "."))


def cmd_list(args: argparse.Namespace) -> None:
    if args.entity == "patients":
        for p in list_patients():
            print(f"{p['id']} | {p['name']} | {p['dob'] or '-'} | sessions: {len(p['sessions'])}")
    elif args.entity == "therapists":
        for t in list_therapists():
            print(f"{t['id']} | {t['name']} | {t['specialty'] or '-'} | sessions: {len(t['sessions'])}")
    elif args.entity == "sessions":
        for x in list_sessions():
            patient = x["patient"]["name"] if x["patient"] else "-"
            therapist = x["therapist"]["name"] if x["therapist"] else "-"
            print(f"{x['id']} | {x['date']} | {x['status']} | {patient} with {therapist}")


def cmd_add_patient(args: argparse.Namespace) -> None:
    p = create_patient(PatientCreate(name=args.name, dob=args.dob))
    print(f"Patient created: {p['id']}")


def cmd_add_therapist(args: argparse.Namespace) -> None:
    t = create_therapist(TherapistCreate(name=args.name, specialty=args.specialty))
    print(f"Therapist created: {t['id']}")


def cmd_book(args: argparse.Namespace) -> None:
    x = create_session(
        SessionCreate(
            patient_id=args.patient_id,
            therapist_id=args.therapist_id,
            date=args.date,  # e.g. 2025-01-01T10:00:00Z
            status=args.status,
        )
    )
    print(f"Session booked: {x['id']} ({x['status']})")


def cmd_set_status(args: argparse.Namespace) -> None:
    x = update_session_status(args.session_id, SessionStatus(args.status))
    print(f"Session {x['id']}: {x['status']}")


def cmd_browse(args: argparse.Namespace) -> None:
    """Read the public session listing from a running server."""
    client = ClinicClient(base_url=args.api)
    sessions = client.list_sessions(search=args.search, status=args.status, sort_order=args.sort)
    if not sessions:
        print("No sessions found.")
        return
    for x in sessions:
        print(f"{x['id']} | {x['date']} | {x['status']} | {x['patientName']} with {x['therapistName']}")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("clinic.api_main:app", host=args.host, port=args.port, reload=args.reload, log_config=None)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="clinic", description="Therapy clinic management CLI")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Create the database tables")
    p_init.add_argument("--reset", action="store_true", help="Drop every table first")
    p_init.add_argument("--seed", action="store_true", help="Load demo data")
    p_init.set_defaults(func=cmd_init)

    p_list = sub.add_parser("list", help="List entities")
    p_list.add_argument("entity", choices=["patients", "therapists", "sessions"])
    p_list.set_defaults(func=cmd_list)

    p_addp = sub.add_parser("add-patient", help="Create a patient")
    p_addp.add_argument("--name", required=True)
    p_addp.add_argument("--dob", default=None, help="ISO date, e.g. 1985-12-10")
    p_addp.set_defaults(func=cmd_add_patient)

    p_addt = sub.add_parser("add-therapist", help="Create a therapist")
    p_addt.add_argument("--name", required=True)
    p_addt.add_argument("--specialty", default=None)
    p_addt.set_defaults(func=cmd_add_therapist)

    p_book = sub.add_parser("book", help="Book a session")
    p_book.add_argument("--patient-id", type=int, required=True)
    p_book.add_argument("--therapist-id", type=int, required=True)
    p_book.add_argument("--date", required=True, help="ISO datetime, e.g. 2025-01-01T10:00:00Z")
    p_book.add_argument("--status", choices=SessionStatus.values(), default=SessionStatus.SCHEDULED.value)
    p_book.set_defaults(func=cmd_book)

    p_status = sub.add_parser("set-status", help="Change a session's status")
    p_status.add_argument("--session-id", type=int, required=True)
    p_status.add_argument("--status", choices=SessionStatus.values(), required=True)
    p_status.set_defaults(func=cmd_set_status)

    p_browse = sub.add_parser("browse", help="List public sessions from a running server")
    p_browse.add_argument("--api", default=API_BASE)
    p_browse.add_argument("--search", default=None)
    p_browse.add_argument("--status", default=None)
    p_browse.add_argument("--sort", choices=["asc", "desc"], default="asc")
    p_browse.set_defaults(func=cmd_browse)

    p_serve = sub.add_parser("serve", help="Run the API server")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true")
    p_serve.set_defaults(func=cmd_serve)

    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()
    if args.func not in (cmd_init, cmd_browse, cmd_serve):
        init_db()  # guarantees the tables

    try:
        args.func(args)
    except ValidationError as e:
        for field_name, message in field_errors_from(list(e.errors())).items():
            print(f"{field_name}: {message}", file=sys.stderr)
        sys.exit(1)
    except (ClinicError, ClinicApiError) as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
