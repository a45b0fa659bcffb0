from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func, select

from .db import db_session
from .models import Patient, Session, SessionStatus, Therapist

THERAPISTS = [
    ("Dr. Lee", "OT"),
    ("Dr. Moreau", "Physiotherapy"),
    ("Dr. Okafor", "Speech Therapy"),
]

PATIENTS = [
    ("Ada Lovelace", date(1985, 12, 10)),
    ("Grace Hopper", date(1976, 12, 9)),
    ("Alan Turing", None),
]


def seed_demo() -> None:
    """
    Load minimal demo data (idempotent):
    - therapists and patients, matched by name
    - one session per therapist/patient pair, only if no session exists yet
    """
    with db_session() as s:
        for name, specialty in THERAPISTS:
            if s.execute(select(Therapist).where(Therapist.name == name)).scalar_one_or_none() is None:
                s.add(Therapist(name=name, specialty=specialty))

        for name, dob in PATIENTS:
            if s.execute(select(Patient).where(Patient.name == name)).scalar_one_or_none() is None:
                s.add(Patient(name=name, dob=dob))

        s.flush()

        if s.scalar(select(func.count()).select_from(Session)):
            return

        therapists = list(s.scalars(select(Therapist).order_by(Therapist.id)))
        patients = list(s.scalars(select(Patient).order_by(Patient.id)))
        start = datetime.now(timezone.utc).replace(hour=9, minute=0, second=0, microsecond=0) + timedelta(days=1)

        for i, (t, p) in enumerate(zip(therapists, patients)):
            s.add(
                Session(
                    therapist=t,
                    patient=p,
                    date=start + timedelta(days=i, hours=i),
                    status=SessionStatus.SCHEDULED,
                )
            )
