from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class SessionStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No-show"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


class Patient(Base):
    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)

    # children are never nulled out: deleting a referenced patient fails on the FK
    sessions: Mapped[list["Session"]] = relationship(back_populates="patient", passive_deletes="all")

    def __repr__(self) -> str:
        return f"Patient({self.id}, {self.name})"


class Therapist(Base):
    __tablename__ = "therapists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    specialty: Mapped[str | None] = mapped_column(String(100), nullable=True)

    sessions: Mapped[list["Session"]] = relationship(back_populates="therapist", passive_deletes="all")

    def __repr__(self) -> str:
        return f"Therapist({self.id}, {self.name}, {self.specialty})"


class Session(Base):
    """
    A scheduled therapy session.

    patient_id / therapist_id are nullable at the schema level; the services
    require both on create. No double-booking check exists.
    """
    __tablename__ = "sessions"
    __table_args__ = (
        Index("idx_sessions_patient", "patient_id"),
        Index("idx_sessions_therapist", "therapist_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    patient_id: Mapped[int | None] = mapped_column(ForeignKey("patients.id", ondelete="RESTRICT"), nullable=True)
    therapist_id: Mapped[int | None] = mapped_column(ForeignKey("therapists.id", ondelete="RESTRICT"), nullable=True)

    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    status: Mapped[SessionStatus] = mapped_column(
        Enum(
            SessionStatus,
            name="session_status",
            values_callable=lambda e: [s.value for s in e],
            validate_strings=True,
        ),
        default=SessionStatus.SCHEDULED,
        nullable=False,
    )

    patient: Mapped["Patient"] = relationship(back_populates="sessions")
    therapist: Mapped["Therapist"] = relationship(back_populates="sessions")

    def __repr__(self) -> str:
        return f"Session({self.id}, patient={self.patient_id}, therapist={self.therapist_id}, {self.status.value})"
