# triage_board/models/patient.py
import uuid
from datetime import date, datetime, time
from enum import Enum

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    Integer,
    String,
    Text,
    Time,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from triage_board.models.base import Base
from triage_board.utils.datetime_utils import utc_now


class PriorityClass(str, Enum):
    CRITICAL = "critical"
    URGENT = "urgent"
    NON_URGENT = "nonUrgent"


class PatientStatus(str, Enum):
    WAITING = "waiting"
    IN_TREATMENT = "inTreatment"


class SymptomTag(str, Enum):
    CHEST_PAIN = "chestPain"
    BREATHING_DIFFICULTY = "breathingDifficulty"
    BLEEDING = "bleeding"
    UNCONSCIOUS = "unconscious"
    FEVER = "fever"
    PAIN = "pain"


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Patient(Base):
    """
    A registered patient waiting for, or receiving, treatment.

    NOTE:
    - Discharge hard-deletes the row; there is no terminal status value.
    - assigned_room_id is a weak reference (lookup only, no FK ownership).
    - assigned_room_number is a cache of Room.room_number, written only by the
      room matcher in the same transaction as assigned_room_id.
    """

    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    contact: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    complaint: Mapped[str] = mapped_column(Text, nullable=False, default="")
    symptoms: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Vitals
    blood_pressure: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pulse: Mapped[int | None] = mapped_column(Integer, nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True, doc="Degrees Fahrenheit")

    # Queue
    priority: Mapped[PriorityClass] = mapped_column(
        SAEnum(PriorityClass, name="priority_class_enum", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    token_number: Mapped[int] = mapped_column(Integer, nullable=False)
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    slot_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    appointment_start_time: Mapped[time] = mapped_column(Time, nullable=False)
    appointment_end_time: Mapped[time] = mapped_column(Time, nullable=False)
    status: Mapped[PatientStatus] = mapped_column(
        SAEnum(PatientStatus, name="patient_status_enum", values_callable=_enum_values),
        nullable=False,
        default=PatientStatus.WAITING,
        index=True,
    )
    check_in_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=utc_now,
        index=True,
        doc="Stamped by the application clock on insert; non-decreasing within one process",
    )

    # Room relation
    assigned_room_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        unique=True,
        doc="Weak reference to rooms.id; set iff status is inTreatment",
    )
    assigned_room_number: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        doc="Cached display number of the assigned room",
    )

    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
    )

    def __repr__(self) -> str:
        return f"<Patient {self.name} {self.priority.value} #{self.token_number}>"
