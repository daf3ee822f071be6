# triage_board/models/room.py
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from triage_board.models.base import Base


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


class Room(Base):
    """
    A treatment room. Seeded at bootstrap and never deleted.

    status is occupied iff assigned_patient_id is set; the unique index on
    assigned_patient_id keeps a patient from being referenced by two rooms.
    """

    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    room_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    status: Mapped[RoomStatus] = mapped_column(
        SAEnum(
            RoomStatus,
            name="room_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=RoomStatus.AVAILABLE,
        index=True,
    )

    assigned_patient_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        unique=True,
        doc="Weak back reference to patients.id",
    )
    assigned_patient_name: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
        doc="Cached display name of the assigned patient",
    )
    assigned_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Room {self.room_number} - {self.status.value}>"
