# triage_board/models/audit_log.py
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from triage_board.models.base import Base
from triage_board.utils.datetime_utils import utc_now


class AuditAction(str, Enum):
    REGISTERED = "registered"
    STATUS_CHANGED = "status_changed"
    ASSIGNED_ROOM = "assigned_room"
    DISCHARGED = "discharged"
    DELETED = "deleted"


class AuditLog(Base):
    """
    Append-only record of triage actions.
    patient_id is not a foreign key: entries outlive the discharged patient.
    """

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    action: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Action type: registered, status_changed, assigned_room, discharged, deleted",
    )
    patient_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    patient_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    performed_by: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
    )
