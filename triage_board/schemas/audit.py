# triage_board/schemas/audit.py
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: UUID
    action: str
    patient_id: UUID | None = None
    patient_name: str | None = None
    performed_by: str
    details: str | None = None
    timestamp: datetime

    class Config:
        from_attributes = True
