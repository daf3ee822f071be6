# triage_board/schemas/room.py
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, field_validator

from triage_board.models.room import RoomStatus


class RoomCreate(BaseModel):
    room_number: str

    @field_validator("room_number")
    @classmethod
    def validate_room_number(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 20:
            raise ValueError("Room number must be 1-20 characters")
        return v


class RoomAssignRequest(BaseModel):
    patient_id: UUID


class RoomResponse(BaseModel):
    id: UUID
    room_number: str
    status: RoomStatus
    assigned_patient_id: UUID | None = None
    assigned_patient_name: str | None = None
    assigned_time: datetime | None = None

    class Config:
        from_attributes = True
