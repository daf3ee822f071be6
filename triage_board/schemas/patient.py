# triage_board/schemas/patient.py
from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from triage_board.models.patient import PatientStatus, PriorityClass, SymptomTag


class Vitals(BaseModel):
    """Vitals captured at the desk. Missing fields never trigger threshold checks."""

    blood_pressure: str | None = None
    pulse: int | None = None
    temperature: float | None = Field(default=None, description="Degrees Fahrenheit")

    @field_validator("pulse")
    @classmethod
    def validate_pulse(cls, v: int | None) -> int | None:
        if v is not None and (v < 0 or v > 300):
            raise ValueError("Pulse must be between 0 and 300")
        return v

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float | None) -> float | None:
        if v is not None and (v < 80 or v > 115):
            raise ValueError("Temperature must be between 80 and 115 degrees Fahrenheit")
        return v


class PatientRegister(BaseModel):
    """
    Desk registration input.

    Blank name/contact are not rejected here: the triage service reports them
    as a VALIDATION outcome so every caller gets the same rejection.
    """

    name: str = ""
    age: int = Field(ge=0, le=150)
    contact: str = ""
    complaint: str = ""
    symptoms: set[SymptomTag] = Field(default_factory=set)
    vitals: Vitals = Field(default_factory=Vitals)
    notes: str = ""

    @field_validator("name", "contact", "complaint", "notes")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class PatientUpdate(BaseModel):
    """Editable details. Queue fields (priority, token, slot, room) are not editable."""

    complaint: str | None = None
    notes: str | None = None
    vitals: Vitals | None = None


class PatientResponse(BaseModel):
    id: UUID
    name: str
    age: int
    contact: str
    complaint: str
    symptoms: list[str]
    blood_pressure: str | None = None
    pulse: int | None = None
    temperature: float | None = None
    priority: PriorityClass
    token_number: int
    appointment_date: date
    slot_index: int
    appointment_start_time: time
    appointment_end_time: time
    status: PatientStatus
    check_in_time: datetime | None = None
    assigned_room_id: UUID | None = None
    assigned_room_number: str | None = None
    notes: str

    # Computed for display
    wait_time: str | None = None

    class Config:
        from_attributes = True


class RegistrationResponse(BaseModel):
    patient: PatientResponse
    queue_position: int


class BulkDischargeRequest(BaseModel):
    patient_ids: list[UUID]


class DischargeOutcome(BaseModel):
    patient_id: UUID
    success: bool
    message: str | None = None


class BulkDischargeResponse(BaseModel):
    discharged: int
    results: list[DischargeOutcome]
