# triage_board/schemas/statistics.py
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from triage_board.models.patient import PriorityClass


class Statistics(BaseModel):
    total_waiting: int
    critical_count: int
    urgent_count: int
    non_urgent_count: int
    average_wait_minutes: int
    rooms_occupied: int
    rooms_available: int
    generated_at: datetime


class PriorityBreakdown(BaseModel):
    count: int
    average_wait_minutes: int


class RoomOccupancy(BaseModel):
    total: int
    occupied: int
    available: int
    occupancy_rate: int


class DetailedStatistics(BaseModel):
    total_waiting: int
    critical: PriorityBreakdown
    urgent: PriorityBreakdown
    non_urgent: PriorityBreakdown
    rooms: RoomOccupancy
    generated_at: datetime


class WaitAlert(BaseModel):
    patient_id: UUID
    name: str
    priority: PriorityClass
    wait_minutes: int
