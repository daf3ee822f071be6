# triage_board/models/__init__.py
from triage_board.models.audit_log import AuditAction, AuditLog
from triage_board.models.base import Base
from triage_board.models.patient import Patient, PatientStatus, PriorityClass, SymptomTag
from triage_board.models.room import Room, RoomStatus
from triage_board.models.token_counter import TokenCounter
