# triage_board/api/v1/router.py
from fastapi import APIRouter

from triage_board.api.v1.endpoints import (
    audit_logs,
    dashboard,
    patients,
    rooms,
)

api_router = APIRouter()

api_router.include_router(patients.router, prefix="/patients", tags=["patients"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit"])
