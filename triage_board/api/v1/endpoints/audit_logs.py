# triage_board/api/v1/endpoints/audit_logs.py
from fastapi import APIRouter, Depends, Query

from triage_board.dependencies.services import get_store
from triage_board.schemas.audit import AuditLogResponse
from triage_board.services.notifier import list_audit_logs
from triage_board.store.sql_store import SqlStore

router = APIRouter()


@router.get("/", response_model=list[AuditLogResponse])
def get_audit_logs(
    limit: int = Query(50, ge=1, le=500),
    store: SqlStore = Depends(get_store),
) -> list[AuditLogResponse]:
    return [AuditLogResponse.model_validate(entry) for entry in list_audit_logs(store, limit)]
