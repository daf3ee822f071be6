# triage_board/api/v1/endpoints/dashboard.py
from fastapi import APIRouter, Depends, Query

from triage_board.core.config import get_settings
from triage_board.dependencies.services import get_store
from triage_board.schemas.statistics import DetailedStatistics, Statistics, WaitAlert
from triage_board.services.statistics_service import (
    get_detailed_statistics,
    get_statistics,
    get_wait_alerts,
)
from triage_board.store.sql_store import SqlStore

router = APIRouter()


@router.get("/statistics", response_model=Statistics)
def statistics(store: SqlStore = Depends(get_store)) -> Statistics:
    """
    Board counters. Served from the Redis copy when present (dropped on every change).
    """
    return get_statistics(store, cache_ttl=get_settings().statistics_cache_ttl)


@router.get("/statistics/detailed", response_model=DetailedStatistics)
def detailed_statistics(store: SqlStore = Depends(get_store)) -> DetailedStatistics:
    return get_detailed_statistics(store)


@router.get("/wait-alerts", response_model=list[WaitAlert])
def wait_alerts(
    threshold_minutes: int | None = Query(None, ge=0, description="Defaults to LONG_WAIT_MINUTES"),
    store: SqlStore = Depends(get_store),
) -> list[WaitAlert]:
    threshold = get_settings().long_wait_minutes if threshold_minutes is None else threshold_minutes
    return get_wait_alerts(store, threshold)
