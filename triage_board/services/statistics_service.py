# triage_board/services/statistics_service.py
"""
Queue statistics derived from the live patient and room sets.

The Patient/Room tables are the source of truth. A copy of the latest
Statistics is kept in Redis for fast dashboard reads and dropped whenever a
triage operation changes either set.
"""

import json
import logging
from datetime import datetime
from typing import Any, Iterable

from pydantic import ValidationError

from triage_board.core.redis import cache_delete, cache_get, cache_set
from triage_board.models.patient import PatientStatus, PriorityClass
from triage_board.models.room import RoomStatus
from triage_board.schemas.statistics import (
    DetailedStatistics,
    PriorityBreakdown,
    RoomOccupancy,
    Statistics,
    WaitAlert,
)
from triage_board.store.base import Store
from triage_board.utils.datetime_utils import minutes_between, utc_now

logger = logging.getLogger(__name__)

STATISTICS_CACHE_KEY = "statistics:current"


def average_wait_minutes(patients: Iterable[Any], now: datetime) -> int:
    """Floored mean wait over patients with a known check-in time; 0 when there are none."""
    waits = [
        minutes_between(p.check_in_time, now)
        for p in patients
        if getattr(p, "check_in_time", None) is not None
    ]
    if not waits:
        return 0
    return int(sum(waits) // len(waits))


def _by_priority(patients: list[Any], priority: PriorityClass) -> list[Any]:
    return [p for p in patients if p.priority == priority]


def _room_counts(rooms: Iterable[Any]) -> tuple[int, int, int]:
    rooms = list(rooms)
    occupied = sum(1 for r in rooms if r.status == RoomStatus.OCCUPIED)
    available = sum(1 for r in rooms if r.status == RoomStatus.AVAILABLE)
    return len(rooms), occupied, available


def compute_statistics(
    patients: Iterable[Any], rooms: Iterable[Any], now: datetime | None = None
) -> Statistics:
    now = now or utc_now()
    patients = list(patients)
    _, occupied, available = _room_counts(rooms)

    return Statistics(
        total_waiting=len(patients),
        critical_count=len(_by_priority(patients, PriorityClass.CRITICAL)),
        urgent_count=len(_by_priority(patients, PriorityClass.URGENT)),
        non_urgent_count=len(_by_priority(patients, PriorityClass.NON_URGENT)),
        average_wait_minutes=average_wait_minutes(patients, now),
        rooms_occupied=occupied,
        rooms_available=available,
        generated_at=now,
    )


def compute_detailed_statistics(
    patients: Iterable[Any], rooms: Iterable[Any], now: datetime | None = None
) -> DetailedStatistics:
    now = now or utc_now()
    patients = list(patients)
    total, occupied, available = _room_counts(rooms)

    def breakdown(priority: PriorityClass) -> PriorityBreakdown:
        group = _by_priority(patients, priority)
        return PriorityBreakdown(count=len(group), average_wait_minutes=average_wait_minutes(group, now))

    return DetailedStatistics(
        total_waiting=len(patients),
        critical=breakdown(PriorityClass.CRITICAL),
        urgent=breakdown(PriorityClass.URGENT),
        non_urgent=breakdown(PriorityClass.NON_URGENT),
        rooms=RoomOccupancy(
            total=total,
            occupied=occupied,
            available=available,
            occupancy_rate=(occupied * 100) // total if total else 0,
        ),
        generated_at=now,
    )


def find_long_waits(
    patients: Iterable[Any], threshold_minutes: int, now: datetime | None = None
) -> list[WaitAlert]:
    now = now or utc_now()
    alerts = []
    for p in patients:
        if p.check_in_time is None:
            continue
        waited = int(minutes_between(p.check_in_time, now))
        if waited > threshold_minutes:
            alerts.append(
                WaitAlert(patient_id=p.id, name=p.name, priority=p.priority, wait_minutes=waited)
            )
    return alerts


def _live_sets(store: Store) -> tuple[list[Any], list[Any]]:
    patients = store.query("patients", {"status": PatientStatus.WAITING})
    rooms = store.query("rooms")
    return patients, rooms


def get_statistics(store: Store, *, cache_ttl: int = 60) -> Statistics:
    cached = cache_get(STATISTICS_CACHE_KEY)
    if cached:
        try:
            return Statistics(**json.loads(cached))
        except (ValueError, ValidationError):
            logger.warning("Statistics cache corrupted. Recomputing.", exc_info=True)

    stats = compute_statistics(*_live_sets(store))
    cache_set(STATISTICS_CACHE_KEY, stats.model_dump_json(), ttl=cache_ttl)
    return stats


def get_detailed_statistics(store: Store) -> DetailedStatistics:
    return compute_detailed_statistics(*_live_sets(store))


def get_wait_alerts(store: Store, threshold_minutes: int) -> list[WaitAlert]:
    patients = store.query(
        "patients", {"status": PatientStatus.WAITING}, [("check_in_time", "asc")]
    )
    alerts = find_long_waits(patients, threshold_minutes)
    if alerts:
        logger.warning(f"Long wait time alerts: {len(alerts)} patient(s) over {threshold_minutes} mins")
    return alerts


def invalidate_statistics_cache() -> None:
    cache_delete(STATISTICS_CACHE_KEY)
