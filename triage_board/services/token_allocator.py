# triage_board/services/token_allocator.py
"""
Token numbers shown to patients, banded by priority:

    nonUrgent -> 101..199, urgent -> 201..299, critical -> 301..399

Tokens come from an atomic per-series counter in the store, so two concurrent
registrations in the same series never receive the same value. The sequence
folds back into the band after 99 tokens; tokens are display numbers, unique
among the patients waiting at the same time, not permanent identifiers.
"""

import logging
from datetime import date
from typing import Any, Iterable

from triage_board.models.patient import PatientStatus, PriorityClass
from triage_board.services.queue_orderer import priority_rank
from triage_board.store.base import Store

logger = logging.getLogger(__name__)

TOKEN_BANDS = {
    PriorityClass.NON_URGENT: 100,
    PriorityClass.URGENT: 200,
    PriorityClass.CRITICAL: 300,
}
BAND_WIDTH = 100

SERIES_PER_DATE = "per_date"
SERIES_GLOBAL = "global"


def token_for(priority: PriorityClass, sequence: int) -> int:
    """Map a 1-based sequence number into the priority's band."""
    if sequence < 1:
        raise ValueError("Token sequence starts at 1")
    return TOKEN_BANDS[priority] + (sequence - 1) % (BAND_WIDTH - 1) + 1


def allocate_from_snapshot(priority: PriorityClass, waiting: Iterable[Any]) -> int:
    """
    Count-based token: band + 1 + number of waiting patients of the same class.

    Racy under concurrent registrations; used for previews only. Registration
    goes through TokenAllocator.allocate().
    """
    same_class = sum(1 for p in waiting if p.priority == priority)
    return token_for(priority, same_class + 1)


def queue_position(priority: PriorityClass, waiting: Iterable[Any]) -> int:
    """
    Zero-based position a new arrival takes in dispatch order: behind every
    waiting patient of the same or a more urgent class.
    """
    rank = priority_rank(priority)
    return sum(1 for p in waiting if priority_rank(p.priority) <= rank)


def series_key(priority: PriorityClass, appointment_date: date, policy: str = SERIES_PER_DATE) -> str:
    if policy == SERIES_GLOBAL:
        return f"{priority.value}:all"
    return f"{priority.value}:{appointment_date.isoformat()}"


class TokenAllocator:
    def __init__(self, store: Store, *, series_policy: str = SERIES_PER_DATE) -> None:
        if series_policy not in (SERIES_PER_DATE, SERIES_GLOBAL):
            raise ValueError(f"Unknown token series policy: {series_policy}")
        self.store = store
        self.series_policy = series_policy

    def waiting_in_series(self, appointment_date: date) -> list[Any]:
        filters: dict[str, Any] = {"status": PatientStatus.WAITING}
        if self.series_policy == SERIES_PER_DATE:
            filters["appointment_date"] = appointment_date
        return self.store.query("patients", filters, [("check_in_time", "asc")])

    def allocate(self, priority: PriorityClass, appointment_date: date) -> int:
        key = series_key(priority, appointment_date, self.series_policy)
        sequence = self.store.next_sequence(key)
        token = token_for(priority, sequence)
        logger.debug(f"Allocated token {token} from series '{key}' (sequence {sequence})")
        return token

    def position_for(self, priority: PriorityClass, appointment_date: date) -> int:
        return queue_position(priority, self.waiting_in_series(appointment_date))
