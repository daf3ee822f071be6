# triage_board/services/queue_orderer.py
from datetime import datetime
from typing import Any, Iterable

from triage_board.models.patient import PriorityClass
from triage_board.services.priority_classifier import PRIORITY_RANK
from triage_board.utils.datetime_utils import as_utc

# Unknown priority values sort after every known class
_UNRANKED = len(PRIORITY_RANK) + 1


def priority_rank(priority: PriorityClass | str | None) -> int:
    try:
        return PRIORITY_RANK[PriorityClass(priority)]
    except ValueError:
        return _UNRANKED


def _check_in_seconds(check_in_time: datetime | None) -> float:
    # Unresolved timestamps count as the epoch, i.e. the oldest arrival
    if check_in_time is None:
        return 0.0
    return as_utc(check_in_time).timestamp()


def sort_key(patient: Any) -> tuple[int, float]:
    return (
        priority_rank(getattr(patient, "priority", None)),
        _check_in_seconds(getattr(patient, "check_in_time", None)),
    )


def order(patients: Iterable[Any]) -> list[Any]:
    """
    Dispatch order: critical before urgent before nonUrgent, then earliest check-in.
    Stable and non-mutating: equal keys keep their input order.
    """
    return sorted(patients, key=sort_key)
