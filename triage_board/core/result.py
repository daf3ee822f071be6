# triage_board/core/result.py
"""
Tagged outcome type returned by every triage operation.

Callers branch on ``isinstance(result, Ok)`` / ``isinstance(result, Err)`` (or
``result.ok``) instead of catching exceptions, so each failure kind can be
rendered with a specific message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    DUPLICATE_PATIENT = "DUPLICATE_PATIENT"
    PATIENT_NOT_FOUND = "PATIENT_NOT_FOUND"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY_EXHAUSTED = "CAPACITY_EXHAUSTED"
    STORE_FAILURE = "STORE_FAILURE"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    # Conflicting record for DUPLICATE_PATIENT
    conflict: Any = None

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


class CapacityExhaustedError(Exception):
    """No date within the scan horizon has free daily capacity."""
