# triage_board/services/slot_scheduler.py
import logging
from dataclasses import dataclass
from datetime import date, time, timedelta

from triage_board.core.config import Settings
from triage_board.core.result import CapacityExhaustedError
from triage_board.models.patient import PatientStatus
from triage_board.store.base import Store
from triage_board.utils.datetime_utils import add_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    appointment_date: date
    index: int
    start: time
    end: time


class SlotScheduler:
    """
    Places new registrations on the earliest day with free capacity.

    The capacity check counts waiting patients on a date. By default it is a
    soft limit: two concurrent registrations may both take the last slot.
    With hard_capacity the date's lock row is held until the caller's
    transaction ends, serialising registrations for that date.
    """

    def __init__(
        self,
        store: Store,
        *,
        daily_capacity: int = 50,
        consult_minutes: int = 25,
        buffer_minutes: int = 5,
        clinic_open: time = time(9, 0),
        max_days: int = 365,
        hard_capacity: bool = False,
    ) -> None:
        self.store = store
        self.daily_capacity = daily_capacity
        self.consult_minutes = consult_minutes
        self.buffer_minutes = buffer_minutes
        self.clinic_open = clinic_open
        self.max_days = max_days
        self.hard_capacity = hard_capacity

    @classmethod
    def from_settings(cls, store: Store, settings: Settings) -> "SlotScheduler":
        return cls(
            store,
            daily_capacity=settings.daily_capacity,
            consult_minutes=settings.consult_minutes,
            buffer_minutes=settings.buffer_minutes,
            clinic_open=settings.clinic_open_time,
            max_days=settings.max_schedule_days,
            hard_capacity=settings.enforce_hard_capacity,
        )

    def waiting_count(self, day: date) -> int:
        return self.store.count(
            "patients", {"appointment_date": day, "status": PatientStatus.WAITING}
        )

    def find_earliest_date(self, start: date) -> date:
        for offset in range(self.max_days):
            day = start + timedelta(days=offset)
            if self.hard_capacity:
                self.store.lock_sequence(f"capacity:{day.isoformat()}")
            if self.waiting_count(day) < self.daily_capacity:
                return day

        raise CapacityExhaustedError(
            f"No capacity within {self.max_days} days from {start.isoformat()}"
        )

    def slot_times(self, slot_index: int) -> tuple[time, time]:
        if slot_index < 0:
            raise ValueError("Slot index must be non-negative")
        start = add_minutes(
            self.clinic_open, slot_index * (self.consult_minutes + self.buffer_minutes)
        )
        return start, add_minutes(start, self.consult_minutes)

    def first_free_index(self, day: date) -> int:
        """Lowest slot index no waiting patient on ``day`` holds."""
        taken = {
            p.slot_index
            for p in self.store.query(
                "patients", {"appointment_date": day, "status": PatientStatus.WAITING}
            )
        }
        index = 0
        while index in taken:
            index += 1
        return index

    def reserve(self, start: date) -> Slot:
        day = self.find_earliest_date(start)
        index = self.first_free_index(day)
        slot_start, slot_end = self.slot_times(index)
        logger.debug(f"Scheduled slot {index} on {day.isoformat()} at {slot_start.isoformat()}")
        return Slot(appointment_date=day, index=index, start=slot_start, end=slot_end)
