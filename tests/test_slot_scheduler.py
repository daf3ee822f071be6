from datetime import time, timedelta

import pytest

from triage_board.core.config import Settings
from triage_board.core.result import CapacityExhaustedError, ErrorKind
from triage_board.services.slot_scheduler import SlotScheduler
from triage_board.services.triage_service import TriageService
from triage_board.utils.datetime_utils import add_minutes


def test_slot_times_follow_consult_and_buffer(store):
    scheduler = SlotScheduler(store)

    assert scheduler.slot_times(0) == (time(9, 0), time(9, 25))
    assert scheduler.slot_times(1) == (time(9, 30), time(9, 55))

    for i in range(0, 120):
        start, end = scheduler.slot_times(i)
        assert end == add_minutes(start, 25)
        assert scheduler.slot_times(i + 1)[0] == add_minutes(start, 30)


def test_slot_times_wrap_past_midnight(store):
    scheduler = SlotScheduler(store)
    # 09:00 + 30 * 30 minutes lands on midnight
    assert scheduler.slot_times(30) == (time(0, 0), time(0, 25))


def test_negative_slot_index_rejected(store):
    with pytest.raises(ValueError):
        SlotScheduler(store).slot_times(-1)


def test_full_day_spills_to_next_day(store, settings, payload, today):
    settings.daily_capacity = 2
    service = TriageService(store, settings=settings)

    dates = []
    for n in range(3):
        result = service.register(payload(name=f"Patient {n}", contact=f"555-0{n}"), today=today)
        assert result.ok
        dates.append((result.value.patient.appointment_date, result.value.patient.slot_index))

    assert dates == [(today, 0), (today, 1), (today + timedelta(days=1), 0)]


def test_capacity_exhausted_within_horizon(store, settings, payload, today):
    settings.daily_capacity = 1
    settings.max_schedule_days = 2
    service = TriageService(store, settings=settings)

    assert service.register(payload(name="One", contact="1"), today=today).ok
    assert service.register(payload(name="Two", contact="2"), today=today).ok

    result = service.register(payload(name="Three", contact="3"), today=today)
    assert result.kind == ErrorKind.CAPACITY_EXHAUSTED
    assert store.count("patients") == 2


def test_find_earliest_date_raises_past_horizon(store, register, today):
    register(name="One", contact="1")
    scheduler = SlotScheduler(store, daily_capacity=1, max_days=1)

    with pytest.raises(CapacityExhaustedError):
        scheduler.find_earliest_date(today)


def test_discharged_slot_is_reused(service, register, today):
    first = register(name="First", contact="1")
    register(name="Second", contact="2")
    assert service.discharge_patient(first.id).ok

    third = register(name="Third", contact="3")
    assert (third.appointment_date, third.slot_index) == (today, 0)
    assert third.appointment_start_time == time(9, 0)


def test_hard_capacity_registers_under_lock(store, settings, payload, today):
    settings.enforce_hard_capacity = True
    settings.daily_capacity = 1
    service = TriageService(store, settings=settings)

    assert service.register(payload(name="One", contact="1"), today=today).ok
    second = service.register(payload(name="Two", contact="2"), today=today)

    assert second.value.patient.appointment_date == today + timedelta(days=1)
    assert store.get("token_counters", f"capacity:{today.isoformat()}") is not None


def test_default_capacity_runs_past_midnight():
    settings = Settings(daily_capacity=50, consult_minutes=25, buffer_minutes=5)

    assert settings.slot_step_minutes == 30
    assert not settings.slots_fit_clinic_day


def test_capacity_that_ends_before_midnight_fits():
    # Slot 29 runs 23:30 to 23:55
    assert Settings(daily_capacity=30, consult_minutes=25, buffer_minutes=5).slots_fit_clinic_day
    assert not Settings(daily_capacity=31, consult_minutes=25, buffer_minutes=5).slots_fit_clinic_day
