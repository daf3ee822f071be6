from uuid import uuid4

from sqlalchemy.exc import OperationalError

from triage_board.core.result import ErrorKind
from triage_board.models.patient import PatientStatus, PriorityClass, SymptomTag
from triage_board.models.room import RoomStatus
from triage_board.schemas.patient import PatientUpdate, Vitals
from triage_board.services import queue_orderer
from triage_board.services.notifier import list_audit_logs
from triage_board.services.triage_service import TriageService
from triage_board.store.sql_store import SqlStore


def actions(store):
    return [entry.action for entry in list_audit_logs(store, limit=100)]


def test_register_scenario_orders_critical_first(service, register):
    a = register(name="A", contact="1", pulse=80, temperature=98.6)
    b = register(name="B", contact="2", symptoms=[SymptomTag.CHEST_PAIN])

    assert a.priority == PriorityClass.NON_URGENT
    assert 100 <= a.token_number < 200
    assert b.priority == PriorityClass.CRITICAL
    assert 300 <= b.token_number < 400
    assert queue_orderer.order([a, b]) == [b, a]
    assert queue_orderer.order([b, a]) == [b, a]
    assert service.waiting_queue() == [b, a]


def test_register_sets_schedule_and_audit(store, service, payload, today):
    result = service.register(payload(complaint="  Sprained ankle "), today=today)

    assert result.ok
    patient = result.value.patient
    assert result.value.queue_position == 0
    assert patient.status == PatientStatus.WAITING
    assert patient.complaint == "Sprained ankle"
    assert patient.appointment_date == today
    assert patient.check_in_time is not None
    assert patient.assigned_room_id is None
    assert actions(store) == ["registered"]


def test_check_in_times_follow_insert_order(service, register):
    first = register(name="A", contact="1")
    second = register(name="B", contact="2")
    third = register(name="C", contact="3")

    stamps = [service.get_patient(p.id).value.check_in_time for p in (first, second, third)]
    assert stamps == sorted(stamps)


def test_queue_position_counts_patients_ahead(service, register, payload, today):
    register(name="Calm", contact="1")
    register(name="Hot", contact="2", symptoms=[SymptomTag.FEVER])

    critical = service.register(payload(name="Crit", contact="3", symptoms={SymptomTag.BLEEDING}), today=today)
    late = service.register(payload(name="Late", contact="4"), today=today)

    assert critical.value.queue_position == 0
    assert late.value.queue_position == 3


def test_tokens_not_reused_after_discharge(service, register):
    first = register(name="A", contact="1")
    assert service.discharge_patient(first.id).ok

    second = register(name="B", contact="2")

    assert first.token_number == 101
    assert second.token_number == 102


def test_blank_name_or_contact_rejected(store, service, payload, today):
    assert service.register(payload(name="   "), today=today).kind == ErrorKind.VALIDATION
    assert service.register(payload(contact=""), today=today).kind == ErrorKind.VALIDATION
    assert store.count("patients") == 0


def test_duplicate_patient_rejected_with_existing_record(store, service, register, payload, today):
    first = register(name="Jane", contact="555-1")

    result = service.register(payload(name="Jane", contact="555-1"), today=today)

    assert result.kind == ErrorKind.DUPLICATE_PATIENT
    assert result.conflict.id == first.id
    assert store.count("patients") == 1


def test_duplicate_check_covers_patients_in_treatment(service, rooms, register, payload, today):
    first = register(name="Jane", contact="555-1")
    assert service.assign_room_to_patient(first.id, rooms["R1"]).ok

    result = service.register(payload(name="Jane", contact="555-1"), today=today)
    assert result.kind == ErrorKind.DUPLICATE_PATIENT


def test_same_patient_can_return_after_discharge(service, register):
    first = register(name="Jane", contact="555-1")
    assert service.discharge_patient(first.id).ok

    again = register(name="Jane", contact="555-1")
    assert again.id != first.id


def test_room_scenario(store, service, register):
    rooms = {}
    store.create("rooms", {"room_number": "R1", "status": RoomStatus.AVAILABLE})
    store.commit()
    rooms["R1"] = store.query("rooms")[0].id
    a = register(name="A", contact="1")
    b = register(name="B", contact="2")

    assert service.assign_room_to_patient(a.id, rooms["R1"]).ok
    assert store.get("rooms", rooms["R1"]).status == RoomStatus.OCCUPIED

    assert service.assign_room_to_patient(b.id, rooms["R1"]).kind == ErrorKind.ROOM_UNAVAILABLE

    assert service.discharge_patient(a.id).ok
    assert store.get("rooms", rooms["R1"]).status == RoomStatus.AVAILABLE

    assert service.assign_room_to_patient(b.id, rooms["R1"]).ok
    assert store.get("rooms", rooms["R1"]).assigned_patient_id == b.id


def test_assign_and_discharge_write_audit_entries(store, service, rooms, register):
    patient = register()

    service.assign_room_to_patient(patient.id, rooms["R1"], actor="Nurse Kim")
    service.discharge_patient(patient.id, actor="Nurse Kim")

    entries = list_audit_logs(store, limit=100)
    assert sorted(e.action for e in entries) == sorted(
        ["registered", "assigned_room", "status_changed", "discharged", "deleted"]
    )
    by_action = {e.action: e for e in entries}
    assert by_action["registered"].performed_by == "System"
    assert by_action["assigned_room"].performed_by == "Nurse Kim"
    assert by_action["assigned_room"].details == "Room R1 assigned to Jane"
    assert by_action["deleted"].patient_id == patient.id


def test_failed_assignment_writes_no_audit(store, service, rooms, register):
    patient = register()
    service.assign_room_to_patient(uuid4(), rooms["R1"])
    service.assign_room_to_patient(patient.id, uuid4())

    assert actions(store) == ["registered"]


def test_discharge_unknown_patient(service):
    assert service.discharge_patient(uuid4()).kind == ErrorKind.PATIENT_NOT_FOUND


def test_bulk_discharge_reports_each_patient(store, service, register):
    a = register(name="A", contact="1")
    b = register(name="B", contact="2")
    missing = uuid4()

    outcome = service.bulk_discharge([a.id, missing, b.id])

    assert outcome.discharged == 2
    assert outcome.results[a.id].ok
    assert outcome.results[missing].kind == ErrorKind.PATIENT_NOT_FOUND
    assert store.count("patients") == 0


def test_bulk_discharge_counts_repeated_id_once(store, service, register):
    a = register(name="A", contact="1")

    outcome = service.bulk_discharge([a.id, a.id])

    assert outcome.discharged == 1
    assert list(outcome.results) == [a.id]
    assert outcome.results[a.id].ok
    assert store.count("patients") == 0


def test_waiting_queue_filters_by_priority(service, register, rooms):
    register(name="Calm", contact="1")
    hot = register(name="Hot", contact="2", symptoms=[SymptomTag.PAIN])
    treated = register(name="Treated", contact="3", symptoms=[SymptomTag.FEVER])
    service.assign_room_to_patient(treated.id, rooms["R1"])

    assert [p.id for p in service.waiting_queue(PriorityClass.URGENT)] == [hot.id]
    assert len(service.waiting_queue()) == 2


def test_search_by_name_or_contact(service, register):
    jane = register(name="Jane Doe", contact="555-1234")
    john = register(name="John Roe", contact="555-9999")

    assert [p.id for p in service.search_patients("jane")] == [jane.id]
    assert [p.id for p in service.search_patients("9999")] == [john.id]
    assert {p.id for p in service.search_patients("555")} == {jane.id, john.id}
    assert service.search_patients("   ") == []


def test_update_details_keeps_priority(service, register):
    patient = register()

    result = service.update_patient(
        patient.id,
        PatientUpdate(notes="Allergic to penicillin", vitals=Vitals(pulse=150, temperature=99.0)),
    )

    assert result.ok
    assert result.value.notes == "Allergic to penicillin"
    assert result.value.pulse == 150
    assert result.value.priority == PriorityClass.NON_URGENT


def test_update_unknown_patient(service):
    assert service.update_patient(uuid4(), PatientUpdate(notes="x")).kind == ErrorKind.PATIENT_NOT_FOUND


class FailingPatientStore(SqlStore):
    def create(self, collection, values):
        if collection == "patients":
            raise OperationalError("INSERT INTO patients", {}, Exception("database is locked"))
        return super().create(collection, values)


def test_store_failure_rolls_back_registration(db, feed, settings, payload, today):
    store = FailingPatientStore(db, feed=feed)
    service = TriageService(store, settings=settings)

    result = service.register(payload(), today=today)

    assert result.kind == ErrorKind.STORE_FAILURE
    assert "database is locked" in result.message
    assert store.count("patients") == 0
    assert store.count("token_counters") == 0
