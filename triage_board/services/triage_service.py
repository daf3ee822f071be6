# triage_board/services/triage_service.py
"""
Front-desk operations: register, assign a room, discharge.

Every operation re-reads current state from the store, runs in one database
transaction and returns a Result. Store failures roll the transaction back and
come back as STORE_FAILURE; nothing is retried, since retrying a create could
register the same patient twice. Audit entries are written after the commit
and can never fail the operation.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError

from triage_board.core.config import Settings, get_settings
from triage_board.core.result import CapacityExhaustedError, Err, ErrorKind, Ok, Result
from triage_board.models.audit_log import AuditAction
from triage_board.models.patient import Patient, PatientStatus, PriorityClass
from triage_board.schemas.patient import PatientRegister, PatientUpdate
from triage_board.services import queue_orderer
from triage_board.services.notifier import AuditNotifier
from triage_board.services.priority_classifier import classify
from triage_board.services.room_matcher import RoomMatcher
from triage_board.services.slot_scheduler import SlotScheduler
from triage_board.services.statistics_service import invalidate_statistics_cache
from triage_board.services.token_allocator import TokenAllocator
from triage_board.store.base import Store
from triage_board.utils.datetime_utils import today_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    patient: Patient
    queue_position: int


@dataclass(frozen=True)
class BulkDischargeResult:
    discharged: int
    results: dict[Any, Result[None]]


class TriageService:
    def __init__(
        self,
        store: Store,
        *,
        settings: Settings | None = None,
        notifier: AuditNotifier | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.notifier = notifier or AuditNotifier(store, self.settings.audit_default_actor)
        self.scheduler = SlotScheduler.from_settings(store, self.settings)
        self.tokens = TokenAllocator(store, series_policy=self.settings.token_series)
        self.rooms = RoomMatcher(store)

    def _store_failure(self, operation: str, exc: SQLAlchemyError) -> Err:
        logger.error(f"{operation} failed: {exc}", exc_info=True)
        self.store.rollback()
        return Err(ErrorKind.STORE_FAILURE, str(exc))

    def _changed(self) -> None:
        invalidate_statistics_cache()

    # ------------------------------------------
    # Register
    # ------------------------------------------
    def register(
        self,
        payload: PatientRegister,
        *,
        actor: str | None = None,
        today: date | None = None,
    ) -> Result[Registration]:
        name = payload.name.strip()
        contact = payload.contact.strip()
        if not name or not contact:
            return Err(ErrorKind.VALIDATION, "Name and contact are required")

        try:
            existing = self.find_existing(name, contact)
            if existing is not None:
                return Err(
                    ErrorKind.DUPLICATE_PATIENT,
                    f"Patient {name} ({contact}) is already registered",
                    conflict=existing,
                )

            priority = classify(payload.symptoms, payload.vitals)
            slot = self.scheduler.reserve(today or today_utc())
            position = self.tokens.position_for(priority, slot.appointment_date)
            token = self.tokens.allocate(priority, slot.appointment_date)

            patient = self.store.create(
                "patients",
                {
                    "name": name,
                    "age": payload.age,
                    "contact": contact,
                    "complaint": payload.complaint,
                    "symptoms": sorted(s.value for s in payload.symptoms),
                    "blood_pressure": payload.vitals.blood_pressure,
                    "pulse": payload.vitals.pulse,
                    "temperature": payload.vitals.temperature,
                    "priority": priority,
                    "token_number": token,
                    "appointment_date": slot.appointment_date,
                    "slot_index": slot.index,
                    "appointment_start_time": slot.start,
                    "appointment_end_time": slot.end,
                    "status": PatientStatus.WAITING,
                    "notes": payload.notes,
                },
            )
            patient_id = patient.id
            self.store.commit()
        except CapacityExhaustedError as e:
            self.store.rollback()
            return Err(ErrorKind.CAPACITY_EXHAUSTED, str(e))
        except SQLAlchemyError as e:
            return self._store_failure("Patient registration", e)

        logger.info(f"Registered patient {patient_id} ({priority.value}, token {token})")
        if priority == PriorityClass.CRITICAL:
            logger.warning(f"CRITICAL PATIENT ALERT: {name} (token {token})")

        self._changed()
        self.notifier.log(
            AuditAction.REGISTERED,
            patient_id,
            name,
            f"Patient {name} registered with {priority.value} priority",
            actor=actor,
        )
        return Ok(Registration(patient=self.store.get("patients", patient_id), queue_position=position))

    def find_existing(self, name: str, contact: str) -> Patient | None:
        """Non-discharged patient with the same name and contact (discharged rows are deleted)."""
        matches = self.store.query(
            "patients", {"name": name, "contact": contact}, [("check_in_time", "asc")], limit=1
        )
        return matches[0] if matches else None

    # ------------------------------------------
    # Assign room
    # ------------------------------------------
    def assign_room_to_patient(
        self, patient_id: Any, room_id: Any, *, actor: str | None = None
    ) -> Result[None]:
        try:
            result = self.rooms.assign(patient_id, room_id)
            if isinstance(result, Err):
                self.store.rollback()
                return result
            patient_name = self.store.get("patients", patient_id).name
            self.store.commit()
        except SQLAlchemyError as e:
            return self._store_failure("Room assignment", e)

        room_number = result.value
        logger.info(f"Assigned room {room_number} to patient {patient_id}")

        self._changed()
        self.notifier.log(
            AuditAction.ASSIGNED_ROOM,
            patient_id,
            patient_name,
            f"Room {room_number} assigned to {patient_name}",
            actor=actor,
        )
        self.notifier.log(
            AuditAction.STATUS_CHANGED,
            patient_id,
            patient_name,
            f"Status changed from {PatientStatus.WAITING.value} to {PatientStatus.IN_TREATMENT.value}",
            actor=actor,
        )
        return Ok(None)

    # ------------------------------------------
    # Discharge
    # ------------------------------------------
    def discharge_patient(self, patient_id: Any, *, actor: str | None = None) -> Result[None]:
        try:
            patient = self.store.get("patients", patient_id)
            if patient is None:
                return Err(ErrorKind.PATIENT_NOT_FOUND, "Patient not found")
            patient_name = patient.name

            result = self.rooms.discharge(patient_id)
            if isinstance(result, Err):
                self.store.rollback()
                return result
            self.store.commit()
        except SQLAlchemyError as e:
            return self._store_failure("Discharge", e)

        room_number = result.value
        logger.info(f"Discharged patient {patient_id}" + (f", released room {room_number}" if room_number else ""))

        self._changed()
        self.notifier.log(
            AuditAction.DISCHARGED,
            patient_id,
            patient_name,
            f"discharged: {patient_name}",
            actor=actor,
        )
        self.notifier.log(
            AuditAction.DELETED,
            patient_id,
            patient_name,
            f"Patient {patient_name} record deleted",
            actor=actor,
        )
        return Ok(None)

    def bulk_discharge(self, patient_ids: Iterable[Any], *, actor: str | None = None) -> BulkDischargeResult:
        # Repeated ids are discharged once; a second attempt would overwrite the outcome
        results = {pid: self.discharge_patient(pid, actor=actor) for pid in dict.fromkeys(patient_ids)}
        discharged = sum(1 for r in results.values() if isinstance(r, Ok))
        return BulkDischargeResult(discharged=discharged, results=results)

    # ------------------------------------------
    # Reads and detail edits
    # ------------------------------------------
    def get_patient(self, patient_id: Any) -> Result[Patient]:
        patient = self.store.get("patients", patient_id)
        if patient is None:
            return Err(ErrorKind.PATIENT_NOT_FOUND, "Patient not found")
        return Ok(patient)

    def waiting_queue(self, priority: PriorityClass | None = None) -> list[Patient]:
        filters: dict[str, Any] = {"status": PatientStatus.WAITING}
        if priority is not None:
            filters["priority"] = priority
        patients = self.store.query("patients", filters, [("check_in_time", "asc")])
        return queue_orderer.order(patients)

    def search_patients(self, term: str) -> list[Patient]:
        """Case-insensitive name substring or contact substring."""
        term = term.strip()
        if not term:
            return []
        lowered = term.lower()
        patients = self.store.query("patients", order_by=[("check_in_time", "asc")])
        return [p for p in patients if lowered in p.name.lower() or term in p.contact]

    def update_patient(self, patient_id: Any, payload: PatientUpdate) -> Result[Patient]:
        values: dict[str, Any] = {}
        if payload.complaint is not None:
            values["complaint"] = payload.complaint.strip()
        if payload.notes is not None:
            values["notes"] = payload.notes.strip()
        if payload.vitals is not None:
            values.update(
                blood_pressure=payload.vitals.blood_pressure,
                pulse=payload.vitals.pulse,
                temperature=payload.vitals.temperature,
            )

        try:
            if not values:
                return self.get_patient(patient_id)
            if not self.store.update("patients", patient_id, values):
                self.store.rollback()
                return Err(ErrorKind.PATIENT_NOT_FOUND, "Patient not found")
            self.store.commit()
        except SQLAlchemyError as e:
            return self._store_failure("Patient update", e)

        return self.get_patient(patient_id)
