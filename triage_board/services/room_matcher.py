# triage_board/services/room_matcher.py
"""
Binds rooms to patients and releases them.

All writes run inside a savepoint of the caller's transaction. Both sides of
the relation are written with compare-and-swap updates, so a room taken by a
concurrent session between our read and our write is reported as unavailable
instead of being overwritten. A failed step rolls the savepoint back; nothing
partial survives. Committing is the caller's job.
"""

import logging
from typing import Any

from triage_board.core.result import Err, ErrorKind, Ok, Result
from triage_board.models.patient import PatientStatus
from triage_board.models.room import RoomStatus
from triage_board.store.base import Store
from triage_board.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class _Abort(Exception):
    def __init__(self, error: Err) -> None:
        super().__init__(error.message)
        self.error = error


class RoomMatcher:
    def __init__(self, store: Store) -> None:
        self.store = store

    def assign(self, patient_id: Any, room_id: Any) -> Result[str]:
        """Returns Ok(room_number) once both records reference each other."""
        patient = self.store.get("patients", patient_id)
        if patient is None:
            return Err(ErrorKind.PATIENT_NOT_FOUND, "Patient not found")

        room = self.store.get("rooms", room_id)
        if room is None:
            return Err(ErrorKind.ROOM_NOT_FOUND, "Room not found")

        if patient.status != PatientStatus.WAITING:
            return Err(
                ErrorKind.INVALID_STATE,
                f"Patient is {patient.status.value}, only waiting patients can be assigned a room",
            )

        room_number = room.room_number
        patient_name = patient.name

        try:
            with self.store.savepoint():
                occupied = self.store.update_where(
                    "rooms",
                    room_id,
                    {"status": RoomStatus.AVAILABLE},
                    {
                        "status": RoomStatus.OCCUPIED,
                        "assigned_patient_id": patient_id,
                        "assigned_patient_name": patient_name,
                        "assigned_time": utc_now(),
                    },
                )
                if not occupied:
                    raise _Abort(
                        Err(ErrorKind.ROOM_UNAVAILABLE, f"Room {room_number} is not available")
                    )

                admitted = self.store.update_where(
                    "patients",
                    patient_id,
                    {"status": PatientStatus.WAITING, "assigned_room_id": None},
                    {
                        "status": PatientStatus.IN_TREATMENT,
                        "assigned_room_id": room_id,
                        "assigned_room_number": room_number,
                    },
                )
                if not admitted:
                    raise _Abort(
                        Err(ErrorKind.INVALID_STATE, "Patient is no longer waiting")
                    )
        except _Abort as abort:
            logger.info(f"Room assignment {patient_id} -> {room_id} rejected: {abort.error.message}")
            return abort.error

        return Ok(room_number)

    def release(self, room_id: Any, *, expected_patient_id: Any = None) -> Result[None]:
        """
        Return the room to available. Idempotent: an already-available room is a no-op.

        With expected_patient_id the room is cleared only while it still points
        at that patient; a room already handed to someone else is left alone.
        """
        room = self.store.get("rooms", room_id)
        if room is None:
            return Err(ErrorKind.ROOM_NOT_FOUND, "Room not found")

        if room.status == RoomStatus.AVAILABLE and room.assigned_patient_id is None:
            return Ok(None)

        expected = {} if expected_patient_id is None else {"assigned_patient_id": expected_patient_id}
        with self.store.savepoint():
            cleared = self.store.update_where(
                "rooms",
                room_id,
                expected,
                {
                    "status": RoomStatus.AVAILABLE,
                    "assigned_patient_id": None,
                    "assigned_patient_name": None,
                    "assigned_time": None,
                },
            )

        if not cleared:
            logger.warning(
                f"Room {room.room_number} no longer references patient {expected_patient_id}; left as is"
            )
        return Ok(None)

    def discharge(self, patient_id: Any) -> Result[str | None]:
        """
        Release the patient's room (if any), then hard-delete the patient.
        A failed release aborts the discharge so an occupied room is never orphaned.
        Returns Ok(room_number or None).
        """
        patient = self.store.get("patients", patient_id)
        if patient is None:
            return Err(ErrorKind.PATIENT_NOT_FOUND, "Patient not found")

        room_id = patient.assigned_room_id
        room_number = patient.assigned_room_number

        if room_id is not None:
            released = self.release(room_id, expected_patient_id=patient_id)
            if isinstance(released, Err):
                if released.kind != ErrorKind.ROOM_NOT_FOUND:
                    return released
                logger.warning(f"Patient {patient_id} referenced missing room {room_id}")

        if not self.store.delete("patients", patient_id):
            return Err(ErrorKind.PATIENT_NOT_FOUND, "Patient not found")

        return Ok(room_number)
