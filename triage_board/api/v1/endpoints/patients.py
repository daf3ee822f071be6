# triage_board/api/v1/endpoints/patients.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from triage_board.api.v1.errors import raise_for_error
from triage_board.core.result import Err
from triage_board.dependencies.services import get_actor, get_triage_service
from triage_board.models.patient import Patient, PriorityClass
from triage_board.schemas.patient import (
    BulkDischargeRequest,
    BulkDischargeResponse,
    DischargeOutcome,
    PatientRegister,
    PatientResponse,
    PatientUpdate,
    RegistrationResponse,
)
from triage_board.services.triage_service import TriageService
from triage_board.utils.datetime_utils import format_wait_time

router = APIRouter()


def to_response(patient: Patient) -> PatientResponse:
    response = PatientResponse.model_validate(patient)
    response.wait_time = format_wait_time(patient.check_in_time)
    return response


@router.post(
    "/",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_patient(
    payload: PatientRegister,
    service: TriageService = Depends(get_triage_service),
    actor: str | None = Depends(get_actor),
) -> RegistrationResponse:
    """
    Register a walk-in: classify, schedule, allocate a token.

    409 with the existing record when the same name + contact is still on the board.
    """
    result = service.register(payload, actor=actor)
    if isinstance(result, Err):
        raise_for_error(result)

    registration = result.value
    return RegistrationResponse(
        patient=to_response(registration.patient),
        queue_position=registration.queue_position,
    )


@router.get("/queue", response_model=list[PatientResponse])
def waiting_queue(
    priority: PriorityClass | None = Query(None, description="Only this priority class"),
    service: TriageService = Depends(get_triage_service),
) -> list[PatientResponse]:
    """
    Waiting patients in dispatch order (priority, then check-in time).
    """
    return [to_response(p) for p in service.waiting_queue(priority)]


@router.get("/search", response_model=list[PatientResponse])
def search_patients(
    q: str = Query(..., min_length=1, description="Name or contact fragment"),
    service: TriageService = Depends(get_triage_service),
) -> list[PatientResponse]:
    return [to_response(p) for p in service.search_patients(q)]


@router.post("/bulk-discharge", response_model=BulkDischargeResponse)
def bulk_discharge(
    payload: BulkDischargeRequest,
    service: TriageService = Depends(get_triage_service),
    actor: str | None = Depends(get_actor),
) -> BulkDischargeResponse:
    """
    Discharge several patients; each one succeeds or fails on its own.
    """
    outcome = service.bulk_discharge(payload.patient_ids, actor=actor)
    return BulkDischargeResponse(
        discharged=outcome.discharged,
        results=[
            DischargeOutcome(
                patient_id=pid,
                success=result.ok,
                message=None if result.ok else result.message,
            )
            for pid, result in outcome.results.items()
        ],
    )


@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: UUID,
    service: TriageService = Depends(get_triage_service),
) -> PatientResponse:
    result = service.get_patient(patient_id)
    if isinstance(result, Err):
        raise_for_error(result)
    return to_response(result.value)


@router.patch("/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: UUID,
    payload: PatientUpdate,
    service: TriageService = Depends(get_triage_service),
) -> PatientResponse:
    """
    Edit complaint, notes or vitals. Priority stays as classified at registration.
    """
    result = service.update_patient(patient_id, payload)
    if isinstance(result, Err):
        raise_for_error(result)
    return to_response(result.value)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def discharge_patient(
    patient_id: UUID,
    service: TriageService = Depends(get_triage_service),
    actor: str | None = Depends(get_actor),
) -> None:
    """
    Discharge: free the patient's room, then remove the record.
    """
    result = service.discharge_patient(patient_id, actor=actor)
    if isinstance(result, Err):
        raise_for_error(result)
