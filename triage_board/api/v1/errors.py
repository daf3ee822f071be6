# triage_board/api/v1/errors.py
from typing import NoReturn

from fastapi import HTTPException, status

from triage_board.core.result import Err, ErrorKind
from triage_board.schemas.patient import PatientResponse

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.DUPLICATE_PATIENT: status.HTTP_409_CONFLICT,
    ErrorKind.PATIENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ROOM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ROOM_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.CAPACITY_EXHAUSTED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.STORE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_error(error: Err) -> NoReturn:
    """
    Translate a failed Result into an HTTP error.
    Duplicate registrations carry the existing patient so the desk can pick it up.
    """
    detail: dict = {"kind": error.kind.value, "message": error.message}
    if error.kind == ErrorKind.DUPLICATE_PATIENT and error.conflict is not None:
        detail["existing_patient"] = PatientResponse.model_validate(error.conflict).model_dump(mode="json")

    raise HTTPException(status_code=STATUS_BY_KIND[error.kind], detail=detail)
