# triage_board/api/v1/endpoints/rooms.py
from uuid import UUID

from fastapi import APIRouter, Depends, status

from triage_board.api.v1.errors import raise_for_error
from triage_board.core.result import Err
from triage_board.dependencies.services import get_actor, get_store, get_triage_service
from triage_board.schemas.room import RoomAssignRequest, RoomCreate, RoomResponse
from triage_board.services.room_service import add_room, list_available_rooms, list_rooms
from triage_board.services.triage_service import TriageService
from triage_board.store.sql_store import SqlStore

router = APIRouter()


@router.get("/", response_model=list[RoomResponse])
def get_rooms(store: SqlStore = Depends(get_store)) -> list[RoomResponse]:
    return [RoomResponse.model_validate(r) for r in list_rooms(store)]


@router.get("/available", response_model=list[RoomResponse])
def get_available_rooms(store: SqlStore = Depends(get_store)) -> list[RoomResponse]:
    return [RoomResponse.model_validate(r) for r in list_available_rooms(store)]


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(payload: RoomCreate, store: SqlStore = Depends(get_store)) -> RoomResponse:
    result = add_room(store, payload.room_number)
    if isinstance(result, Err):
        raise_for_error(result)
    return RoomResponse.model_validate(result.value)


@router.post("/{room_id}/assign", response_model=RoomResponse)
def assign_room(
    room_id: UUID,
    payload: RoomAssignRequest,
    service: TriageService = Depends(get_triage_service),
    actor: str | None = Depends(get_actor),
) -> RoomResponse:
    """
    Put a waiting patient in this room.

    409 when the room was taken in the meantime; refresh and pick another room.
    """
    result = service.assign_room_to_patient(payload.patient_id, room_id, actor=actor)
    if isinstance(result, Err):
        raise_for_error(result)
    return RoomResponse.model_validate(service.store.get("rooms", room_id))
