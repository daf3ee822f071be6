# triage_board/services/room_service.py
import logging
import re

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from triage_board.core.result import Err, ErrorKind, Ok, Result
from triage_board.models.room import Room, RoomStatus
from triage_board.store.base import Store

logger = logging.getLogger(__name__)


def room_sort_key(room_number: str) -> list:
    """Natural order so R2 sorts before R10."""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", room_number)]


def list_rooms(store: Store, status: RoomStatus | None = None) -> list[Room]:
    filters = {"status": status} if status is not None else None
    rooms = store.query("rooms", filters, [("room_number", "asc")])
    return sorted(rooms, key=lambda r: room_sort_key(r.room_number))


def list_available_rooms(store: Store) -> list[Room]:
    return list_rooms(store, RoomStatus.AVAILABLE)


def add_room(store: Store, room_number: str) -> Result[Room]:
    room_number = room_number.strip()
    if not room_number:
        return Err(ErrorKind.VALIDATION, "Room number is required")

    if store.count("rooms", {"room_number": room_number}):
        return Err(ErrorKind.VALIDATION, f"Room {room_number} already exists")

    try:
        room = store.create("rooms", {"room_number": room_number, "status": RoomStatus.AVAILABLE})
        room_id = room.id
        store.commit()
    except IntegrityError:
        store.rollback()
        return Err(ErrorKind.VALIDATION, f"Room {room_number} already exists")
    except SQLAlchemyError as e:
        logger.error(f"Adding room {room_number} failed: {e}", exc_info=True)
        store.rollback()
        return Err(ErrorKind.STORE_FAILURE, str(e))

    logger.info(f"Room {room_number} added")
    return Ok(store.get("rooms", room_id))
