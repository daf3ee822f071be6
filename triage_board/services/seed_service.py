# triage_board/services/seed_service.py
import logging

from triage_board.models.room import RoomStatus
from triage_board.store.base import Store

logger = logging.getLogger(__name__)


def default_room_numbers(count: int, prefix: str = "R") -> list[str]:
    return [f"{prefix}{n}" for n in range(1, count + 1)]


def seed_rooms(store: Store, *, count: int = 12, prefix: str = "R") -> int:
    """
    Create R1..R{count} when the rooms table is empty.
    Safe to run on every startup: any existing room means the seed already ran.
    Returns the number of rooms created.
    """
    if store.count("rooms") > 0:
        logger.debug("Rooms already present, skipping seed")
        return 0

    for room_number in default_room_numbers(count, prefix):
        store.create("rooms", {"room_number": room_number, "status": RoomStatus.AVAILABLE})
    store.commit()

    logger.info(f"Seeded {count} rooms ({prefix}1..{prefix}{count})")
    return count
