#!/usr/bin/env python3
# scripts/seed_rooms.py
"""
Board setup: treatment rooms.
This script is safe to run many times (idempotent).

Design notes:
- --seed-rooms only creates rooms when the rooms table is empty.
- --add-room creates one extra room; an existing number is reported, not duplicated.

Examples:
  # Seed R1..R12 (or ROOM_COUNT / ROOM_PREFIX from env)
  python -m scripts.seed_rooms --seed-rooms

  # Seed a smaller board
  python -m scripts.seed_rooms --seed-rooms --count 6 --prefix T

  # Add an overflow room
  python -m scripts.seed_rooms --add-room R13
"""

from __future__ import annotations

import argparse
import logging
import sys

from triage_board.core.config import get_settings
from triage_board.core.database import SessionLocal
from triage_board.core.result import Err
from triage_board.services.room_service import add_room
from triage_board.services.seed_service import seed_rooms
from triage_board.store.sql_store import SqlStore

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Triage board room setup")
    p.add_argument("--seed-rooms", action="store_true", help="Create default rooms if none exist")
    p.add_argument("--count", type=int, default=None, help="Default: env ROOM_COUNT or 12")
    p.add_argument("--prefix", type=str, default=None, help="Default: env ROOM_PREFIX or 'R'")
    p.add_argument("--add-room", type=str, default=None, help="Room number to add")
    return p.parse_args()


def main() -> None:
    args = parse_args()

    if not args.seed_rooms and not args.add_room:
        print("Nothing to do. Use --seed-rooms and/or --add-room.")
        sys.exit(1)

    settings = get_settings()
    count = args.count if args.count is not None else settings.room_count
    prefix = args.prefix or settings.room_prefix

    db = SessionLocal()
    try:
        store = SqlStore(db)

        if args.seed_rooms:
            created = seed_rooms(store, count=count, prefix=prefix)
            print(f"rooms seeded: {created}" if created else "rooms already present")

        if args.add_room:
            result = add_room(store, args.add_room)
            if isinstance(result, Err):
                print(f"room not added: {result.message}")
            else:
                print(f"room added: {result.value.room_number}")

    except Exception:
        db.rollback()
        logger.exception("Room setup failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
