"""
Redis helpers for the triage board.

Two optional uses:
- a short-lived copy of the dashboard statistics
- a pub/sub channel announcing committed changes to other worker processes

Without REDIS_URL, or when the server cannot be reached, every helper is a
no-op and callers read straight from the database (degraded mode).
"""

import json
import logging
import uuid
from functools import lru_cache
from typing import Any, Callable, Optional

import redis

from triage_board.core.config import get_settings

logger = logging.getLogger(__name__)

CHANGES_CHANNEL = "triage:changes"
# Tags outgoing change messages so a worker can skip its own
PROCESS_ORIGIN = uuid.uuid4().hex


@lru_cache
def get_redis_client() -> Optional[redis.Redis]:
    """
    Connected client, or None in degraded mode.
    Resolved once per process.
    """
    redis_url = get_settings().redis_url
    if not redis_url:
        logger.warning("REDIS_URL not set. Statistics cache and change fan-out are disabled.")
        return None

    client = redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis unreachable: {e}. Running in degraded mode (no cache, no fan-out).")
        return None

    logger.info("Redis connection established.")
    return client


def _run(operation: str, target: str, command: Callable[[redis.Redis], Any], fallback: Any) -> Any:
    client = get_redis_client()
    if client is None:
        return fallback
    try:
        return command(client)
    except redis.RedisError as e:
        logger.warning(f"Redis {operation} failed for '{target}': {e}")
        return fallback


def cache_get(key: str) -> Optional[str]:
    """Cached value, or None on a miss or without Redis."""
    return _run("GET", key, lambda client: client.get(key), None)


def cache_set(key: str, value: str, ttl: int = 60) -> bool:
    return _run("SETEX", key, lambda client: bool(client.setex(key, ttl, value)), False)


def cache_delete(key: str) -> bool:
    return _run("DEL", key, lambda client: client.delete(key) >= 0, False)


def publish_change(collection: str) -> bool:
    """Tell other processes that ``collection`` changed. False when nothing was sent."""
    message = json.dumps({"origin": PROCESS_ORIGIN, "collection": collection})
    return _run(
        "PUBLISH",
        CHANGES_CHANNEL,
        lambda client: client.publish(CHANGES_CHANNEL, message) >= 0,
        False,
    )


def remote_collection(raw: Any) -> Optional[str]:
    """
    Collection named by a change message from another process.
    None for this process's own messages and for anything unreadable.
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed change message: {raw!r}")
        return None

    if not isinstance(payload, dict) or payload.get("origin") == PROCESS_ORIGIN:
        return None
    collection = payload.get("collection")
    return collection if isinstance(collection, str) else None


def listen_for_changes(on_collection: Callable[[str], None]):
    """
    Background listener on ``triage:changes``.

    Calls on_collection for every change committed by another process.
    Returns the worker thread (stop it with ``.stop()``), or None in degraded mode.
    """
    client = get_redis_client()
    if client is None:
        return None

    def handle(message: dict) -> None:
        collection = remote_collection(message.get("data"))
        if collection:
            on_collection(collection)

    def on_error(e: Exception, pubsub, thread) -> None:
        logger.warning(f"Change listener error: {e}")

    try:
        pubsub = client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(**{CHANGES_CHANNEL: handle})
        thread = pubsub.run_in_thread(sleep_time=1.0, daemon=True, exception_handler=on_error)
    except redis.RedisError as e:
        logger.warning(f"Could not subscribe to '{CHANGES_CHANNEL}': {e}. Change fan-out is disabled.")
        return None

    logger.info(f"Listening for changes on '{CHANGES_CHANNEL}'")
    return thread
