# triage_board/store/changes.py
"""
Live query subscriptions.

A ChangeFeed is owned by whoever wires the application together (the FastAPI
app keeps one on ``app.state``). Each subscribe() call hands back a
Subscription handle; the caller releases it with close() or by using it as a
context manager.
"""

import logging
import threading
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from triage_board.core.redis import publish_change
from triage_board.store.base import Filters, OnChange, OrderBy

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(
        self,
        feed: "ChangeFeed",
        collection: str,
        filters: Filters | None,
        order_by: OrderBy | None,
        on_change: OnChange,
    ) -> None:
        self.feed = feed
        self.collection = collection
        self.filters = dict(filters or {})
        self.order_by = list(order_by or [])
        self.on_change = on_change
        self.closed = False

    def refresh(self) -> None:
        """Re-run the query on a fresh session and push the full result set."""
        if self.closed:
            return

        from triage_board.store.sql_store import SqlStore

        try:
            with self.feed.session_factory() as db:
                records: list[Any] = SqlStore(db).query(
                    self.collection, self.filters, self.order_by
                )
        except SQLAlchemyError:
            logger.exception(f"Live query on '{self.collection}' failed")
            records = []

        self.on_change(records)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.feed.remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeFeed:
    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        collection: str,
        filters: Filters | None,
        order_by: OrderBy | None,
        on_change: OnChange,
    ) -> Subscription:
        sub = Subscription(self, collection, filters, order_by, on_change)
        with self._lock:
            self._subscriptions.append(sub)
        sub.refresh()
        return sub

    def remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def refresh_collection(self, collection: str) -> None:
        """Re-run local subscriptions on ``collection`` without announcing anything."""
        with self._lock:
            targets = [s for s in self._subscriptions if s.collection == collection]

        for sub in targets:
            sub.refresh()

    def publish(self, collection: str) -> None:
        """Called after a commit that touched ``collection``."""
        self.refresh_collection(collection)
        publish_change(collection)
