# triage_board/store/sql_store.py
"""
SQLAlchemy-backed Store.

One SqlStore wraps one Session (one unit of work). Writes are flushed
immediately; nothing is visible to other sessions until commit(). After a
successful commit the touched collections are announced on the ChangeFeed.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from triage_board.models import AuditLog, Patient, Room, TokenCounter
from triage_board.store.base import Filters, OnChange, OrderBy, Store
from triage_board.store.changes import ChangeFeed, Subscription

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "patients": Patient,
    "rooms": Room,
    "audit_logs": AuditLog,
    "token_counters": TokenCounter,
}


def _model(collection: str):
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


def _pk(model):
    return model.__mapper__.primary_key[0]


def _conditions(model, filters: Filters | None) -> list:
    conditions = []
    for field, value in (filters or {}).items():
        column = getattr(model, field)
        conditions.append(column.is_(None) if value is None else column == value)
    return conditions


class SqlStore(Store):
    def __init__(self, db: Session, feed: ChangeFeed | None = None) -> None:
        self.db = db
        self.feed = feed
        self._touched: set[str] = set()

    # -----------------------------
    # Reads
    # -----------------------------
    def get(self, collection: str, record_id: Any) -> Any | None:
        return self.db.get(_model(collection), record_id)

    def query(
        self,
        collection: str,
        filters: Filters | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        model = _model(collection)
        stmt = select(model).where(*_conditions(model, filters))
        for field, direction in order_by or []:
            column = getattr(model, field)
            stmt = stmt.order_by(column.desc() if direction == "desc" else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.scalars(stmt).all())

    def count(self, collection: str, filters: Filters | None = None) -> int:
        model = _model(collection)
        stmt = select(func.count()).select_from(model).where(*_conditions(model, filters))
        return self.db.scalar(stmt) or 0

    # -----------------------------
    # Writes
    # -----------------------------
    def create(self, collection: str, values: Mapping[str, Any]) -> Any:
        record = _model(collection)(**values)
        self.db.add(record)
        self.db.flush()
        self._touched.add(collection)
        return record

    def update(self, collection: str, record_id: Any, values: Mapping[str, Any]) -> bool:
        return self.update_where(collection, record_id, {}, values)

    def update_where(
        self,
        collection: str,
        record_id: Any,
        expected: Filters,
        values: Mapping[str, Any],
    ) -> bool:
        model = _model(collection)
        stmt = (
            update(model)
            .where(_pk(model) == record_id, *_conditions(model, expected))
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        applied = self.db.execute(stmt).rowcount > 0
        if applied:
            self._touched.add(collection)
        return applied

    def delete(self, collection: str, record_id: Any) -> bool:
        model = _model(collection)
        stmt = (
            delete(model)
            .where(_pk(model) == record_id)
            .execution_options(synchronize_session="fetch")
        )
        deleted = self.db.execute(stmt).rowcount > 0
        if deleted:
            self._touched.add(collection)
        return deleted

    # -----------------------------
    # Counters
    # -----------------------------
    def _ensure_counter(self, key: str) -> bool:
        """Insert the counter row at 0 if missing. Returns True when this call created it."""
        if self.db.get(TokenCounter, key) is not None:
            return False
        try:
            with self.db.begin_nested():
                self.db.add(TokenCounter(series_key=key, last_value=0))
                self.db.flush()
            return True
        except IntegrityError:
            # Another session created it first
            return False

    def next_sequence(self, key: str) -> int:
        self._ensure_counter(key)
        stmt = (
            update(TokenCounter)
            .where(TokenCounter.series_key == key)
            .values(last_value=TokenCounter.last_value + 1)
            .returning(TokenCounter.last_value)
            .execution_options(synchronize_session=False)
        )
        value = self.db.execute(stmt).scalar_one()
        self._touched.add("token_counters")
        return value

    def lock_sequence(self, key: str) -> None:
        self._ensure_counter(key)
        self.db.execute(
            select(TokenCounter).where(TokenCounter.series_key == key).with_for_update()
        )

    # -----------------------------
    # Transactions
    # -----------------------------
    @contextmanager
    def savepoint(self) -> Iterator[None]:
        try:
            with self.db.begin_nested():
                yield
        except Exception:
            # Values synced into loaded objects by bulk updates survive a savepoint rollback
            self.db.expire_all()
            raise

    def commit(self) -> None:
        self.db.commit()
        touched, self._touched = self._touched, set()
        if self.feed is not None:
            for collection in sorted(touched):
                self.feed.publish(collection)

    def rollback(self) -> None:
        self.db.rollback()
        self._touched.clear()

    # -----------------------------
    # Live queries
    # -----------------------------
    def subscribe(
        self,
        collection: str,
        filters: Filters | None,
        order_by: OrderBy | None,
        on_change: OnChange,
    ) -> Subscription:
        if self.feed is None:
            raise RuntimeError("Store was created without a change feed")
        _model(collection)
        return self.feed.subscribe(collection, filters, order_by, on_change)
