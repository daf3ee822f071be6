# triage_board/store/base.py
"""
Storage contract consumed by the triage services.

Collections: "patients", "rooms", "audit_logs", "token_counters".
Filters are equality predicates ({field: value}, None matches NULL);
order_by is a sequence of (field, "asc" | "desc") pairs.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Callable, Mapping, Sequence

Filters = Mapping[str, Any]
OrderBy = Sequence[tuple[str, str]]
OnChange = Callable[[list[Any]], None]


class Store(ABC):
    @abstractmethod
    def create(self, collection: str, values: Mapping[str, Any]) -> Any:
        """Insert a record and return it with its store-assigned fields populated."""

    @abstractmethod
    def get(self, collection: str, record_id: Any) -> Any | None:
        """Return the record or None when the ID does not resolve."""

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Filters | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        ...

    @abstractmethod
    def count(self, collection: str, filters: Filters | None = None) -> int:
        ...

    @abstractmethod
    def update(self, collection: str, record_id: Any, values: Mapping[str, Any]) -> bool:
        """Unconditional partial update. Returns False when no record matched."""

    @abstractmethod
    def update_where(
        self,
        collection: str,
        record_id: Any,
        expected: Filters,
        values: Mapping[str, Any],
    ) -> bool:
        """
        Compare-and-swap: apply values only if every field in ``expected`` still
        holds its expected value. Returns whether the write was applied.
        """

    @abstractmethod
    def delete(self, collection: str, record_id: Any) -> bool:
        ...

    @abstractmethod
    def next_sequence(self, key: str) -> int:
        """Atomically increment the named counter and return the new value (first call -> 1)."""

    @abstractmethod
    def lock_sequence(self, key: str) -> None:
        """Hold a row lock on the named counter until the current transaction ends."""

    @abstractmethod
    def savepoint(self) -> AbstractContextManager:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        filters: Filters | None,
        order_by: OrderBy | None,
        on_change: OnChange,
    ):
        """
        Push the full current result set to ``on_change`` now and after every
        committed change to ``collection``. Returns a Subscription handle.
        """
