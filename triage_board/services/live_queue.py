# triage_board/services/live_queue.py
from dataclasses import dataclass
from typing import Any, Callable

from triage_board.models.patient import PatientStatus
from triage_board.schemas.statistics import Statistics
from triage_board.services import queue_orderer
from triage_board.services.statistics_service import compute_statistics
from triage_board.store.base import Store


@dataclass(frozen=True)
class QueueSnapshot:
    patients: list[Any]
    rooms: list[Any]
    statistics: Statistics


class LiveQueueView:
    """
    Board view kept current by store subscriptions.

    Usage:
        with LiveQueueView(store, on_update=render) as view:
            ...

    Leaving the block closes both subscriptions.
    """

    def __init__(self, store: Store, on_update: Callable[[QueueSnapshot], None]) -> None:
        self.store = store
        self.on_update = on_update
        self._patients: list[Any] | None = None
        self._rooms: list[Any] | None = None
        self._subscriptions: list[Any] = []
        self.latest: QueueSnapshot | None = None

    def open(self) -> "LiveQueueView":
        self._subscriptions = [
            self.store.subscribe(
                "patients",
                {"status": PatientStatus.WAITING},
                [("check_in_time", "asc")],
                self._on_patients,
            ),
            self.store.subscribe("rooms", None, [("room_number", "asc")], self._on_rooms),
        ]
        return self

    def close(self) -> None:
        for sub in self._subscriptions:
            sub.close()
        self._subscriptions = []

    def __enter__(self) -> "LiveQueueView":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _on_patients(self, patients: list[Any]) -> None:
        self._patients = patients
        self._emit()

    def _on_rooms(self, rooms: list[Any]) -> None:
        self._rooms = rooms
        self._emit()

    def _emit(self) -> None:
        # Wait for the first push of both collections
        if self._patients is None or self._rooms is None:
            return
        self.latest = QueueSnapshot(
            patients=queue_orderer.order(self._patients),
            rooms=list(self._rooms),
            statistics=compute_statistics(self._patients, self._rooms),
        )
        self.on_update(self.latest)
