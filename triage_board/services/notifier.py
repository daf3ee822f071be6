# triage_board/services/notifier.py
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from triage_board.models.audit_log import AuditAction, AuditLog
from triage_board.store.base import Store

logger = logging.getLogger(__name__)


class AuditNotifier:
    """
    Fire-and-forget audit trail. Logging must never break the main flow:
    every failure is logged and swallowed.
    """

    def __init__(self, store: Store, default_actor: str = "System") -> None:
        self.store = store
        self.default_actor = default_actor

    def log(
        self,
        action: AuditAction,
        subject_id: Any,
        subject_name: Optional[str],
        detail: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Optional[AuditLog]:
        try:
            with self.store.savepoint():
                entry = self.store.create(
                    "audit_logs",
                    {
                        "action": action.value,
                        "patient_id": subject_id,
                        "patient_name": subject_name,
                        "performed_by": actor or self.default_actor,
                        "details": detail or f"{action.value}: {subject_name}",
                    },
                )
            self.store.commit()
            return entry
        except SQLAlchemyError as e:
            logger.warning(f"[AUDIT LOG ERROR] Failed to log '{action.value}' for {subject_id}: {e}", exc_info=True)
            try:
                self.store.rollback()
            except SQLAlchemyError:
                logger.warning("[AUDIT LOG ERROR] Rollback after failed audit write failed", exc_info=True)
            return None


def list_audit_logs(store: Store, limit: int = 50) -> list[AuditLog]:
    """Most recent entries first."""
    return store.query("audit_logs", order_by=[("timestamp", "desc")], limit=limit)
