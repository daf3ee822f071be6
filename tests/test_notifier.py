from uuid import uuid4

from sqlalchemy.exc import OperationalError

from triage_board.models.audit_log import AuditAction
from triage_board.services.notifier import AuditNotifier, list_audit_logs
from triage_board.services.triage_service import TriageService
from triage_board.store.sql_store import SqlStore


class FailingAuditStore(SqlStore):
    def create(self, collection, values):
        if collection == "audit_logs":
            raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk I/O error"))
        return super().create(collection, values)


def test_log_writes_entry_with_default_actor(store):
    subject = uuid4()

    entry = AuditNotifier(store).log(AuditAction.DISCHARGED, subject, "Jane")

    assert entry is not None
    logged = list_audit_logs(store)
    assert len(logged) == 1
    assert logged[0].performed_by == "System"
    assert logged[0].details == "discharged: Jane"
    assert logged[0].patient_id == subject


def test_log_failure_is_swallowed(db, feed, caplog):
    store = FailingAuditStore(db, feed=feed)

    assert AuditNotifier(store).log(AuditAction.REGISTERED, uuid4(), "Jane") is None
    assert "AUDIT LOG ERROR" in caplog.text


def test_audit_failure_never_fails_registration(db, feed, settings, payload, today):
    store = FailingAuditStore(db, feed=feed)
    service = TriageService(store, settings=settings)

    result = service.register(payload(), today=today)

    assert result.ok
    assert store.count("patients") == 1
    assert store.count("audit_logs") == 0


def test_list_audit_logs_respects_limit(store):
    notifier = AuditNotifier(store, default_actor="Desk")
    for n in range(5):
        notifier.log(AuditAction.REGISTERED, uuid4(), f"P{n}")

    assert len(list_audit_logs(store, limit=3)) == 3
