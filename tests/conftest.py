from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from triage_board.core.config import Settings
from triage_board.core.database import enable_sqlite_savepoints, get_db
from triage_board.models import Base
from triage_board.schemas.patient import PatientRegister, Vitals
from triage_board.services.seed_service import seed_rooms
from triage_board.services.triage_service import TriageService
from triage_board.store.changes import ChangeFeed
from triage_board.store.sql_store import SqlStore

TODAY = date(2026, 10, 18)


@pytest.fixture
def engine(tmp_path):
    # File-backed so live subscriptions can open their own connections
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'triage_test.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def feed(session_factory):
    return ChangeFeed(session_factory)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db, feed):
    return SqlStore(db, feed=feed)


@pytest.fixture
def settings():
    return Settings(
        daily_capacity=50,
        consult_minutes=25,
        buffer_minutes=5,
        redis_url=None,
        audit_default_actor="System",
    )


@pytest.fixture
def service(store, settings):
    return TriageService(store, settings=settings)


@pytest.fixture
def rooms(store):
    seed_rooms(store, count=3)
    room_ids = {r.room_number: r.id for r in store.query("rooms")}
    # End the read transaction so other connections can write
    store.commit()
    return room_ids


@pytest.fixture
def client(session_factory, feed):
    from triage_board.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.change_feed = feed
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.change_feed = None


def make_payload(name="Jane", contact="555-1", symptoms=(), pulse=80, temperature=98.6, **extra) -> PatientRegister:
    return PatientRegister(
        name=name,
        age=extra.pop("age", 34),
        contact=contact,
        complaint=extra.pop("complaint", "Walk-in"),
        symptoms=set(symptoms),
        vitals=Vitals(blood_pressure="120/80", pulse=pulse, temperature=temperature),
        **extra,
    )


@pytest.fixture
def payload():
    return make_payload


@pytest.fixture
def register(service):
    """Register and return the created patient, failing the test on Err."""

    def _register(name="Jane", contact="555-1", symptoms=(), **kwargs):
        result = service.register(make_payload(name, contact, symptoms, **kwargs), today=TODAY)
        assert result.ok, result
        return result.value.patient

    return _register


@pytest.fixture
def today():
    return TODAY
