# triage_board/dependencies/services.py
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from triage_board.core.config import get_settings
from triage_board.core.database import get_db
from triage_board.services.triage_service import TriageService
from triage_board.store.sql_store import SqlStore


def get_store(request: Request, db: Session = Depends(get_db)) -> SqlStore:
    """
    Store bound to the request's DB session and to the app's change feed,
    so commits made by this request reach live subscribers.
    """
    return SqlStore(db, feed=getattr(request.app.state, "change_feed", None))


def get_triage_service(store: SqlStore = Depends(get_store)) -> TriageService:
    return TriageService(store, settings=get_settings())


def get_actor(x_actor: str | None = Header(default=None)) -> str | None:
    """
    Name recorded on audit entries. Authentication happens upstream;
    the gateway forwards the staff member in X-Actor.
    """
    return x_actor.strip() if x_actor and x_actor.strip() else None
