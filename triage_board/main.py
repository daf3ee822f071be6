import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from triage_board.api.v1.router import api_router
from triage_board.core.config import get_settings
from triage_board.core.database import SessionLocal, engine, session_scope
from triage_board.core.redis import listen_for_changes
from triage_board.models import Base
from triage_board.services.seed_service import seed_rooms
from triage_board.store.changes import ChangeFeed
from triage_board.store.sql_store import SqlStore

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Bootstrap: schema (local runs), change feed, default rooms.
    """
    if settings.create_tables_on_startup:
        Base.metadata.create_all(bind=engine)

    app.state.change_feed = ChangeFeed(SessionLocal)

    if settings.seed_rooms_on_startup:
        with session_scope() as db:
            seed_rooms(
                SqlStore(db, feed=app.state.change_feed),
                count=settings.room_count,
                prefix=settings.room_prefix,
            )

    # Changes committed by other workers arrive over Redis
    listener = listen_for_changes(app.state.change_feed.refresh_collection)

    if not settings.slots_fit_clinic_day:
        logger.warning(
            f"{settings.daily_capacity} slots of {settings.slot_step_minutes} minutes run past "
            "midnight; late slots wrap to the early hours"
        )

    logger.info(f"Triage board started ({settings.app_env})")
    yield

    logger.info(f"Shutting down with {app.state.change_feed.active_count} live subscriptions")
    if listener is not None:
        listener.stop()


app = FastAPI(
    title="Triage Board",
    lifespan=lifespan,
)


@app.get("/health", tags=["health"])
async def root_health() -> dict:
    """
    Global health check endpoint.
    """
    return {"status": "ok"}


# Mount versioned API router
app.include_router(api_router, prefix=settings.api_v1_prefix)
