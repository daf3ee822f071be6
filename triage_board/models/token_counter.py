# triage_board/models/token_counter.py
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from triage_board.models.base import Base
from triage_board.utils.datetime_utils import utc_now


class TokenCounter(Base):
    """
    Monotonic sequence keyed by series, e.g. "critical:2026-10-18" or "urgent:all".
    Incremented with a single UPDATE so concurrent registrations never share a value.
    Also used as the lock row for hard capacity checks ("capacity:<date>").
    """

    __tablename__ = "token_counters"

    series_key: Mapped[str] = mapped_column(String(100), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )
