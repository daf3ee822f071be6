from datetime import time
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "local"
    api_v1_prefix: str = "/api/v1"

    # Database
    database_url: str = "sqlite:///./triage_board.db"
    # Alembic owns the schema outside local SQLite runs
    create_tables_on_startup: bool = True

    # Redis (statistics cache + change fan-out)
    redis_url: str | None = None

    # Scheduling. Slots are laid end to end from clinic_open_time; keep
    # daily_capacity * (consult_minutes + buffer_minutes) within the time left
    # before midnight, or the late slots wrap to the early hours of the same date.
    daily_capacity: int = Field(default=50, ge=1)
    consult_minutes: int = Field(default=25, ge=1)
    buffer_minutes: int = Field(default=5, ge=0)
    clinic_open_time: time = time(9, 0)
    max_schedule_days: int = Field(default=365, ge=1)
    enforce_hard_capacity: bool = False

    # Tokens: "per_date" scopes the series to the appointment date, "global" to all waiting
    token_series: Literal["per_date", "global"] = "per_date"

    # Rooms seeded at bootstrap (R1..R12)
    room_count: int = Field(default=12, ge=0)
    room_prefix: str = "R"
    seed_rooms_on_startup: bool = True

    # Dashboard
    long_wait_minutes: int = 60
    statistics_cache_ttl: int = 60

    # Audit
    audit_default_actor: str = "System"

    @property
    def slot_step_minutes(self) -> int:
        return self.consult_minutes + self.buffer_minutes

    @property
    def slots_fit_clinic_day(self) -> bool:
        """True when the last slot of a full day still ends before midnight."""
        open_minutes = self.clinic_open_time.hour * 60 + self.clinic_open_time.minute
        last_end = (
            open_minutes
            + (self.daily_capacity - 1) * self.slot_step_minutes
            + self.consult_minutes
        )
        return last_end <= 24 * 60

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance so the .env is parsed once.
    """
    return Settings()
