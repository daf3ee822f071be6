from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from alembic import context

from triage_board.core.config import get_settings
from triage_board.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Patients, rooms, audit logs and token counters
target_metadata = Base.metadata

# DATABASE_URL comes from Settings (.env), never from alembic.ini
database_url = get_settings().database_url
is_sqlite = database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL to stdout (alembic upgrade --sql)."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations against the configured database."""
    engine = create_engine(database_url, future=True, poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite cannot ALTER most columns in place
            render_as_batch=is_sqlite,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
