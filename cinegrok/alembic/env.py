"""
Alembic environment for the CineGrok schema.
The database URL always comes from Settings (DATABASE_URL / .env), never alembic.ini.
"""
import sys
from logging.config import fileConfig
from pathlib import Path

# alembic/ lives in cinegrok/; the repo root must be importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from alembic import context
from sqlalchemy import create_engine, pool

from cinegrok.app.core.config import settings
from cinegrok.app.db.base import Base

# Registers users, filmmakers, profile_drafts, interested_profiles, profile_events
import cinegrok.app.models  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a connection."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = config.get_main_option("sqlalchemy.url")
    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        # SQLite cannot ALTER columns in place; batch mode rebuilds the table
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=_is_sqlite(url),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
