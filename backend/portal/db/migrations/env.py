"""
Alembic migration environment — reads the database URL from portal settings.

Uses a SYNC engine for migrations (psycopg2) even though the portal
uses async (asyncpg) at runtime.  An explicit `sqlalchemy.url` in
alembic.ini (or `-x url=...`) wins over settings.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from portal.core.config import settings
from portal.db.models import Base  # noqa: F401 — imports all models via __init__.py

config = context.config

sync_url = (
    context.get_x_argument(as_dictionary=True).get("url")
    or config.get_main_option("sqlalchemy.url")
    or settings.DATABASE_URL_SYNC
)
config.set_main_option("sqlalchemy.url", sync_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=sync_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live database with a sync engine."""
    connectable = create_engine(sync_url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
