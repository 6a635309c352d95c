"""
Migration environment for the bookings schema.

The URL is DATABASE_URL_SYNC from application settings; alembic.ini only
carries logging. `alembic upgrade head --sql` renders the DDL offline.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from app.core.config import get_settings
from app.db.base import Base
from app.models import Booking  # noqa: F401  registers the bookings table

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

DATABASE_URL = config.get_main_option("sqlalchemy.url") or get_settings().DATABASE_URL_SYNC


def _configure(**options) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **options)
    with context.begin_transaction():
        context.run_migrations()


def migrate_offline() -> None:
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})


def migrate_online() -> None:
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            # SQLite cannot ALTER constraints in place
            _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")
    finally:
        engine.dispose()


if context.is_offline_mode():
    migrate_offline()
else:
    migrate_online()
