"""Alembic environment for the blog service schema.

The database URL comes from ``blog_service.config.settings`` unless one is
passed on the command line (``alembic -x url=sqlite+aiosqlite:///blog.db
upgrade head``).  Online migrations run through the async engine.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from blog_service.config import settings
from blog_service.database import Base

# Registers every table on Base.metadata.
import blog_service.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = context.get_x_argument(as_dictionary=True).get("url", settings.DATABASE_URL)
config.set_main_option("sqlalchemy.url", database_url)

target_metadata = Base.metadata


def _configure_kwargs() -> dict:
    # SQLite cannot ALTER most constraints in place.
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": database_url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout instead of executing it."""
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, **_configure_kwargs())
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_async_engine(database_url, pool_pre_ping=True)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
