# miroku/database/alembic/env.py
from __future__ import annotations

from logging.config import fileConfig
from typing import Any, Dict

from alembic import context
from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection

from miroku.common.settings import get_settings
from miroku.database.models import Base  # registers every table on Base.metadata

cfg = get_settings()
alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

target_metadata = Base.metadata
APP_SCHEMA = cfg.db_schema  # None on SQLite / public


def _database_url() -> str:
    """`alembic -x url=...` wins over settings (DATABASE_URL or DB__*)."""
    return context.get_x_argument(as_dictionary=True).get("url") or cfg.database_url


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    # autogenerate only looks at our own tables
    if type_ != "table":
        return True
    schema = getattr(obj, "schema", None)
    return schema is None or schema == APP_SCHEMA


def _context_options() -> Dict[str, Any]:
    opts: Dict[str, Any] = {
        "target_metadata": target_metadata,
        "include_object": _include_object,
        "compare_type": True,
    }
    if APP_SCHEMA:
        opts["include_schemas"] = True
        opts["version_table_schema"] = cfg.alembic_version_table_schema
    return opts


def _prepare_postgres(conn: Connection) -> None:
    if conn.dialect.name != "postgresql" or not APP_SCHEMA:
        return
    conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{APP_SCHEMA}"'))
    conn.execute(text(f'SET search_path TO "{APP_SCHEMA}", public'))


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_context_options(),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    with engine.connect() as connection:
        _prepare_postgres(connection)
        context.configure(
            connection=connection,
            render_as_batch=connection.dialect.name == "sqlite",
            **_context_options(),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
