# miroku/database/core/main.py
from __future__ import annotations

from typing import Iterator, List

from sqlalchemy import MetaData, create_engine, event, Column, Table
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from miroku.common.settings import get_settings

_settings = get_settings()

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

_serviceobject_first = ("id", "date_created", "last_updated", "data_origin", "meta_data")


class Base(DeclarativeBase):
    # Default schema keeps DDL explicit on Postgres; SQLite has none
    metadata = MetaData(
        schema=_settings.db_schema,
        naming_convention=NAMING_CONVENTION,
    )

    @classmethod
    def __table_cls__(cls, *args, **kw):
        """Reorder columns so ServiceObject fields come first."""
        if not args:
            return super().__table_cls__(*args, **kw)

        # Positional args are (name, metadata, *columns_and_constraints)
        name, metadata, *rest = args

        cols: List[Column] = [x for x in rest if isinstance(x, Column)]
        others = [x for x in rest if not isinstance(x, Column)]

        priority = {n: i for i, n in enumerate(_serviceobject_first)}
        original_index = {c: i for i, c in enumerate(cols)}

        cols.sort(key=lambda c: (priority.get(c.name, 10_000), original_index[c]))

        return Table(name, metadata, *(cols + others), **kw)


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """
    Engine factory shared by the app, Alembic and tests.

    Postgres gets the pool settings and a search_path hook for the app schema.
    SQLite (tests, local dev) gets a single shared connection and the pysqlite
    hooks that make SAVEPOINT (Session.begin_nested) behave.
    """
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_conn, _):
            # let SQLAlchemy emit BEGIN itself
            dbapi_conn.isolation_level = None
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return engine

    engine = create_engine(
        url,
        echo=echo,
        pool_size=_settings.db.pool_size,
        max_overflow=_settings.db.max_overflow,
        pool_pre_ping=_settings.db.pool_pre_ping,
        pool_recycle=_settings.db.pool_recycle,
        future=True,
    )

    # Ensure the app schema is first, then public (so extensions remain visible)
    if _settings.db_schema:
        @event.listens_for(engine, "connect")
        def _set_search_path(dbapi_conn, _):
            with dbapi_conn.cursor() as cur:
                cur.execute(f'SET search_path TO "{_settings.db_schema}", public')

    return engine


engine = build_engine(_settings.database_url, echo=_settings.db.echo)

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True, autoflush=False)


def get_session() -> Iterator[Session]:
    """
    Yield a transaction-scoped Session.
    Commits on success, rolls back on error.
    """
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
