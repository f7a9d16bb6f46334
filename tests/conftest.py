# tests/conftest.py
from __future__ import annotations
import os
import uuid

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

# Settings (and Base.metadata's schema) are read at import time: pick the
# backend before anything from miroku is imported.
USE_TESTCONTAINERS = os.getenv("USE_TESTCONTAINERS", "").strip().lower() in {"1", "true", "yes", "on"}
if not USE_TESTCONTAINERS:
    os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("APP_ENV", "test")

from miroku.common.settings import get_settings  # noqa: E402
from miroku.database.core.main import build_engine  # noqa: E402
from miroku.database.models import Base  # noqa: E402  <-- imports models/metadata
from miroku.domain.entities.catalog import (  # noqa: E402
    CatalogCastMember,
    CatalogCountry,
    CatalogCredits,
    CatalogCrewMember,
    CatalogMovie,
    CatalogMovieDetails,
    CatalogSearchPage,
)
from miroku.domain.errors import UpstreamUnavailable  # noqa: E402


def _prepare_schema(engine: Engine, schema: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f'create schema if not exists "{schema}"'))


@pytest.fixture(scope="session")
def db_engine() -> Engine:
    if USE_TESTCONTAINERS:
        from testcontainers.postgres import PostgresContainer

        cfg = get_settings()
        with PostgresContainer(cfg.test_db_image) as pg:
            # Force psycopg (v3) driver in the URL returned by testcontainers
            url = pg.get_connection_url().replace("psycopg2", "psycopg")
            engine = build_engine(url)
            if cfg.db_schema:
                _prepare_schema(engine, cfg.db_schema)
            Base.metadata.create_all(bind=engine)
            try:
                yield engine
            finally:
                Base.metadata.drop_all(bind=engine)
                engine.dispose()
        return

    engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


class FakeCatalog:
    """In-memory CatalogPort: register movies with add(), make ids fail with fail()."""

    def __init__(self) -> None:
        self.movies: dict[int, tuple[CatalogMovieDetails, CatalogCredits]] = {}
        self.failing: set[int] = set()
        self.calls: list[int] = []

    def add(
        self,
        external_id: int,
        title: str,
        *,
        directors=(),
        writers=(),
        cast=(),
        countries=(),
        release_date: str | None = None,
        poster_ref: str | None = None,
    ) -> None:
        """People are (person_id, name) pairs; cast order follows list order."""
        details = CatalogMovieDetails(
            external_id=external_id,
            title=title,
            poster_ref=poster_ref,
            release_date=release_date,
            production_countries=tuple(CatalogCountry(code=n[:2].upper(), name=n) for n in countries),
        )
        crew = [CatalogCrewMember(external_person_id=pid, name=n, job="Director") for pid, n in directors]
        crew += [CatalogCrewMember(external_person_id=pid, name=n, job="Screenplay") for pid, n in writers]
        credits = CatalogCredits(
            external_id=external_id,
            cast=tuple(CatalogCastMember(external_person_id=pid, name=n, order=i) for i, (pid, n) in enumerate(cast)),
            crew=tuple(crew),
        )
        self.movies[external_id] = (details, credits)

    def fail(self, external_id: int) -> None:
        self.failing.add(external_id)

    def _lookup(self, external_id: int):
        self.calls.append(external_id)
        if external_id in self.failing or external_id not in self.movies:
            raise UpstreamUnavailable(f"Catalog error 404 for movie/{external_id}")
        return self.movies[external_id]

    def search(self, query: str, page: int = 1):
        hits = tuple(
            CatalogMovie(external_id=d.external_id, title=d.title, release_date=d.release_date)
            for d, _ in self.movies.values()
            if query.lower() in d.title.lower()
        )
        return CatalogSearchPage(results=hits, page=page, total_pages=1, total_results=len(hits))

    def movie_details(self, external_movie_id: int):
        return self._lookup(external_movie_id)[0]

    def movie_credits(self, external_movie_id: int):
        return self._lookup(external_movie_id)[1]

    def person_details(self, external_person_id: int):
        raise NotImplementedError

    def movie_with_display_names(self, external_movie_id: int):
        return self._lookup(external_movie_id)


@pytest.fixture()
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()
