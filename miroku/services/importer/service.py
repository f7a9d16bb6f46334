# miroku/services/importer/service.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from miroku.common.logging import get_logger
from miroku.common.settings import get_settings
from miroku.common.strings.splitters import normalize_name
from miroku.database.core.transaction import atomic
from miroku.database.models.movie import Movie as DBMovie
from miroku.database.models.person import Credit as DBCredit
from miroku.database.repos.credit_repo import SqlAlchemyCreditRepo
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.people_repo import SqlAlchemyPeopleRepo
from miroku.domain.enums import CreditRole, RefreshField
from miroku.domain.errors import Conflict, InvalidArgument
from miroku.domain.policies.credit_selection import SelectedCredits, select_credits
from miroku.domain.ports.catalog import CatalogPort

logger = get_logger(__name__)


class ImportService:
    """
    Brings movies into an owner's collection, either from the catalog
    (quick-add) or typed in by hand, and attaches credits.

    Catalog people are matched by catalog id only; a stored name is kept
    as-is on import (renames happen on refresh). Hand-typed people are
    matched by exact display name among active persons.
    """

    def __init__(self, db: Session, catalog: Optional[CatalogPort] = None) -> None:
        self.db = db
        self.catalog = catalog
        self.cfg = get_settings()
        self.movies = SqlAlchemyMovieRepo(db)
        self.people = SqlAlchemyPeopleRepo(db)
        self.credits = SqlAlchemyCreditRepo(db)

    def _require_catalog(self) -> CatalogPort:
        if self.catalog is None:
            raise InvalidArgument("No catalog configured")
        return self.catalog

    def _save_credits(self, owner_id: UUID, movie: DBMovie, selected: SelectedCredits) -> int:
        linked = 0
        for role in CreditRole:
            for idx, p in enumerate(selected.for_role(role)):
                person = self.people.find_or_create_external(
                    owner_id, external_id=p.external_id, display_name=p.name
                )
                try:
                    self.credits.link(
                        movie_id=movie.id,
                        person_id=person.id,
                        role=role,
                        cast_order=(p.order if p.order is not None else idx),
                    )
                except Conflict:
                    # same person listed twice for a role
                    continue
                linked += 1
        return linked

    def import_movie(self, owner_id: UUID, external_movie_id: int) -> DBMovie:
        if self.movies.find_by_external_ref(owner_id, external_movie_id):
            raise Conflict("already added")
        details, credits = self._require_catalog().movie_with_display_names(external_movie_id)
        selected = select_credits(
            credits,
            writer_limit=self.cfg.catalog.writer_limit,
            cast_limit=self.cfg.catalog.cast_limit,
        )
        with atomic(self.db):
            movie = self.movies.create(
                owner_id,
                external_ref=external_movie_id,
                snapshot={
                    RefreshField.title: details.title,
                    RefreshField.poster_ref: details.poster_ref,
                    RefreshField.release_date: details.release_date,
                    RefreshField.production_countries: details.country_names(),
                },
                data_origin="catalog",
            )
            linked = self._save_credits(owner_id, movie, selected)
        logger.info("imported movie %s (external %s) with %d credits", movie.id, external_movie_id, linked)
        return movie

    def create_manual(
        self,
        owner_id: UUID,
        *,
        title: str,
        release_date: Optional[str] = None,
        poster_ref: Optional[str] = None,
        production_countries: Optional[List[str]] = None,
        director_name: Optional[str] = None,
    ) -> DBMovie:
        title = normalize_name(title)
        if not title:
            raise InvalidArgument("title is required")
        with atomic(self.db):
            movie = self.movies.create(
                owner_id,
                overrides={
                    "title": title,
                    "release_date": release_date or None,
                    "poster_ref": poster_ref or None,
                    "production_countries": production_countries or None,
                },
                data_origin="manual",
            )
            if normalize_name(director_name):
                self.add_credit_by_name(owner_id, movie.id, CreditRole.director, director_name)
        return movie

    def add_credit_by_name(self, owner_id: UUID, movie_id: UUID, role: CreditRole, name: str) -> DBCredit:
        """Manual credit add; cast is appended after the current cast."""
        movie = self.movies.get_or_raise(owner_id, movie_id)
        person = self.people.find_by_display_name(owner_id, name)
        if person is None:
            person = self.people.create(owner_id, display_name=name)
        cast_order = self.credits.count_for_movie(movie.id, CreditRole.cast) if role is CreditRole.cast else None
        return self.credits.link(movie_id=movie.id, person_id=person.id, role=role, cast_order=cast_order)

    def add_credit_for_person(
        self, owner_id: UUID, movie_id: UUID, role: CreditRole, person_id: UUID
    ) -> DBCredit:
        movie = self.movies.get_or_raise(owner_id, movie_id)
        person = self.people.get_or_raise(owner_id, person_id)
        cast_order = self.credits.count_for_movie(movie.id, CreditRole.cast) if role is CreditRole.cast else None
        return self.credits.link(movie_id=movie.id, person_id=person.id, role=role, cast_order=cast_order)

    def fetch_missing_credits(self, owner_id: UUID, movie_id: UUID) -> Optional[bool]:
        """
        Fill credits for a catalog movie that has none yet.

        Returns None when the movie already has credits (nothing to do),
        False when the catalog lists nobody, True when credits were stored.
        """
        movie = self.movies.get_or_raise(owner_id, movie_id)
        if movie.external_ref is None:
            raise InvalidArgument("Movie has no catalog reference")
        if self.credits.count_for_movie(movie.id):
            return None
        details, credits = self._require_catalog().movie_with_display_names(movie.external_ref)
        selected = select_credits(
            credits,
            writer_limit=self.cfg.catalog.writer_limit,
            cast_limit=self.cfg.catalog.cast_limit,
        )
        with atomic(self.db):
            if details.production_countries:
                self.movies.set_snapshot(movie, RefreshField.production_countries, details.country_names())
            if selected.is_empty():
                return False
            self._save_credits(owner_id, movie, selected)
        return True
