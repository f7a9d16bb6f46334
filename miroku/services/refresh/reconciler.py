# miroku/services/refresh/reconciler.py
from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from miroku.common.iter import unique_by
from miroku.common.logging import get_logger
from miroku.common.settings import get_settings
from miroku.common.strings.splitters import normalize_name
from miroku.database.core.transaction import atomic
from miroku.database.models.movie import Movie as DBMovie
from miroku.database.repos.credit_repo import SqlAlchemyCreditRepo
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.people_repo import SqlAlchemyPeopleRepo
from miroku.domain.dataclasses.reports import BulkRefreshReport, RefreshApplyReport
from miroku.domain.entities.movie_snapshot import ExternalPersonCredit, MovieSnapshot
from miroku.domain.enums import CreditRole, RefreshField
from miroku.domain.errors import Conflict, InvalidArgument, MirokuError
from miroku.domain.policies.credit_selection import snapshot_from_catalog
from miroku.domain.policies.refresh_diff import RefreshDiff, diff_snapshots
from miroku.domain.ports.catalog import CatalogPort

logger = get_logger(__name__)


def parse_fields(fields: Iterable[str]) -> List[RefreshField]:
    """Validate an operator's field selection; order follows RefreshField."""
    chosen = set()
    for name in fields:
        try:
            chosen.add(RefreshField(name))
        except ValueError:
            raise InvalidArgument(f"Unknown refresh field: {name!r}") from None
    if not chosen:
        raise InvalidArgument("Select at least one field to refresh")
    return [f for f in RefreshField if f in chosen]


class RefreshReconciler:
    """
    Compares a stored movie against a live catalog fetch and writes back the
    fields an operator picked.

    Credit fields are a full replace for that role: existing credits go,
    fetched people are resolved by catalog id (renamed to the fetched name,
    or created), then linked fresh.
    """

    def __init__(self, db: Session, catalog: CatalogPort) -> None:
        self.db = db
        self.catalog = catalog
        self.cfg = get_settings()
        self.movies = SqlAlchemyMovieRepo(db)
        self.people = SqlAlchemyPeopleRepo(db)
        self.credits = SqlAlchemyCreditRepo(db)

    # ---------------------------------------------------------------------
    # read side
    # ---------------------------------------------------------------------
    def current_snapshot(self, owner_id: UUID, movie_id: UUID) -> MovieSnapshot:
        movie = self.movies.get_or_raise(owner_id, movie_id)
        return self._stored(movie)

    def _stored(self, movie: DBMovie) -> MovieSnapshot:
        groups = self.credits.list_for_movie(movie.id)

        def people(role: CreditRole) -> List[ExternalPersonCredit]:
            return [
                ExternalPersonCredit(
                    name=c.person.display_name,
                    external_id=c.person.external_id,
                    order=c.cast_order,
                )
                for c in groups.for_role(role)
            ]

        return MovieSnapshot(
            title=movie.snapshot_title,
            poster_ref=movie.snapshot_poster_ref,
            release_date=movie.snapshot_release_date,
            production_countries=list(movie.snapshot_countries or []),
            directors=people(CreditRole.director),
            writers=people(CreditRole.writer),
            cast=people(CreditRole.cast),
        )

    def _fetch(self, movie: DBMovie) -> MovieSnapshot:
        if movie.external_ref is None:
            raise InvalidArgument("Movie has no catalog reference to refresh from")
        details, credits = self.catalog.movie_with_display_names(movie.external_ref)
        return snapshot_from_catalog(
            details,
            credits,
            writer_limit=self.cfg.catalog.writer_limit,
            cast_limit=self.cfg.catalog.cast_limit,
        )

    def fetch(self, owner_id: UUID, movie_id: UUID) -> MovieSnapshot:
        return self._fetch(self.movies.get_or_raise(owner_id, movie_id))

    def preview(self, owner_id: UUID, movie_id: UUID) -> Tuple[MovieSnapshot, RefreshDiff]:
        movie = self.movies.get_or_raise(owner_id, movie_id)
        incoming = self._fetch(movie)
        return incoming, diff_snapshots(self._stored(movie), incoming)

    # ---------------------------------------------------------------------
    # write side
    # ---------------------------------------------------------------------
    def _replace_role(
        self,
        movie: DBMovie,
        role: CreditRole,
        incoming: List[ExternalPersonCredit],
        rep: RefreshApplyReport,
    ) -> None:
        self.credits.unlink_all(movie.id, role)
        people = unique_by(incoming, key=lambda p: p.external_id if p.external_id is not None else normalize_name(p.name))
        for idx, p in enumerate(people):
            name = normalize_name(p.name)
            person = (
                self.people.resolve_external_id(movie.owner_id, p.external_id)
                if p.external_id is not None
                else self.people.find_by_display_name(movie.owner_id, p.name)
            )
            if person is None:
                person = self.people.create(movie.owner_id, display_name=p.name, external_id=p.external_id)
                rep.persons_created += 1
            elif name and person.display_name != name:
                self.people.rename(movie.owner_id, person.id, name)
                rep.persons_renamed += 1
            try:
                self.credits.link(
                    movie_id=movie.id,
                    person_id=person.id,
                    role=role,
                    cast_order=(p.order if p.order is not None else idx) if role is CreditRole.cast else None,
                )
            except Conflict:
                continue
            rep.credits_linked += 1

    def _apply_field(self, movie: DBMovie, f: RefreshField, incoming: MovieSnapshot, rep: RefreshApplyReport) -> None:
        role = f.credit_role
        if role is None:
            self.movies.set_snapshot(movie, f, getattr(incoming, f.value))
            self.db.flush()
        else:
            self._replace_role(movie, role, getattr(incoming, f.value), rep)

    def apply(
        self,
        owner_id: UUID,
        movie_id: UUID,
        incoming: MovieSnapshot,
        fields: Iterable[str],
    ) -> RefreshApplyReport:
        """
        Write the selected fields. Each field is its own savepoint: a failing
        field is rolled back whole and reported, the others still land.
        Overrides are never touched.
        """
        selected = parse_fields(fields)
        movie = self.movies.get_or_raise(owner_id, movie_id)
        rep = RefreshApplyReport()
        rep.start()
        for f in selected:
            try:
                with atomic(self.db):
                    self._apply_field(movie, f, incoming, rep)
            except (MirokuError, SQLAlchemyError) as e:
                rep.failed.append(f.value)
                rep.add_error(f.value, str(getattr(e, "message", e)))
                logger.warning("refresh of %s on movie %s failed: %s", f.value, movie.id, e)
                continue
            rep.applied.append(f.value)
        rep.stop()
        logger.info("refresh applied movie=%s fields=%s failed=%s", movie.id, rep.applied, rep.failed)
        return rep

    def refresh_all(self, owner_id: UUID, sleep: Optional[Callable[[float], None]] = None) -> BulkRefreshReport:
        """
        Refresh every catalog-backed movie, newest first, one at a time.
        A movie that fails is rolled back and noted as "title: message";
        the run continues. No retries.

        Each movie is a savepoint inside the caller's transaction, which stays
        open across the catalog calls and commits once at the end.
        """
        sleep = sleep or time.sleep
        delay = self.cfg.refresh.bulk_delay_sec
        movies = self.movies.list_refreshable(owner_id)
        rep = BulkRefreshReport(total=len(movies))
        rep.start()
        for i, movie in enumerate(movies):
            if i and delay > 0:
                sleep(delay)
            subject = movie.title or "unknown"
            try:
                with atomic(self.db):
                    incoming = self._fetch(movie)
                    scratch = RefreshApplyReport()
                    for f in RefreshField:
                        self._apply_field(movie, f, incoming, scratch)
            except (MirokuError, SQLAlchemyError) as e:
                rep.add_error(subject, str(getattr(e, "message", e)))
                logger.warning("bulk refresh: %s failed: %s", subject, e)
                continue
            rep.refreshed += 1
        rep.stop()
        logger.info(
            "bulk refresh owner=%s total=%d refreshed=%d errors=%d",
            owner_id, rep.total, rep.refreshed, len(rep.errors),
        )
        return rep
