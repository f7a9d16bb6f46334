from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from miroku.database.models.movie import Movie as DBMovie
from miroku.database.models.person import Credit as DBCredit
from miroku.database.models.taxonomy import MovieTag
from miroku.domain.enums import CreditRole, RefreshField
from miroku.domain.errors import Conflict, InvalidArgument, NotFound

# refresh field -> snapshot column
SNAPSHOT_COLUMNS: Dict[RefreshField, str] = {
    RefreshField.title: "snapshot_title",
    RefreshField.poster_ref: "snapshot_poster_ref",
    RefreshField.release_date: "snapshot_release_date",
    RefreshField.production_countries: "snapshot_countries",
}

OVERRIDE_COLUMNS: Dict[str, str] = {
    "title": "override_title",
    "poster_ref": "override_poster_ref",
    "release_date": "override_release_date",
    "production_countries": "override_countries",
}


class SqlAlchemyMovieRepo:
    def __init__(self, db: Session) -> None:
        self.db = db

    # -------- reads --------

    def get(self, owner_id: UUID, movie_id: UUID) -> Optional[DBMovie]:
        row = self.db.get(DBMovie, movie_id)
        if row is None or row.owner_id != owner_id:
            return None
        return row

    def get_or_raise(self, owner_id: UUID, movie_id: UUID) -> DBMovie:
        row = self.get(owner_id, movie_id)
        if row is None:
            raise NotFound(f"Movie {movie_id} not found")
        return row

    def find_by_external_ref(self, owner_id: UUID, external_ref: int) -> Optional[DBMovie]:
        stmt = (
            select(DBMovie)
            .where(DBMovie.owner_id == owner_id, DBMovie.external_ref == external_ref)
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def list(
        self,
        owner_id: UUID,
        *,
        q: Optional[str] = None,
        tag_ids: Optional[Sequence[UUID]] = None,
        person_id: Optional[UUID] = None,
        year_from: Optional[int] = None,
        year_to: Optional[int] = None,
        limit: Optional[int] = 100,
        offset: int = 0,
    ) -> List[DBMovie]:
        """
        Newest first. Filters combine with AND; tag_ids matches a movie carrying
        any of the tags. Year bounds apply to the effective release date, so
        movies without one drop out once a bound is given.
        """
        stmt = select(DBMovie).where(DBMovie.owner_id == owner_id)
        q = (q or "").strip().lower()
        if q:
            stmt = stmt.where(
                or_(
                    func.lower(DBMovie.override_title).contains(q, autoescape=True),
                    func.lower(DBMovie.snapshot_title).contains(q, autoescape=True),
                )
            )
        if tag_ids:
            stmt = stmt.where(
                DBMovie.id.in_(select(MovieTag.movie_id).where(MovieTag.tag_id.in_(list(tag_ids))))
            )
        if person_id is not None:
            stmt = stmt.where(DBMovie.id.in_(select(DBCredit.movie_id).where(DBCredit.person_id == person_id)))
        released = func.coalesce(DBMovie.override_release_date, DBMovie.snapshot_release_date)
        if year_from is not None:
            stmt = stmt.where(released >= f"{year_from:04d}-01-01")
        if year_to is not None:
            stmt = stmt.where(released <= f"{year_to:04d}-12-31")
        stmt = stmt.order_by(DBMovie.date_created.desc(), DBMovie.id.asc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.db.execute(stmt).scalars().all()

    def list_by_ids(self, owner_id: UUID, movie_ids: Iterable[UUID]) -> List[DBMovie]:
        ids = list(movie_ids)
        if not ids:
            return []
        stmt = (
            select(DBMovie)
            .where(DBMovie.owner_id == owner_id, DBMovie.id.in_(ids))
            .order_by(DBMovie.date_created.desc(), DBMovie.id.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def filmography(self, owner_id: UUID, person_id: UUID) -> Dict[CreditRole, List[DBMovie]]:
        """Movies a person is credited on, grouped by role, newest first."""
        rows = self.db.execute(
            select(DBCredit.role, DBMovie)
            .join(DBMovie, DBMovie.id == DBCredit.movie_id)
            .where(DBMovie.owner_id == owner_id, DBCredit.person_id == person_id)
            .order_by(DBMovie.date_created.desc(), DBMovie.id.asc())
        ).all()
        out: Dict[CreditRole, List[DBMovie]] = {r: [] for r in CreditRole}
        for role, movie in rows:
            out[role].append(movie)
        return out

    def list_all(self, owner_id: UUID) -> List[DBMovie]:
        stmt = select(DBMovie).where(DBMovie.owner_id == owner_id)
        return self.db.execute(stmt).scalars().all()

    def list_refreshable(self, owner_id: UUID) -> List[DBMovie]:
        """Movies with a catalog reference, newest first."""
        stmt = (
            select(DBMovie)
            .where(DBMovie.owner_id == owner_id, DBMovie.external_ref.is_not(None))
            .order_by(DBMovie.date_created.desc(), DBMovie.id.asc())
        )
        return self.db.execute(stmt).scalars().all()

    # -------- mutations --------

    def create(
        self,
        owner_id: UUID,
        *,
        external_ref: Optional[int] = None,
        snapshot: Optional[Dict[RefreshField, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
        data_origin: Optional[str] = None,
    ) -> DBMovie:
        if external_ref is not None and self.find_by_external_ref(owner_id, external_ref):
            raise Conflict("already added")
        row = DBMovie(owner_id=owner_id, external_ref=external_ref, data_origin=data_origin)
        for f, value in (snapshot or {}).items():
            self.set_snapshot(row, f, value)
        if overrides:
            self.set_overrides(row, overrides)
        self.db.add(row)
        self.db.flush()
        return row

    def set_snapshot(self, row: DBMovie, f: RefreshField, value: Any) -> None:
        col = SNAPSHOT_COLUMNS.get(f)
        if col is None:
            raise InvalidArgument(f"{f} is not a snapshot field")
        if f is RefreshField.production_countries:
            value = list(value or [])
        setattr(row, col, value)

    def set_overrides(self, row: DBMovie, values: Dict[str, Any]) -> DBMovie:
        """Set (or clear, with None) user overrides; unknown keys are rejected."""
        for key, value in values.items():
            col = OVERRIDE_COLUMNS.get(key)
            if col is None:
                raise InvalidArgument(f"Unknown movie field: {key}")
            if key == "production_countries" and value is not None:
                value = list(value)
            setattr(row, col, value)
        self.db.flush()
        return row

    def delete(self, owner_id: UUID, movie_id: UUID) -> None:
        row = self.get_or_raise(owner_id, movie_id)
        self.db.delete(row)
        self.db.flush()

