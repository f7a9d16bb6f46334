from __future__ import annotations

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from miroku.database.models.movie import Movie
from miroku.database.models.person import Credit, Person
from miroku.database.models.taxonomy import MovieTag, Tag
from miroku.database.models.watch_log import WatchLog
from miroku.domain import analytics as an


class SqlAlchemyAnalyticsRepo:
    """Loads one owner's collection as the plain records the analytics functions take."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def watch_records(self, owner_id: UUID) -> List[an.WatchRecord]:
        rows = self.db.execute(
            select(WatchLog.movie_id, WatchLog.watched_at, WatchLog.score).where(WatchLog.owner_id == owner_id)
        ).all()
        return [an.WatchRecord(movie_id=mid, watched_at=ts, score=score) for mid, ts, score in rows]

    def movie_records(self, owner_id: UUID) -> List[an.MovieRecord]:
        movies = self.db.execute(select(Movie).where(Movie.owner_id == owner_id)).scalars().all()
        return [an.MovieRecord(movie_id=m.id, countries=tuple(m.production_countries)) for m in movies]

    def credit_records(self, owner_id: UUID) -> List[an.CreditRecord]:
        rows = self.db.execute(
            select(Credit.movie_id, Credit.person_id, Person.display_name, Credit.role)
            .join(Person, Person.id == Credit.person_id)
            .where(Person.owner_id == owner_id)
        ).all()
        return [an.CreditRecord(movie_id=mid, person_id=pid, name=name, role=role) for mid, pid, name, role in rows]

    def tag_records(self, owner_id: UUID) -> List[an.TagRecord]:
        rows = self.db.execute(
            select(MovieTag.movie_id, Tag.id, Tag.name)
            .join(Tag, Tag.id == MovieTag.tag_id)
            .where(Tag.owner_id == owner_id)
        ).all()
        return [an.TagRecord(movie_id=mid, tag_id=tid, name=name) for mid, tid, name in rows]
