from __future__ import annotations

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from miroku.database.models.movie import Movie
from miroku.database.models.watch_log import WatchLog
from miroku.domain.enums import WatchMethod, WatchScore
from miroku.domain.errors import NotFound


class WatchLogRepo:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_or_raise(self, owner_id: UUID, log_id: UUID) -> WatchLog:
        row = self.db.get(WatchLog, log_id)
        if row is None or row.owner_id != owner_id:
            raise NotFound(f"Watch log {log_id} not found")
        return row

    def list(self, owner_id: UUID, *, movie_id: Optional[UUID] = None) -> List[WatchLog]:
        stmt = select(WatchLog).where(WatchLog.owner_id == owner_id)
        if movie_id is not None:
            stmt = stmt.where(WatchLog.movie_id == movie_id)
        stmt = stmt.order_by(WatchLog.watched_at.desc(), WatchLog.date_created.desc())
        return self.db.execute(stmt).scalars().all()

    def create(
        self,
        owner_id: UUID,
        *,
        movie_id: UUID,
        watched_at: datetime,
        watch_method: WatchMethod = WatchMethod.other,
        score: Optional[WatchScore] = None,
        memo: Optional[str] = None,
    ) -> WatchLog:
        movie = self.db.get(Movie, movie_id)
        if movie is None or movie.owner_id != owner_id:
            raise NotFound(f"Movie {movie_id} not found")
        row = WatchLog(
            owner_id=owner_id,
            movie_id=movie_id,
            watched_at=watched_at,
            watch_method=watch_method,
            score=score,
            memo=memo,
        )
        self.db.add(row)
        movie.watch_count = (movie.watch_count or 0) + 1
        self.db.flush()
        return row

    def update(self, owner_id: UUID, log_id: UUID, **fields) -> WatchLog:
        """Patch watched_at / watch_method / score / memo; keys absent from `fields` are kept."""
        row = self.get_or_raise(owner_id, log_id)
        for key in ("watched_at", "watch_method", "score", "memo"):
            if key in fields:
                setattr(row, key, fields[key])
        self.db.flush()
        return row

    def delete(self, owner_id: UUID, log_id: UUID) -> None:
        row = self.get_or_raise(owner_id, log_id)
        movie = self.db.get(Movie, row.movie_id)
        if movie is not None:
            movie.watch_count = max(0, (movie.watch_count or 0) - 1)
        self.db.delete(row)
        self.db.flush()
