# miroku/services/api/routers/browse.py
from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from miroku.common.settings import get_settings
from miroku.database.repos.analytics_repo import SqlAlchemyAnalyticsRepo
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.tag_repo import TagRepo
from miroku.domain import analytics as an
from miroku.domain.enums import WatchScore
from miroku.services.api.deps import current_owner, transactional_session
from miroku.services.schemas.movies import MovieRead

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/browse", tags=["browse"])


def _movies(db: Session, owner_id: UUID, ids) -> List[MovieRead]:
    return [MovieRead.model_validate(m) for m in SqlAlchemyMovieRepo(db).list_by_ids(owner_id, ids)]


@router.get("/months/{month}", response_model=List[MovieRead])
def movies_watched_in_month(
    month: str = Path(..., description="YYYY-MM"),
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[MovieRead]:
    flt = an.parse_month(month)
    logs = an.filter_logs(SqlAlchemyAnalyticsRepo(db).watch_records(owner_id), flt)
    return _movies(db, owner_id, an.watched_movie_ids(logs))


@router.get("/countries/{country}", response_model=List[MovieRead])
def movies_from_country(
    country: str,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[MovieRead]:
    records = SqlAlchemyAnalyticsRepo(db).movie_records(owner_id)
    return _movies(db, owner_id, an.movies_in_country(records, country))


@router.get("/scores/{score}", response_model=List[MovieRead])
def movies_with_best_score(
    score: WatchScore,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[MovieRead]:
    logs = SqlAlchemyAnalyticsRepo(db).watch_records(owner_id)
    return _movies(db, owner_id, an.movies_with_best_score(logs, score))


@router.get("/tags/{tag_id}", response_model=List[MovieRead])
def movies_with_tag(
    tag_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[MovieRead]:
    TagRepo(db).get_or_raise(owner_id, tag_id)
    rows = SqlAlchemyMovieRepo(db).list(owner_id, tag_ids=[tag_id], limit=None)
    return [MovieRead.model_validate(m) for m in rows]
