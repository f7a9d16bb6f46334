# miroku/services/api/routers/analytics.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from miroku.common.settings import get_settings
from miroku.database.repos.analytics_repo import SqlAlchemyAnalyticsRepo
from miroku.domain import analytics as an
from miroku.domain.enums import CreditRole
from miroku.services.api.deps import current_owner, transactional_session
from miroku.services.schemas.analytics import AnalyticsSummary, NamedCountRead

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/analytics", tags=["analytics"])


def _rows(items):
    return [NamedCountRead.model_validate(i) for i in items]


@router.get("", response_model=AnalyticsSummary)
def analytics_summary(
    year: Optional[int] = Query(None, ge=1900, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    top: int = Query(10, ge=1, le=100),
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> AnalyticsSummary:
    """Whole-collection charts; year/month narrow everything to movies watched in that window."""
    flt = an.AnalyticsFilter(year=year, month=month)
    repo = SqlAlchemyAnalyticsRepo(db)

    logs = repo.watch_records(owner_id)
    movies = repo.movie_records(owner_id)
    credits = repo.credit_records(owner_id)
    tags = repo.tag_records(owner_id)

    filtered = an.filter_logs(logs, flt)
    watched = an.watched_movie_ids(filtered)
    narrowed = year is not None or month is not None
    only = watched if narrowed else None

    return AnalyticsSummary(
        total_movies=len(movies),
        watched_movies=len(watched),
        watch_logs=len(filtered),
        monthly=_rows(an.monthly_watch_counts(filtered)),
        yearly=_rows(an.yearly_watch_counts(filtered)),
        scores=_rows(an.score_distribution(filtered)),
        countries=_rows(an.country_counts(movies, only=only)),
        tags=_rows(an.tag_counts(t for t in tags if only is None or t.movie_id in only)),
        directors=_rows(an.top_people(credits, CreditRole.director, only=only, limit=top)),
        cast=_rows(an.top_people(credits, CreditRole.cast, only=only, limit=top)),
    )
