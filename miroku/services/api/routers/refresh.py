# miroku/services/api/routers/refresh.py
from __future__ import annotations

from http import HTTPStatus
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from miroku.common.settings import get_settings
from miroku.common.strings.splitters import normalize_name
from miroku.domain.entities.movie_snapshot import ExternalPersonCredit, MovieSnapshot
from miroku.domain.errors import PartialFailure
from miroku.domain.ports.catalog import CatalogPort
from miroku.services.api.deps import current_owner, get_catalog, transactional_session
from miroku.services.api.errors import error_response
from miroku.services.refresh.reconciler import RefreshReconciler, parse_fields
from miroku.services.schemas.refresh import (
    BulkRefreshReportRead,
    FieldChangeRead,
    MovieSnapshotSchema,
    RefreshApplyReportRead,
    RefreshApplyRequest,
    RefreshPreview,
)

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/movies", tags=["refresh"])


def _to_snapshot(s: MovieSnapshotSchema) -> MovieSnapshot:
    def people(rows):
        return [ExternalPersonCredit(name=normalize_name(p.name), external_id=p.external_id, order=p.order) for p in rows]

    return MovieSnapshot(
        title=s.title,
        poster_ref=s.poster_ref,
        release_date=s.release_date,
        production_countries=list(s.production_countries),
        directors=people(s.directors),
        writers=people(s.writers),
        cast=people(s.cast),
    )


@router.post("/refresh-all", response_model=BulkRefreshReportRead)
def refresh_all_movies(
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
    catalog: CatalogPort = Depends(get_catalog),
):
    rep = RefreshReconciler(db, catalog).refresh_all(owner_id)
    body = BulkRefreshReportRead.model_validate(rep.as_dict())
    if rep.ok:
        return body
    failure = PartialFailure(f"{len(rep.errors)} of {rep.total} movies failed to refresh", rep.errors)
    return error_response(failure, **jsonable_encoder(body.model_dump(exclude={"errors"})))


@router.get("/{movie_id}/refresh", response_model=RefreshPreview)
def preview_refresh(
    movie_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
    catalog: CatalogPort = Depends(get_catalog),
) -> RefreshPreview:
    incoming, diff = RefreshReconciler(db, catalog).preview(owner_id, movie_id)
    return RefreshPreview(
        incoming=MovieSnapshotSchema.model_validate(incoming),
        changes=[FieldChangeRead.model_validate(c) for c in diff.changes.values()],
        changed_fields=diff.changed_fields,
    )


@router.post("/{movie_id}/refresh", response_model=RefreshApplyReportRead)
def apply_refresh(
    movie_id: UUID,
    payload: RefreshApplyRequest,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
    catalog: CatalogPort = Depends(get_catalog),
):
    svc = RefreshReconciler(db, catalog)
    parse_fields(payload.fields)  # reject a bad selection before touching the catalog
    incoming = _to_snapshot(payload.incoming) if payload.incoming else svc.fetch(owner_id, movie_id)
    rep = svc.apply(owner_id, movie_id, incoming, payload.fields)
    body = RefreshApplyReportRead.model_validate(rep)
    if rep.ok:
        return body
    failure = PartialFailure(f"{len(rep.failed)} field(s) could not be refreshed", rep.error_details)
    return error_response(failure, **jsonable_encoder(body))
