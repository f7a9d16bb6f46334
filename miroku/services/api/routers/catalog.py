# miroku/services/api/routers/catalog.py
from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Query

from miroku.common.settings import get_settings
from miroku.domain.ports.catalog import CatalogPort
from miroku.services.api.deps import get_catalog
from miroku.services.schemas.catalog import (
    CatalogCreditsRead,
    CatalogDetailsRead,
    CatalogMovieFull,
    CatalogSearchRead,
)

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/catalog", tags=["catalog"])


@router.get("/search", response_model=CatalogSearchRead)
def search_catalog(
    query: str = Query(""),
    page: int = Query(1, ge=1),
    catalog: CatalogPort = Depends(get_catalog),
) -> CatalogSearchRead:
    if not query.strip():
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="Query parameter is required")
    return CatalogSearchRead.model_validate(catalog.search(query.strip(), page))


@router.get("/movie/{external_id}", response_model=CatalogMovieFull)
def get_catalog_movie(
    external_id: int,
    catalog: CatalogPort = Depends(get_catalog),
) -> CatalogMovieFull:
    details, credits = catalog.movie_with_display_names(external_id)
    return CatalogMovieFull(
        details=CatalogDetailsRead.model_validate(details),
        credits=CatalogCreditsRead.model_validate(credits),
    )
