# miroku/services/api/routers/movies.py
from __future__ import annotations

from http import HTTPStatus
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from miroku.common.settings import get_settings
from miroku.database.repos.credit_repo import SqlAlchemyCreditRepo
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.domain.ports.catalog import CatalogPort
from miroku.services.api.deps import current_owner, get_catalog, transactional_session
from miroku.services.importer.service import ImportService
from miroku.services.schemas.movies import (
    CreditCreate,
    CreditGroupsRead,
    CreditRead,
    FetchCreditsResult,
    MovieCreateManual,
    MovieImport,
    MovieOverridesPatch,
    MovieRead,
)

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/movies", tags=["movies"])


# ---- movies ----

@router.get("", response_model=List[MovieRead])
def list_movies(
    q: str = Query("", description="Case-insensitive substring of the title"),
    tag_id: List[UUID] = Query([], description="Movies carrying any of these tags"),
    person_id: Optional[UUID] = Query(None, description="Movies crediting this person in any role"),
    year_from: Optional[int] = Query(None, ge=1800, le=2200),
    year_to: Optional[int] = Query(None, ge=1800, le=2200),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[MovieRead]:
    rows = SqlAlchemyMovieRepo(db).list(
        owner_id,
        q=q,
        tag_ids=tag_id,
        person_id=person_id,
        year_from=year_from,
        year_to=year_to,
        limit=limit,
        offset=offset,
    )
    return [MovieRead.model_validate(m) for m in rows]


@router.post("/import", response_model=MovieRead, status_code=HTTPStatus.CREATED)
def import_movie(
    payload: MovieImport,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
    catalog: CatalogPort = Depends(get_catalog),
) -> MovieRead:
    movie = ImportService(db, catalog).import_movie(owner_id, payload.external_id)
    return MovieRead.model_validate(movie)


@router.post("", response_model=MovieRead, status_code=HTTPStatus.CREATED)
def create_manual_movie(
    payload: MovieCreateManual,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> MovieRead:
    movie = ImportService(db).create_manual(
        owner_id,
        title=payload.title,
        release_date=payload.release_date,
        poster_ref=payload.poster_ref,
        production_countries=payload.production_countries,
        director_name=payload.director,
    )
    return MovieRead.model_validate(movie)


@router.get("/{movie_id}", response_model=MovieRead)
def get_movie(
    movie_id: UUID = Path(...),
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> MovieRead:
    return MovieRead.model_validate(SqlAlchemyMovieRepo(db).get_or_raise(owner_id, movie_id))


@router.patch("/{movie_id}", response_model=MovieRead)
def update_movie_overrides(
    movie_id: UUID,
    payload: MovieOverridesPatch,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> MovieRead:
    repo = SqlAlchemyMovieRepo(db)
    movie = repo.get_or_raise(owner_id, movie_id)
    repo.set_overrides(movie, payload.model_dump(exclude_unset=True))
    return MovieRead.model_validate(movie)


@router.delete("/{movie_id}", status_code=HTTPStatus.NO_CONTENT)
def delete_movie(
    movie_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> None:
    SqlAlchemyMovieRepo(db).delete(owner_id, movie_id)
    return None


# ---- credits ----

@router.get("/{movie_id}/credits", response_model=CreditGroupsRead)
def list_movie_credits(
    movie_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> CreditGroupsRead:
    SqlAlchemyMovieRepo(db).get_or_raise(owner_id, movie_id)
    return CreditGroupsRead.model_validate(SqlAlchemyCreditRepo(db).list_for_movie(movie_id))


@router.post("/{movie_id}/credits", response_model=CreditRead, status_code=HTTPStatus.CREATED)
def add_movie_credit(
    movie_id: UUID,
    payload: CreditCreate,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> CreditRead:
    svc = ImportService(db)
    if payload.person_id is not None:
        credit = svc.add_credit_for_person(owner_id, movie_id, payload.role, payload.person_id)
    elif payload.name and payload.name.strip():
        credit = svc.add_credit_by_name(owner_id, movie_id, payload.role, payload.name)
    else:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="person_id or name is required")
    return CreditRead.model_validate(credit)


@router.delete("/{movie_id}/credits/{credit_id}", status_code=HTTPStatus.NO_CONTENT)
def remove_movie_credit(
    movie_id: UUID,
    credit_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> None:
    SqlAlchemyMovieRepo(db).get_or_raise(owner_id, movie_id)
    SqlAlchemyCreditRepo(db).unlink(credit_id, movie_id=movie_id)
    return None


@router.post("/{movie_id}/credits/fetch", response_model=FetchCreditsResult)
def fetch_movie_credits(
    movie_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
    catalog: CatalogPort = Depends(get_catalog),
) -> FetchCreditsResult:
    res = ImportService(db, catalog).fetch_missing_credits(owner_id, movie_id)
    status = "exists" if res is None else ("fetched" if res else "empty")
    return FetchCreditsResult(status=status)
