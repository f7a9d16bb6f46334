# miroku/services/api/routers/people.py
from __future__ import annotations

from http import HTTPStatus
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session

from miroku.common.settings import get_settings
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.people_repo import PersonUsage, SqlAlchemyPeopleRepo
from miroku.domain.enums import CreditRole
from miroku.services.api.deps import current_owner, transactional_session
from miroku.services.people.merge import MergeService
from miroku.services.schemas.movies import FilmographyRead, MovieRead
from miroku.services.schemas.people import (
    DedupeReportRead,
    DeleteUnusedResult,
    MergeRequest,
    MergeResultRead,
    PersonRead,
    PersonUpdate,
    PersonUsageRead,
)

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/people", tags=["people"])


# ---- helpers ----

def _usage_read(u: PersonUsage) -> PersonUsageRead:
    return PersonUsageRead(
        person=PersonRead.model_validate(u.person),
        credit_count=u.credit_count,
        movie_count=u.movie_count,
        roles=sorted(u.roles),
    )


# ---- listings ----

@router.get("", response_model=List[PersonUsageRead])
def list_people(
    q: str = Query("", description="Case-insensitive substring of the display name"),
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[PersonUsageRead]:
    return [_usage_read(u) for u in SqlAlchemyPeopleRepo(db).list_active(owner_id, q=q)]


@router.delete("/unused", response_model=DeleteUnusedResult)
def delete_unused_people(
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> DeleteUnusedResult:
    return DeleteUnusedResult(deleted=SqlAlchemyPeopleRepo(db).delete_unused(owner_id))


@router.post("/dedupe", response_model=DedupeReportRead)
def dedupe_people(
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> DedupeReportRead:
    return DedupeReportRead.model_validate(MergeService(db).dedupe_by_external_id(owner_id))


@router.get("/{person_id}", response_model=PersonRead)
def get_person(
    person_id: UUID = Path(...),
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> PersonRead:
    return PersonRead.model_validate(SqlAlchemyPeopleRepo(db).get_or_raise(owner_id, person_id))


@router.patch("/{person_id}", response_model=PersonRead)
def rename_person(
    person_id: UUID,
    payload: PersonUpdate,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> PersonRead:
    obj = SqlAlchemyPeopleRepo(db).rename(owner_id, person_id, payload.display_name)
    return PersonRead.model_validate(obj)


@router.get("/{person_id}/filmography", response_model=FilmographyRead)
def get_filmography(
    person_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> FilmographyRead:
    person = SqlAlchemyPeopleRepo(db).get_or_raise(owner_id, person_id)
    by_role = SqlAlchemyMovieRepo(db).filmography(owner_id, person_id)

    def movies(role: CreditRole):
        return [MovieRead.model_validate(m) for m in by_role[role]]

    return FilmographyRead(
        person=PersonRead.model_validate(person),
        directed=movies(CreditRole.director),
        written=movies(CreditRole.writer),
        cast=movies(CreditRole.cast),
    )


# ---- merge ----

@router.get("/{person_id}/merge-candidates", response_model=List[PersonUsageRead])
def list_merge_candidates(
    person_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[PersonUsageRead]:
    return [_usage_read(u) for u in SqlAlchemyPeopleRepo(db).list_merge_candidates(owner_id, person_id)]


@router.get("/{person_id}/merged", response_model=List[PersonRead])
def list_merged_people(
    person_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[PersonRead]:
    rows = SqlAlchemyPeopleRepo(db).list_merged_into(owner_id, person_id)
    return [PersonRead.model_validate(p) for p in rows]


@router.post("/{person_id}/merge", response_model=MergeResultRead)
def merge_person(
    person_id: UUID,
    payload: MergeRequest,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> MergeResultRead:
    res = MergeService(db).merge(owner_id, person_id, payload.target_id)
    return MergeResultRead.model_validate(res)


@router.post("/{person_id}/unmerge", response_model=PersonRead, status_code=HTTPStatus.OK)
def unmerge_person(
    person_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> PersonRead:
    return PersonRead.model_validate(MergeService(db).unmerge(owner_id, person_id))
