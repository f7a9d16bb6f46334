# miroku/services/api/routers/tags.py
from __future__ import annotations

from http import HTTPStatus
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from miroku.common.settings import get_settings
from miroku.database.repos.movie_repo import SqlAlchemyMovieRepo
from miroku.database.repos.tag_repo import TagRepo
from miroku.services.api.deps import current_owner, transactional_session
from miroku.services.schemas.tags import TagCreate, TagRead, TagUpdate, TagWithCount

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}", tags=["tags"])


@router.get("/tags", response_model=List[TagWithCount])
def list_tags(
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[TagWithCount]:
    return [
        TagWithCount(id=t.id, name=t.name, color=t.color, movie_count=n)
        for t, n in TagRepo(db).list_tags(owner_id)
    ]


@router.post("/tags", response_model=TagRead, status_code=HTTPStatus.CREATED)
def create_tag(
    payload: TagCreate,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> TagRead:
    return TagRead.model_validate(TagRepo(db).create_tag(owner_id, name=payload.name, color=payload.color))


@router.patch("/tags/{tag_id}", response_model=TagRead)
def update_tag(
    tag_id: UUID,
    payload: TagUpdate,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> TagRead:
    tag = TagRepo(db).update_tag(owner_id, tag_id, name=payload.name, color=payload.color)
    return TagRead.model_validate(tag)


@router.delete("/tags/{tag_id}", status_code=HTTPStatus.NO_CONTENT)
def delete_tag(
    tag_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> None:
    TagRepo(db).delete_tag(owner_id, tag_id)
    return None


# ---- movie <-> tag ----

@router.get("/movies/{movie_id}/tags", response_model=List[TagRead])
def list_movie_tags(
    movie_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[TagRead]:
    SqlAlchemyMovieRepo(db).get_or_raise(owner_id, movie_id)
    return [TagRead.model_validate(t) for t in TagRepo(db).list_for_movie(movie_id)]


@router.put("/movies/{movie_id}/tags/{tag_id}", status_code=HTTPStatus.NO_CONTENT)
def attach_tag(
    movie_id: UUID,
    tag_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> None:
    TagRepo(db).add_tag_to_movie(owner_id, movie_id, tag_id)
    return None


@router.delete("/movies/{movie_id}/tags/{tag_id}", status_code=HTTPStatus.NO_CONTENT)
def detach_tag(
    movie_id: UUID,
    tag_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> None:
    SqlAlchemyMovieRepo(db).get_or_raise(owner_id, movie_id)
    TagRepo(db).remove_tag_from_movie(movie_id, tag_id)
    return None
