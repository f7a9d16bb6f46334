# miroku/services/api/routers/watch_logs.py
from __future__ import annotations

from http import HTTPStatus
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from miroku.common.settings import get_settings
from miroku.database.repos.watch_log_repo import WatchLogRepo
from miroku.services.api.deps import current_owner, transactional_session
from miroku.services.schemas.watch_logs import WatchLogCreate, WatchLogRead, WatchLogUpdate

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/watch-logs", tags=["watch-logs"])


@router.get("", response_model=List[WatchLogRead])
def list_watch_logs(
    movie_id: Optional[UUID] = Query(None),
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> List[WatchLogRead]:
    return [WatchLogRead.model_validate(r) for r in WatchLogRepo(db).list(owner_id, movie_id=movie_id)]


@router.post("", response_model=WatchLogRead, status_code=HTTPStatus.CREATED)
def create_watch_log(
    payload: WatchLogCreate,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> WatchLogRead:
    row = WatchLogRepo(db).create(owner_id, **payload.model_dump())
    return WatchLogRead.model_validate(row)


@router.patch("/{log_id}", response_model=WatchLogRead)
def update_watch_log(
    log_id: UUID,
    payload: WatchLogUpdate,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> WatchLogRead:
    row = WatchLogRepo(db).update(owner_id, log_id, **payload.model_dump(exclude_unset=True))
    return WatchLogRead.model_validate(row)


@router.delete("/{log_id}", status_code=HTTPStatus.NO_CONTENT)
def delete_watch_log(
    log_id: UUID,
    owner_id: UUID = Depends(current_owner),
    db: Session = Depends(transactional_session),
) -> None:
    WatchLogRepo(db).delete(owner_id, log_id)
    return None
