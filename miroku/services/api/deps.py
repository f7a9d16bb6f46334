# miroku/services/api/deps.py
from __future__ import annotations
from http import HTTPStatus
from typing import Generator, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from miroku.database.core.main import SessionLocal
from miroku.database.core.transaction import transactional
from miroku.domain.ports.catalog import CatalogPort
from miroku.services.catalog.tmdb import TmdbCatalog


def get_catalog() -> Generator[CatalogPort, None, None]:
    """
    Provide a CatalogPort implementation (TMDB over httpx) via DI.
    Tests override this with an in-memory fake.
    """
    catalog = TmdbCatalog()
    try:
        yield catalog
    finally:
        catalog.close()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional_session(db: Session = Depends(get_db)) -> Generator[Session, None, None]:
    """
    Request-scoped transaction. Any repo/service using this session
    participates in the same transaction.

    Usage in routers:
      def endpoint(session: Session = Depends(transactional_session)):
          ...
    """
    # COMMIT on normal exit, ROLLBACK if an exception bubbles out.
    with transactional(db):
        yield db


def current_owner(x_owner_id: Optional[str] = Header(default=None, alias="X-Owner-Id")) -> UUID:
    """
    The acting owner. Authentication happens upstream; every query is scoped
    by the id it forwards in X-Owner-Id.
    """
    if not x_owner_id:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail="X-Owner-Id header is required")
    try:
        return UUID(x_owner_id)
    except ValueError:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail="X-Owner-Id must be a UUID") from None
