# miroku/database/core/transaction.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def transactional(db: Session) -> Iterator[Session]:
    with db.begin():
        yield db


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    All-or-nothing unit inside whatever transaction the session already has.
    Uses a SAVEPOINT so a failure rolls back only this unit.
    """
    with db.begin_nested():
        yield db
