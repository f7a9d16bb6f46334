# tests/database/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy.orm import Session


@pytest.fixture()
def db(db_engine) -> Session:
    """
    Session on a connection whose outer transaction is rolled back after the
    test. The session's own transaction runs as a SAVEPOINT, so services that
    open `atomic()` blocks nest one level deeper and never end the outer one.
    """
    with db_engine.connect() as connection:
        outer = connection.begin()
        session = Session(bind=connection, join_transaction_mode="create_savepoint")
        try:
            yield session
        finally:
            session.close()
            outer.rollback()
