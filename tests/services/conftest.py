# tests/services/conftest.py
from __future__ import annotations
import pytest
from sqlalchemy.orm import Session
from starlette.testclient import TestClient

from miroku.services.api.app import create_app
from miroku.services.api.deps import get_catalog, transactional_session


@pytest.fixture()
def api_session(db_engine):
    """
    One SQLAlchemy Session bound to a test-wide connection/transaction.
    All API calls in one test share it (so POST -> GET works), and
    everything is rolled back at the end of the test.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    session = Session(bind=conn, future=True, join_transaction_mode="create_savepoint")
    try:
        yield session
    finally:
        session.close()
        trans.rollback()
        conn.close()


@pytest.fixture()
def api_client(api_session, fake_catalog, owner_id):
    """
    A TestClient whose `transactional_session` yields the shared test session
    and whose catalog is the in-memory fake. Requests carry X-Owner-Id.
    """
    app = create_app()

    def _override_session():
        # yield the same session for every request in this test
        yield api_session

    def _override_catalog():
        yield fake_catalog

    app.dependency_overrides[transactional_session] = _override_session
    app.dependency_overrides[get_catalog] = _override_catalog

    try:
        with TestClient(app, headers={"X-Owner-Id": str(owner_id)}) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
