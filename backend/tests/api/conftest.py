"""API test fixtures — FastAPI test client over the in-memory test database.

Invariants:
    - get_db dependency overridden to use the test engine's sessions
    - db_manager patched for code that reads it directly (readiness probe)
    - gql posts to /graphql and returns the decoded body; tokens are opt-in per call

Design Decisions:
    - The lifespan handler is not run by ASGITransport: nothing here depends on it
"""

import pytest
from httpx import ASGITransport, AsyncClient

from fundhost.infrastructure.auth import issue_access_token
from fundhost.infrastructure.database import get_db, DatabaseSessionManager
import fundhost.infrastructure.database as db_module
from fundhost.main import app


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {issue_access_token(user.id)}"}


@pytest.fixture
def gql(client):
    async def _post(query: str, variables: dict | None = None, user=None) -> dict:
        res = await client.post(
            "/graphql",
            json={"query": query, "variables": variables or {}},
            headers=bearer(user) if user else {},
        )
        assert res.status_code == 200, res.text
        return res.json()
    return _post
