"""API test fixtures — the FastAPI app wired to a per-test SQLite database.

Design Decisions:
    - Both get_db and the db_manager singleton point at the test engine, so
      routes and the readiness check see the same database
    - ASGITransport does not run the lifespan: no real database is initialized
"""

import pytest
from httpx import ASGITransport, AsyncClient

import temple_ledger.infrastructure.database as db_module
import temple_ledger.models  # noqa: F401
from temple_ledger.db.base import Base
from temple_ledger.db.session import create_engine, create_session_factory
from temple_ledger.infrastructure.database import DatabaseSessionManager, get_db
from temple_ledger.main import app


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def client(test_engine):
    """FastAPI test client with DB dependency overridden."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = create_session_factory(test_engine)
    db_module.db_manager = fake_manager

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def rama(client):
    response = await client.post("/api/v1/users", json={
        "name": "Rama", "email": "rama@gmail.com", "phone": "9876543210",
    })
    return response.json()["id"]


@pytest.fixture
async def tirupati(client):
    response = await client.post("/api/v1/temples", json={
        "name": "Tirupati", "location": "Tirupati",
    })
    return response.json()["id"]
