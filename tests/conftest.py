"""Root conftest — shared async DB, repository, service and HTTP client fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The client's app never runs its lifespan: the service is attached to
      app.state directly and db_manager is patched for the readiness probe
    - No PostgreSQL needed: DATABASE_URL defaults to SQLite

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for the
      repository contract (unique index, no-rows, timestamps)
    - raise_app_exceptions=False: Starlette re-raises after the catch-all
      handler has rendered the 500, the tests assert on that response
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

from userapi.config import Settings  # noqa: E402
from userapi.db.base import Base  # noqa: E402
from userapi.infrastructure import database as db_module  # noqa: E402
from userapi.infrastructure.database import DatabaseSessionManager  # noqa: E402
from userapi.infrastructure.user_repository import SqlUserRepository  # noqa: E402
from userapi.main import create_app  # noqa: E402
from userapi.services.user_service import UserService  # noqa: E402
import userapi.models  # noqa: E402,F401


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def repo(db_manager):
    return SqlUserRepository(db_manager)


@pytest.fixture
def service(repo):
    return UserService(repo)


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        log_format="text",
        database_health_check_seconds=0,
    )


@pytest.fixture
def app(test_settings, service, db_manager, monkeypatch):
    """App wired to the test service, without running the lifespan."""
    application = create_app(test_settings)
    application.state.user_service = service
    monkeypatch.setattr(db_module, "db_manager", db_manager)
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c
