"""
PageNotes Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own SQLite database file (aiosqlite) in tmp_path,
       so store and API tests run against real SQL without PostgreSQL.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:    Settings pointing at a fresh SQLite file
    ├── app:              create_app(test_settings)
    ├── test_client:      HTTPX AsyncClient over ASGITransport, schema created
    ├── engine / db_session: direct store access for service-level tests
    ├── fake_hasher:      deterministic Hasher (no bcrypt cost)
    ├── token_service:    TokenService with a fixed test secret
    └── mock_db_session:  AsyncMock session for failure injection
"""

import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set BEFORE any pagenotes import: pagenotes.main builds a module-level app
# from the environment.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="pagenotes_test_"), "import.db"
)
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from pagenotes.config import Settings  # noqa: E402
from pagenotes.database import build_engine, build_session_factory, dispose_engine, init_models  # noqa: E402
from pagenotes.services.security import Hasher, JoseTokenSigner  # noqa: E402
from pagenotes.services.token_service import TokenService  # noqa: E402

TEST_SECRET = "test-secret-not-real"


class FakeHasher(Hasher):
    """Reversible, deterministic stand-in for bcrypt. Never use outside tests."""

    def hash(self, plaintext: str) -> str:
        return f"fake${plaintext[::-1]}"

    def verify(self, plaintext: str, hashed: str) -> bool:
        return hashed == self.hash(plaintext)


# ══════════════════════════════════════════════════════════════════════════
# Configuration & Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for one test: private SQLite file, cheap bcrypt, fixed secret."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pagenotes.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        log_level="WARNING",
        auth_rate_limit_requests=1000,
    )


@pytest.fixture
def app(test_settings):
    from pagenotes.main import create_app
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not run the lifespan, so the schema is created here.
    """
    await init_models(app.state.engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await dispose_engine(app.state.engine)


# ══════════════════════════════════════════════════════════════════════════
# Store-level fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(test_settings):
    engine = build_engine(test_settings)
    await init_models(engine)
    yield engine
    await dispose_engine(engine)


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(JoseTokenSigner(TEST_SECRET))


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

async def register(client: AsyncClient, username: str, password: str = "s3cret-pass") -> str:
    """Register through the API and return the bearer token."""
    response = await client.post("/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
