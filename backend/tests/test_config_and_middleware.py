"""
PageNotes Backend — Settings & Middleware Unit Tests
======================================================

What we test:
    ✅ DATABASE_URL wins; otherwise the URL is assembled from DB_* fields
    ✅ log level / JWT algorithm validation
    ✅ rate limiter window slides with the clock
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError as PydanticValidationError

from pagenotes.config import Settings
from pagenotes.middleware.rate_limit import AuthRateLimitMiddleware


class TestSettings:

    def test_explicit_database_url_wins(self):
        settings = Settings(database_url="sqlite+aiosqlite:///x.db", db_host="ignored")
        assert settings.sqlalchemy_database_url == "sqlite+aiosqlite:///x.db"
        assert settings.is_sqlite

    def test_url_assembled_from_parts(self):
        settings = Settings(
            database_url=None,
            db_user="notes",
            db_password="p@ss",
            db_host="db.internal",
            db_port=6543,
            db_name="pagenotes",
        )
        url = settings.sqlalchemy_database_url

        assert url.startswith("postgresql+asyncpg://notes:")
        assert url.endswith("@db.internal:6543/pagenotes")
        assert not settings.is_sqlite

    def test_defaults(self):
        settings = Settings(database_url=None, jwt_secret="")
        assert settings.port == 5000
        assert settings.token_ttl_days == 7
        assert settings.bcrypt_rounds == 10

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="chatty")

    def test_unsupported_jwt_algorithm(self):
        with pytest.raises(PydanticValidationError):
            Settings(jwt_algorithm="none")

    def test_cors_origins_split(self):
        settings = Settings(cors_origins="http://a.test, http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _limited_app(clock: FakeClock, max_requests: int = 2) -> FastAPI:
    app = FastAPI()

    @app.post("/auth/login")
    async def login():
        return {"ok": True}

    @app.get("/notes/1")
    async def note():
        return {"ok": True}

    app.add_middleware(
        AuthRateLimitMiddleware, max_requests=max_requests, window_seconds=60, clock=clock
    )
    return app


class TestAuthRateLimitMiddleware:

    @pytest.mark.asyncio
    async def test_window_slides(self):
        clock = FakeClock()
        app = _limited_app(clock)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            assert (await client.post("/auth/login")).status_code == 200
            clock.now += 10
            assert (await client.post("/auth/login")).status_code == 200

            blocked = await client.post("/auth/login")
            assert blocked.status_code == 429
            assert blocked.headers["Retry-After"] == "51"

            clock.now += 51
            assert (await client.post("/auth/login")).status_code == 200

    @pytest.mark.asyncio
    async def test_other_paths_pass_through(self):
        app = _limited_app(FakeClock(), max_requests=1)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            statuses = {(await client.get("/notes/1")).status_code for _ in range(5)}

        assert statuses == {200}
