"""
PageNotes Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and produces an immutable Settings object.
Who:   Passed into create_app(); every component receives the values it
       needs at construction time instead of importing a global.
When:  Built once per process by get_settings(); tests build their own.

Database connection:
    Either DATABASE_URL (a full SQLAlchemy async URL) or the discrete
    DB_USER / DB_PASSWORD / DB_HOST / DB_PORT / DB_NAME variables.
    DATABASE_URL wins when both are present.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST set
    JWT_SECRET and the database credentials.
    """

    # ── Database ──────────────────────────────────────────────────────────
    database_url: Optional[str] = Field(
        default=None,
        description="Full async SQLAlchemy URL; overrides the DB_* fields",
    )
    db_user: str = Field(default="pagenotes")
    db_password: str = Field(default="pagenotes")
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_name: str = Field(default="pagenotes")

    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # ── Tokens ────────────────────────────────────────────────────────────
    # Empty means "not configured": a development key is used with a warning.
    jwt_secret: str = Field(default="")
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_days: int = Field(default=7, ge=1, le=365)

    # ── Password hashing ──────────────────────────────────────────────────
    # bcrypt work factor (log2 of iterations).
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000,http://localhost:5173")

    @property
    def cors_origins_list(self) -> List[str]:
        """Comma-separated CORS_ORIGINS as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only HMAC algorithms make sense with a shared secret."""
        upper = v.upper()
        if upper not in {"HS256", "HS384", "HS512"}:
            raise ValueError(f"Unsupported jwt_algorithm '{v}'. Use HS256, HS384 or HS512")
        return upper

    # ── Auth throttling ───────────────────────────────────────────────────
    # Per-IP sliding window applied to /auth/* only.
    auth_rate_limit_requests: int = Field(default=30, ge=1, le=10000)
    auth_rate_limit_window: int = Field(default=60, ge=1, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def sqlalchemy_database_url(self) -> str:
        """
        What:  The URL handed to create_async_engine().
        How:   DATABASE_URL verbatim, or a postgresql+asyncpg URL assembled from
               the DB_* fields (URL.create escapes special characters in the
               password).
        """
        if self.database_url:
            return self.database_url
        url = URL.create(
            drivername="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read from the environment once."""
    return Settings()
