"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All credentials come from environment variables or .env (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - effective_database_url always targets an async driver

Design Decisions:
    - DATABASE_URL wins when set; otherwise the URL is assembled from the
      DATABASE_HOST/PORT/USER/PASSWORD/NAME/SSLMODE parts
    - Pool knobs mirror the asyncpg pool the service was first deployed with:
      10 connections, hourly recycle, 30s background ping
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    request_timeout_seconds: float = 60.0
    shutdown_grace_seconds: float = 30.0
    forwarded_allow_ips: str = "127.0.0.1"

    # Database
    database_url: str | None = None
    database_host: str = "localhost"
    database_port: int = 5432
    database_user: str = "postgres"
    database_password: str = "postgres"
    database_name: str = "userapi"
    database_sslmode: str = "disable"

    database_pool_size: int = 10
    database_max_overflow: int = 0
    database_pool_recycle_seconds: int = 3600
    database_health_check_seconds: float = 30.0
    repository_timeout_seconds: float = 3.0
    run_migrations: bool = True

    # API
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str | None) -> str | None:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @property
    def effective_database_url(self) -> str:
        """Return the async SQLAlchemy URL the engine and migrations connect to."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            "postgresql+asyncpg",
            username=self.database_user,
            password=self.database_password,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
            query={"ssl": self.database_sslmode or "disable"},
        )
        return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()
