"""Store connection settings (``DB_`` prefix, or ``DATABASE_URL``).

``DATABASE_URL`` wins when set; that is how SQLite
(``sqlite+aiosqlite:///content.db``) is selected for local runs and tests.
Otherwise a PostgreSQL psycopg3 URL is assembled from the DB_* parts.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote_plus

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    dsn: str | None = Field(default=None, validation_alias=AliasChoices("DATABASE_URL", "DB_DSN"))

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = "postgres"
    password: SecretStr = SecretStr("postgres")
    name: str = "content_service"
    application_name: str = "content-service"

    pool_size: int = Field(default=10, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: float = Field(default=30.0, gt=0, description="Seconds to wait for a connection")
    pool_recycle: int = Field(default=1800, ge=0)
    echo: bool = False

    # Bound on one paginated read, search or refresh; exceeding it is a 503
    query_timeout: float = Field(default=10.0, gt=0)

    startup_retry_attempts: int = Field(default=3, ge=1, le=20)
    startup_retry_delay: float = Field(default=2.0, gt=0, description="First backoff delay")

    @property
    def url(self) -> str:
        if self.dsn:
            return self.dsn
        password = quote_plus(self.password.get_secret_value())
        return (
            f"postgresql+psycopg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"
            f"?application_name={quote_plus(self.application_name)}"
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def sqlalchemy_engine_kwargs(self) -> dict[str, Any]:
        """``create_async_engine`` options; SQLite gets no pool sizing."""
        if self.is_sqlite:
            return {"echo": self.echo}
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": True,
            "pool_timeout": self.pool_timeout,
            "pool_recycle": self.pool_recycle,
        }
