"""HTTP application settings (``APP_`` prefix)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "staging", "production", "test"]


class AppSettings(BaseSettings):
    """Example: APP_ENVIRONMENT=production APP_DISABLE_DOCS=true"""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    service_name: str = Field(default="content-service", pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$")
    title: str = "Content Service API"
    description: str = "Topics, posts and engagement served from materialized aggregate views"
    version: str = Field(default="1.0.0", pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$")
    environment: Environment = "development"
    api_prefix: str = Field(default="/api/v1", pattern=r"^/.*$")
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    disable_docs: bool = Field(default=False, description="Hide Swagger, ReDoc and the schema")
    metrics_enabled: bool = Field(default=True, description="Serve Prometheus text at /metrics")
    create_schema_on_startup: bool = Field(
        default=False, description="create_all() at startup; use Alembic outside development"
    )

    def docs_kwargs(self) -> dict[str, Any]:
        """``FastAPI(...)`` keyword arguments for the documentation routes."""
        if self.disable_docs:
            return {"docs_url": None, "redoc_url": None, "openapi_url": None}
        return {}
