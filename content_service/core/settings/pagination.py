"""Page size limits and page-token signing (``PAGINATION_`` prefix).

Example: PAGINATION_MAX_LIMIT=50 PAGINATION_TOKEN_SECRET=...
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    default_limit: int = Field(default=20, ge=1)
    max_limit: int = Field(default=100, ge=1, description="Larger requested limits are clamped")
    search_default_limit: int = Field(default=10, ge=1)
    # Rotating the secret invalidates every outstanding token
    token_secret: SecretStr = SecretStr("change-me-page-token-secret")
    header_name: str = Field(default="next_page", min_length=1)
