"""Fuzzy search settings (``SEARCH_`` prefix)."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    fuzzy_max_edits: int = Field(default=2, ge=0, le=2, description="Edits tolerated per term")
    fuzzy_prefix_length: int = Field(
        default=3, ge=0, le=10, description="Leading characters that must match exactly"
    )
    max_query_length: int = Field(default=500, ge=1)
    # Candidates pulled from the store before in-process ranking
    max_candidates: int = Field(default=1000, ge=1, le=100_000)
    default_boost: float = Field(default=1.0, ge=0.0, description="Weight of the popularity score")
