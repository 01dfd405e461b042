"""Logging settings (``LOG_`` prefix).

Example: LOG_LEVEL=debug LOG_JSON=false LOG_FILE_PATH=logs/content.jsonl
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )

    service_name: str = Field(default="content-service", description="Static 'service' field")
    level: LogLevel = "INFO"
    json_logs: bool = Field(
        default=True,
        validation_alias=AliasChoices("log_json", "json_logs"),
        description="JSON Lines on stderr",
    )
    file_path: Path | None = Field(
        default=None, description="Rotating JSONL file; unset disables file output"
    )
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    file_backup_count: int = Field(default=5, ge=0, le=100)
    include_context: bool = Field(
        default=True, description="Attach request_id/user_id from the log context"
    )
    capture_warnings: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
