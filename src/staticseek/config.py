"""Host-side configuration for staticseek using Pydantic Settings.

The library functions never read settings on their own; the command-line host
loads :class:`Settings` once and passes the values it needs explicitly.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``STATICSEEK_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STATICSEEK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Root logging level"
    )
    log_json: bool = Field(default=True, description="Emit structured JSON log lines instead of plain text")

    # Tracing
    trace_console: bool = Field(default=False, description="Print OpenTelemetry spans to stderr")
    service_name: str = Field(default="staticseek", description="service.name resource attribute for spans")

    # Search defaults for the command-line host
    default_search_limit: int | None = Field(
        default=None, ge=1, description="Result cap applied when a search does not pass --limit"
    )

    # Artifact output
    artifact_indent: bool = Field(default=False, description="Pretty-print serialized indexes with two-space indent")

    @field_validator("log_level", mode="before")
    @classmethod
    def _lowercase_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value
