"""Library configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuditSettings(BaseSettings):
    """Audit settings loaded from `FIELDAUDIT_*` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDAUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Diagnostics stay silent unless explicitly enabled
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "WARNING", "ERROR"] = Field(default="ERROR")


@lru_cache
def get_settings() -> AuditSettings:
    """Get cached settings instance."""
    return AuditSettings()
