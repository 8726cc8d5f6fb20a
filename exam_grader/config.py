"""
Configuration management for the Exam Grader.

Uses Pydantic Settings for type-safe configuration loading from environment variables.
None of these settings change how an answer is graded; they only drive the
caller-side helpers (CLI, reports, audit trail, layout seeds).
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are validated at startup. Invalid values
    will raise clear validation errors.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Scoring Configuration
    # ==========================================================================
    passing_score_percent: float | None = Field(
        default=None,
        ge=0.0,
        le=100.0,
        description="Default pass threshold used when an attempt file has none",
    )

    # ==========================================================================
    # Layout Configuration
    # ==========================================================================
    seed_salt: str = Field(
        default="",
        description="Salt mixed into seeds derived from attempt identifiers",
    )

    # ==========================================================================
    # Output Configuration
    # ==========================================================================
    output_directory: Path = Field(
        default=Path("./output"),
        description="Directory for reports and audit records",
    )

    audit_enabled: bool = Field(
        default=True,
        description="Whether the CLI writes an audit record for every graded attempt",
    )

    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is one the logging module knows."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("output_directory")
    @classmethod
    def validate_output_directory(cls, v: Path) -> Path:
        """Ensure output directory exists or can be created."""
        v.mkdir(parents=True, exist_ok=True)
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
