"""Configuration management for bid reconciliation.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
BID_ prefix, or via a .env file in the working directory.

Column positions are fixed by convention in vendor and bid sheets and are
intentionally not part of the settings.

Environment Variables:
    BID_BACKUP_DIR: Directory receiving bid file backups (default: .)
    BID_BACKUP_TIMESTAMP_FORMAT: strftime format of the backup timestamp
        (default: %Y%m%d.%H%M%S.%f)
    BID_LOG_LEVEL: Logging level (default: INFO)
    BID_DEBUG: Enable debug mode (default: false)
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        BID_BACKUP_DIR=/srv/bids/backups
        BID_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="BID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Backup Settings
    # =========================================================================

    backup_dir: str = "."
    """Directory where backup.<timestamp>.xlsx copies of the bid file are written."""

    backup_timestamp_format: str = "%Y%m%d.%H%M%S.%f"
    """strftime format for the backup timestamp. Must include microseconds (%f)."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging and error details."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("backup_timestamp_format")
    @classmethod
    def validate_timestamp_format(cls, v: str) -> str:
        """Validate the timestamp format resolves to microseconds."""
        if "%f" not in v:
            raise ValueError(
                f"backup_timestamp_format must include microseconds (%f), got {v!r}"
            )
        if "/" in v or "\\" in v:
            raise ValueError("backup_timestamp_format must not contain path separators")
        return v

    @field_validator("backup_dir")
    @classmethod
    def validate_backup_dir(cls, v: str) -> str:
        """Validate the backup directory is non-empty."""
        if not v.strip():
            raise ValueError("backup_dir must be a non-empty path")
        return v.strip()

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def backup_path(self) -> Path:
        """Get the backup directory as a Path."""
        return Path(self.backup_dir)

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary for logging."""
        return {
            "backup_dir": self.backup_dir,
            "backup_timestamp_format": self.backup_timestamp_format,
            "log_level": self.log_level,
            "debug": self.debug,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if not s.backup_path.is_dir():
        logger.warning(
            f"Backup directory {s.backup_dir!r} does not exist. "
            "Backups of the bid file will fail until it is created."
        )

    summary = ", ".join(f"{key}={value}" for key, value in s.to_safe_dict().items())
    logger.info(f"Configuration loaded: {summary}")


# Create the global settings instance
settings = Settings()
