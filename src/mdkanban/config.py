"""Configuration management for mdkanban."""

import sys
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BOARD_MARKER = "kanban-plugin: board"


class Settings(BaseSettings):
    """mdkanban configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="MDKANBAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Document format
    board_marker: str = Field(
        default=DEFAULT_BOARD_MARKER,
        description="Token the front matter must contain for a valid board",
    )
    include_encoding: str = Field(
        default="utf-8",
        description="Encoding used to read column include files",
    )
    slide_title_scan_lines: int = Field(
        default=3,
        description="Non-empty lines searched for a slide heading",
    )

    @field_validator("board_marker")
    @classmethod
    def check_marker(cls, v: str) -> str:
        """Reject an empty validity marker."""
        if not v.strip():
            raise ValueError("board_marker must not be empty")
        return v

    @field_validator("slide_title_scan_lines")
    @classmethod
    def check_scan_lines(cls, v: int) -> int:
        """Require at least one line to be scanned."""
        if v < 1:
            raise ValueError("slide_title_scan_lines must be >= 1")
        return v


# Code defaults only: no environment or .env lookup
DEFAULT_SETTINGS = Settings.model_construct()


def load_settings(root: Path | None = None) -> Settings:
    """Load settings from environment and .env file.

    Args:
        root: Optional directory to look for ``.env`` in.

    Returns:
        Validated Settings instance.

    Raises:
        SystemExit: If the configuration is invalid.
    """
    env_file = None
    if root:
        env_file = root / ".env"
        if not env_file.exists():
            env_file = root / ".mdkanban" / ".env"
            if not env_file.exists():
                env_file = None

    try:
        if env_file:
            # _env_file is a valid pydantic-settings parameter
            return Settings(_env_file=env_file)  # type: ignore[call-arg]
        return Settings()

    except Exception as e:
        print(f"mdkanban configuration error: {e}", file=sys.stderr)
        print("Check MDKANBAN_* environment variables and .env files.", file=sys.stderr)
        sys.exit(1)
