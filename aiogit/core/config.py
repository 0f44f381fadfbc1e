"""Unified configuration via pydantic-settings."""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AiogitConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AIOGIT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # git
    git_binary: str = "git"
    repository: Path = Path()
    encoding: str = "utf-8"

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5

    # Display
    log_max_entries: int = 10

    @field_validator("git_binary")
    @classmethod
    def validate_git_binary(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("git_binary must not be empty")
        return v

    @field_validator("repository")
    @classmethod
    def resolve_repository(cls, v: Path) -> Path:
        resolved = v.expanduser().resolve()
        if not resolved.is_dir():
            raise ValueError(f"repository directory does not exist: {resolved}")
        return resolved

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("log_max_entries")
    @classmethod
    def validate_log_max_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("log_max_entries must be at least 1")
        return v
