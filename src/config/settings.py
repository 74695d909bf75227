# src/config/settings.py - v2
"""Typed tool configuration loaded from the environment via pydantic-settings.

These settings describe how the tool runs (storage backend, hashing, logging).
The per-run cache inputs (paths, key template, trigger pattern) come from the
host environment instead, see config/inputs.py.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a required input is missing or configuration is inconsistent."""


class Settings(BaseSettings):
    """Tool settings loaded from CACHEDIRS_* variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="CACHEDIRS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Storage backend ===
    cache_backend: Literal["local", "s3"] = "local"
    cache_root: Path = Path("~/.cache/cachedirs")
    cache_s3_bucket: str = ""
    cache_s3_prefix: str = "cachedirs/"
    cache_s3_region: str = ""
    cache_s3_endpoint_url: str = ""

    # === Keys ===
    hash_algorithm: Literal["sha256", "sha1"] = "sha256"

    # === Execution ===
    max_concurrency: int = 1
    continue_on_cache_error: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["github", "text", "json"] = "github"

    # --- Validators ---

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "s3" and not self.cache_s3_bucket:
            errors.append("CACHEDIRS_CACHE_S3_BUCKET must be set when CACHE_BACKEND=s3")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
