# src/cache/models.py - v2
"""Cache domain models: CacheConfiguration, PathOutcome, RunReport."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CacheConfiguration(BaseModel):
    """Resolved inputs for one run. Built once at the boundary, immutable."""

    model_config = ConfigDict(frozen=True)

    cache_paths: list[str]
    key_template: str
    invalidation_pattern: str
    key_values: dict[str, str] = Field(default_factory=dict)

    @field_validator("cache_paths")
    @classmethod
    def validate_cache_paths(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("cache_paths must not be empty")
        if len(set(v)) != len(v):
            raise ValueError("cache_paths must be unique")
        return v

    @field_validator("key_values")
    @classmethod
    def normalize_key_names(cls, v: dict[str, str]) -> dict[str, str]:
        return {name.lower(): value for name, value in v.items()}

    def key_value(self, name: str) -> str | None:
        """Return the configured value for placeholder ``{name}``, if any.

        Names match case-insensitively, like host input names do.
        """
        return self.key_values.get(name.lower()) or None


class PathOutcome(BaseModel):
    """Result of the restore-or-save protocol for a single cache path."""

    path: str
    key: str
    status: Literal["hit", "saved", "failed"]
    matched_key: str | None = None
    archive_id: str | None = None
    error: str | None = None


class RunReport(BaseModel):
    """Summary of one invocation."""

    skipped: bool = False
    digest: str | None = None
    resolved_template: str | None = None
    outcomes: list[PathOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> list[PathOutcome]:
        """Outcomes whose cache-service call failed."""
        return [o for o in self.outcomes if o.status == "failed"]
