# tests/conftest.py - v2
"""Shared test fixtures for unit tests.

Provides an in-memory cache store, trigger files and default settings.
No network access: the S3 client is mocked where used.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cachedirs.cache.base_cache_store import BaseCacheStore
from cachedirs.cache.models import CacheConfiguration
from cachedirs.config.settings import Settings
from cachedirs.logging.context import clear_context


class InMemoryCacheStore(BaseCacheStore):
    """Cache store keeping keys in a set and recording every call."""

    def __init__(self, existing: set[str] | None = None) -> None:
        self.keys: set[str] = set(existing or ())
        self.restore_calls: list[tuple[list[str], str]] = []
        self.save_calls: list[tuple[list[str], str]] = []

    async def restore(self, paths: list[str], key: str) -> str | None:
        self.restore_calls.append((paths, key))
        return key if key in self.keys else None

    async def save(self, paths: list[str], key: str) -> str:
        self.save_calls.append((paths, key))
        self.keys.add(key)
        return f"archive-{len(self.save_calls)}"


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def lock_file(tmp_path: Path) -> Path:
    """Single trigger file containing ``abc``."""
    path = tmp_path / "lock.txt"
    path.write_bytes(b"abc")
    return path


@pytest.fixture
def cache_config() -> CacheConfiguration:
    return CacheConfiguration(
        cache_paths=["/tmp/c1", "/tmp/c2"],
        key_template="{prefix}-{path}{hash}",
        invalidation_pattern="lock.txt",
    )
