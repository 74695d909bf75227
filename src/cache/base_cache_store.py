# src/cache/base_cache_store.py - v2
"""Abstract cache store interface.

A store is the cache service seen by the orchestrator: it can restore a set
of directories for a key, or archive them under a key.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheServiceError(Exception):
    """A restore or save call against the storage backend failed."""


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def restore(self, paths: list[str], key: str) -> str | None:
        """Restore ``paths`` from the entry stored under ``key``.

        Returns:
            The key that matched, or None on a miss.
        """

    @abstractmethod
    async def save(self, paths: list[str], key: str) -> str:
        """Archive ``paths`` under ``key``.

        Returns:
            Backend-specific archive identifier.
        """
