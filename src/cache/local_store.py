# src/cache/local_store.py - v2
"""Filesystem cache store (default CACHE_BACKEND=local).

Stores one gzip tar archive per key under CACHE_ROOT. Useful on self-hosted
runners where the cache root sits on a persistent volume.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from cachedirs.cache.archive import ARCHIVE_SUFFIX, create_archive, extract_archive
from cachedirs.cache.base_cache_store import BaseCacheStore, CacheServiceError

logger = logging.getLogger(__name__)


class LocalCacheStore(BaseCacheStore):
    """File-based cache store using tar archives."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()

    async def restore(self, paths: list[str], key: str) -> str | None:
        """Extract the archive for ``key`` if one exists."""
        archive = self._archive_path(key)
        if not archive.is_file():
            return None
        try:
            await asyncio.to_thread(extract_archive, archive, paths)
        except CacheServiceError:
            raise
        except Exception as e:
            raise CacheServiceError(f"Failed to restore {key}: {e}") from e
        return key

    async def save(self, paths: list[str], key: str) -> str:
        """Archive ``paths`` and atomically move the archive into place."""
        archive = self._archive_path(key)
        try:
            await asyncio.to_thread(self._write, paths, archive)
        except OSError as e:
            raise CacheServiceError(f"Failed to save {key}: {e}") from e
        return archive.name

    def _write(self, paths: list[str], archive: Path) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._root, suffix=".tmp")
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            create_archive(paths, tmp_path)
            os.replace(tmp_path, archive)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    def _archive_path(self, key: str) -> Path:
        """Return the archive path for a cache key."""
        # Percent-encoding is reversible, so distinct keys never share a file.
        safe_key = quote(key, safe="")
        return self._root / f"{safe_key}{ARCHIVE_SUFFIX}"
