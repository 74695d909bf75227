# src/pipeline/orchestrator.py - v2
"""Cache run orchestrator.

Drives one invocation:
  1. Pre-check: skip the run when none of the cache paths exist.
  2. Digest: hash the trigger files once.
  3. Template: resolve every placeholder except ``{path}``.
  4. Per path: derive the key, restore it, save on a miss.

Paths are independent once the digest is known, so they may run
concurrently (``max_concurrency``). Outcomes are always reported in input
order.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from cachedirs.cache.base_cache_store import CacheServiceError
from cachedirs.cache.digest import compute_digest
from cachedirs.cache.globber import glob_files
from cachedirs.cache.keys import derive_key, resolve_template
from cachedirs.cache.models import CacheConfiguration, PathOutcome, RunReport
from cachedirs.logging.context import path_context

if TYPE_CHECKING:
    from cachedirs.cache.base_cache_store import BaseCacheStore
    from cachedirs.config.settings import Settings

logger = logging.getLogger(__name__)


def path_exists(path: str) -> bool:
    """Check a cache path, resolving it against the working directory first."""
    return os.path.exists(os.path.abspath(os.path.expanduser(path)))


class CacheOrchestrator:
    """Run the restore-or-save protocol for every configured cache path.

    Args:
        store: Cache service backend.
        settings: Tool settings (hash algorithm, concurrency, error policy).
        exists: Filesystem existence check used by the pre-check.
        glob: Pattern-to-paths collaborator used for the digest.
        platform: Platform name used for the ``{prefix}`` fallback.
    """

    def __init__(
        self,
        store: BaseCacheStore,
        settings: Settings,
        exists: Callable[[str], bool] = path_exists,
        glob: Callable[[str], Iterable[str]] = glob_files,
        platform: str = sys.platform,
    ) -> None:
        self._store = store
        self._settings = settings
        self._exists = exists
        self._glob = glob
        self._platform = platform

    async def run(self, config: CacheConfiguration) -> RunReport:
        """Execute the run.

        Returns:
            RunReport with one outcome per path, or ``skipped=True`` when no
            cache path exists.

        Raises:
            ConfigurationError: A key placeholder has no value.
            TriggerFileError: A trigger file could not be read.
            CacheServiceError: A restore or save call failed. With
                ``continue_on_cache_error`` this is raised only after every
                path has been processed.
        """
        # A path produced by a later step is reported as missing here; the
        # run is then skipped rather than failed.
        if not any(self._exists(path) for path in config.cache_paths):
            logger.warning(
                "None of the cache paths exist, skipping cache: %s",
                ", ".join(config.cache_paths),
            )
            return RunReport(skipped=True)

        digest, resolved_template = await self._resolve(config)
        logger.debug("Resolved key template: %s", resolved_template)

        outcomes = await self._process_all(config.cache_paths, resolved_template, digest)
        report = RunReport(
            digest=digest,
            resolved_template=resolved_template,
            outcomes=outcomes,
        )

        if report.failures:
            raise CacheServiceError(
                f"Cache operation failed for {len(report.failures)} path(s): "
                + ", ".join(o.path for o in report.failures)
            )
        return report

    async def plan(self, config: CacheConfiguration) -> dict[str, str]:
        """Compute the key for every cache path without calling the store."""
        digest, resolved_template = await self._resolve(config)
        return {
            path: derive_key(resolved_template, path, digest)
            for path in config.cache_paths
        }

    async def _resolve(self, config: CacheConfiguration) -> tuple[str, str]:
        digest = await asyncio.to_thread(
            compute_digest,
            config.invalidation_pattern,
            self._settings.hash_algorithm,
            self._glob,
        )
        resolved_template = resolve_template(
            config.key_template, config.key_value, digest, platform=self._platform
        )
        return digest, resolved_template

    async def _process_all(
        self, paths: list[str], resolved_template: str, digest: str
    ) -> list[PathOutcome]:
        if self._settings.max_concurrency == 1:
            return [
                await self._process_path(path, resolved_template, digest)
                for path in paths
            ]

        semaphore = asyncio.Semaphore(self._settings.max_concurrency)

        async def _bounded(path: str) -> PathOutcome:
            async with semaphore:
                return await self._process_path(path, resolved_template, digest)

        results = await asyncio.gather(
            *(_bounded(path) for path in paths), return_exceptions=True
        )
        # In-flight paths are allowed to finish; the first failure in input
        # order is the one reported.
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    async def _process_path(
        self, path: str, resolved_template: str, digest: str
    ) -> PathOutcome:
        key = derive_key(resolved_template, path, digest)
        with path_context(path, key):
            try:
                matched_key = await self._store.restore([path], key)
                if matched_key:
                    logger.info("Cache hit on key: %s", matched_key)
                    return PathOutcome(
                        path=path, key=key, status="hit", matched_key=matched_key
                    )

                archive_id = await self._store.save([path], key)
                logger.info("Cache created with key: %s", key)
                logger.debug("Archive id for %s: %s", path, archive_id)
                return PathOutcome(
                    path=path, key=key, status="saved", archive_id=str(archive_id)
                )
            except CacheServiceError as e:
                if not self._settings.continue_on_cache_error:
                    raise CacheServiceError(f"Cache path {path}: {e}") from e
                logger.error("Cache operation failed for path %s: %s", path, e)
                return PathOutcome(path=path, key=key, status="failed", error=str(e))
