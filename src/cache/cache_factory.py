# src/cache/cache_factory.py - v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from cachedirs.cache.base_cache_store import BaseCacheStore
from cachedirs.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Tool settings. Defaults to the local backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "local" if settings is None else settings.cache_backend

    if backend == "local":
        from cachedirs.cache.local_store import LocalCacheStore
        cache_root = "~/.cache/cachedirs" if settings is None else settings.cache_root
        return LocalCacheStore(cache_root=cache_root)

    if backend == "s3":
        from cachedirs.cache.s3_store import S3CacheStore
        if settings is None or not settings.cache_s3_bucket:
            raise ValueError(
                "CACHEDIRS_CACHE_S3_BUCKET must be set when CACHE_BACKEND=s3"
            )
        return S3CacheStore(
            bucket=settings.cache_s3_bucket,
            prefix=settings.cache_s3_prefix,
            region=settings.cache_s3_region or None,
            endpoint_url=settings.cache_s3_endpoint_url or None,
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
