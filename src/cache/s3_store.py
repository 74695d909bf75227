# src/cache/s3_store.py - v2
"""S3-compatible cache store (CACHE_BACKEND=s3).

Supports AWS S3, MinIO, and other S3-compatible storage.
Requires 'boto3' package: pip install boto3.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path

from cachedirs.cache.archive import ARCHIVE_SUFFIX, create_archive, extract_archive
from cachedirs.cache.base_cache_store import BaseCacheStore, CacheServiceError

logger = logging.getLogger(__name__)


class S3CacheStore(BaseCacheStore):
    """Cache store keeping one archive object per key in a bucket."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "cachedirs/",
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize S3 store.

        Args:
            bucket: S3 bucket name.
            prefix: Key prefix for all objects (e.g. "cachedirs/").
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 store: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket
        self._prefix = prefix.rstrip("/") + "/" if prefix else ""

    def _object_key(self, key: str) -> str:
        """Build the S3 object key for a cache key."""
        return f"{self._prefix}{key}{ARCHIVE_SUFFIX}"

    async def restore(self, paths: list[str], key: str) -> str | None:
        """Download and extract the archive object, if present."""
        try:
            return await asyncio.to_thread(self._restore, paths, key)
        except CacheServiceError:
            raise
        except Exception as e:
            raise CacheServiceError(f"Failed to restore {key}: {e}") from e

    async def save(self, paths: list[str], key: str) -> str:
        """Archive ``paths`` and upload them under ``key``."""
        try:
            return await asyncio.to_thread(self._save, paths, key)
        except CacheServiceError:
            raise
        except Exception as e:
            raise CacheServiceError(f"Failed to save {key}: {e}") from e

    def _exists(self, object_key: str) -> bool:
        try:
            self._s3.head_object(Bucket=self._bucket, Key=object_key)
        except self._s3.exceptions.ClientError as e:
            code = str(getattr(e, "response", {}).get("Error", {}).get("Code", ""))
            if code in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
        return True

    def _restore(self, paths: list[str], key: str) -> str | None:
        object_key = self._object_key(key)
        if not self._exists(object_key):
            return None
        with tempfile.TemporaryDirectory() as td:
            archive = Path(td) / f"restore{ARCHIVE_SUFFIX}"
            self._s3.download_file(self._bucket, object_key, str(archive))
            extract_archive(archive, paths)
        logger.debug("S3 restore: s3://%s/%s", self._bucket, object_key)
        return key

    def _save(self, paths: list[str], key: str) -> str:
        object_key = self._object_key(key)
        with tempfile.TemporaryDirectory() as td:
            archive = Path(td) / f"save{ARCHIVE_SUFFIX}"
            create_archive(paths, archive)
            self._s3.upload_file(str(archive), self._bucket, object_key)
        logger.debug("S3 save: s3://%s/%s", self._bucket, object_key)
        return f"s3://{self._bucket}/{object_key}"
