# tests/unit/cache/test_cache_factory.py - v4
"""Tests for cache/cache_factory.py."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from cachedirs.cache.cache_factory import create_cache_store
from cachedirs.cache.local_store import LocalCacheStore
from cachedirs.cache.s3_store import S3CacheStore
from cachedirs.config.settings import ConfigurationError, Settings


class TestCreateCacheStore:
    def test_default_local(self):
        store = create_cache_store()
        assert isinstance(store, LocalCacheStore)

    def test_local_root(self, tmp_path):
        s = Settings(_env_file=None, cache_root=tmp_path)
        store = create_cache_store(s)
        assert isinstance(store, LocalCacheStore)
        assert store._root == tmp_path

    def test_s3_backend(self):
        s = Settings(_env_file=None, cache_backend="s3", cache_s3_bucket="ci-cache")
        with patch("boto3.client"):
            store = create_cache_store(s)
        assert isinstance(store, S3CacheStore)

    def test_s3_missing_bucket_rejected_by_settings(self):
        with pytest.raises(ConfigurationError, match="BUCKET"):
            Settings(_env_file=None, cache_backend="s3")

    def test_s3_missing_bucket_in_factory(self):
        s = Settings.model_construct(cache_backend="s3", cache_s3_bucket="")
        with pytest.raises(ValueError, match="BUCKET"):
            create_cache_store(s)

    def test_unsupported_backend(self):
        s = Settings.model_construct(cache_backend="ftp")
        with pytest.raises(ValueError, match="ftp"):
            create_cache_store(s)
