# tests/unit/pipeline/test_orchestrator.py - v2
"""Tests for pipeline/orchestrator.py - restore-or-save protocol."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from cachedirs.cache.base_cache_store import CacheServiceError
from cachedirs.cache.digest import TriggerFileError
from cachedirs.cache.models import CacheConfiguration
from cachedirs.config.settings import ConfigurationError, Settings
from cachedirs.pipeline.orchestrator import CacheOrchestrator, path_exists

ABC_DIGEST = "-" + hashlib.sha256(b"abc").hexdigest()


def make_orchestrator(store, settings, lock_file=None, exists=lambda _: True, glob=None):
    if glob is None:
        glob = MagicMock(return_value=[str(lock_file)] if lock_file else [])
    return CacheOrchestrator(store, settings, exists=exists, glob=glob, platform="linux")


class TestPreCheck:
    @pytest.mark.asyncio
    async def test_short_circuit_when_no_path_exists(self, store, settings, caplog):
        caplog.set_level(logging.WARNING, logger="cachedirs")
        glob = MagicMock(return_value=[])
        config = CacheConfiguration(
            cache_paths=["/does/not/exist/a", "/does/not/exist/b"],
            key_template="{hash}",
            invalidation_pattern="*.lock",
        )
        report = await CacheOrchestrator(store, settings, glob=glob).run(config)

        assert report.skipped is True
        assert store.restore_calls == []
        assert store.save_calls == []
        glob.assert_not_called()
        assert "None of the cache paths exist" in caplog.text

    @pytest.mark.asyncio
    async def test_one_existing_path_is_enough(self, store, settings, tmp_path):
        (tmp_path / "present").mkdir()
        config = CacheConfiguration(
            cache_paths=[str(tmp_path / "absent"), str(tmp_path / "present")],
            key_template="{path}{hash}",
            invalidation_pattern="*.lock",
        )
        orchestrator = CacheOrchestrator(store, settings, glob=lambda _: [])
        report = await orchestrator.run(config)
        assert report.skipped is False
        assert len(store.restore_calls) == 2

    def test_path_exists_relative(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "build").mkdir()
        assert path_exists("./build") is True
        assert path_exists("./missing") is False


class TestRun:
    @pytest.mark.asyncio
    async def test_end_to_end_keys(self, store, settings, cache_config, lock_file):
        report = await make_orchestrator(store, settings, lock_file).run(cache_config)

        assert report.digest == ABC_DIGEST
        assert report.resolved_template == "linux--{path}" + ABC_DIGEST
        assert [o.key for o in report.outcomes] == [
            "linux--_tmp_c1" + ABC_DIGEST,
            "linux--_tmp_c2" + ABC_DIGEST,
        ]
        assert store.restore_calls == [
            (["/tmp/c1"], "linux--_tmp_c1" + ABC_DIGEST),
            (["/tmp/c2"], "linux--_tmp_c2" + ABC_DIGEST),
        ]

    @pytest.mark.asyncio
    async def test_miss_saves_once(self, store, settings, cache_config, lock_file, caplog):
        caplog.set_level(logging.INFO, logger="cachedirs")
        report = await make_orchestrator(store, settings, lock_file).run(cache_config)

        assert [o.status for o in report.outcomes] == ["saved", "saved"]
        assert [call[1] for call in store.save_calls] == [o.key for o in report.outcomes]
        assert f"Cache created with key: linux--_tmp_c1{ABC_DIGEST}" in caplog.text

    @pytest.mark.asyncio
    async def test_hit_never_saves(self, store, settings, cache_config, lock_file, caplog):
        caplog.set_level(logging.INFO, logger="cachedirs")
        store.keys.add("linux--_tmp_c1" + ABC_DIGEST)
        report = await make_orchestrator(store, settings, lock_file).run(cache_config)

        assert [o.status for o in report.outcomes] == ["hit", "saved"]
        assert report.outcomes[0].matched_key == "linux--_tmp_c1" + ABC_DIGEST
        assert [paths for paths, _ in store.save_calls] == [["/tmp/c2"]]
        assert f"Cache hit on key: linux--_tmp_c1{ABC_DIGEST}" in caplog.text

    @pytest.mark.asyncio
    async def test_second_run_hits(self, store, settings, cache_config, lock_file):
        orchestrator = make_orchestrator(store, settings, lock_file)
        first = await orchestrator.run(cache_config)
        second = await orchestrator.run(cache_config)
        assert [o.key for o in first.outcomes] == [o.key for o in second.outcomes]
        assert [o.status for o in second.outcomes] == ["hit", "hit"]
        assert len(store.save_calls) == 2

    @pytest.mark.asyncio
    async def test_digest_computed_once(self, store, settings, cache_config, lock_file):
        glob = MagicMock(return_value=[str(lock_file)])
        await make_orchestrator(store, settings, glob=glob).run(cache_config)
        glob.assert_called_once_with("lock.txt")

    @pytest.mark.asyncio
    async def test_matched_key_may_differ(self, settings, cache_config, lock_file):
        store = MagicMock()
        store.restore = AsyncMock(return_value="linux--older")
        store.save = AsyncMock()
        report = await make_orchestrator(store, settings, lock_file).run(cache_config)
        assert all(o.matched_key == "linux--older" for o in report.outcomes)
        store.save.assert_not_called()


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_placeholder_before_store_calls(self, store, settings, lock_file):
        config = CacheConfiguration(
            cache_paths=["a"], key_template="{env}-{hash}", invalidation_pattern="x"
        )
        with pytest.raises(ConfigurationError, match="key-env"):
            await make_orchestrator(store, settings, lock_file).run(config)
        assert store.restore_calls == []

    @pytest.mark.asyncio
    async def test_unreadable_trigger_file(self, store, settings, cache_config, tmp_path):
        glob = MagicMock(return_value=[str(tmp_path / "vanished.lock")])
        with pytest.raises(TriggerFileError):
            await make_orchestrator(store, settings, glob=glob).run(cache_config)
        assert store.restore_calls == []

    @pytest.mark.asyncio
    async def test_service_error_aborts_by_default(self, settings, cache_config, lock_file):
        store = MagicMock()
        store.restore = AsyncMock(side_effect=CacheServiceError("timeout"))
        store.save = AsyncMock()
        with pytest.raises(CacheServiceError, match="/tmp/c1: timeout"):
            await make_orchestrator(store, settings, lock_file).run(cache_config)
        assert store.restore.await_count == 1

    @pytest.mark.asyncio
    async def test_continue_on_cache_error(self, cache_config, lock_file, caplog):
        caplog.set_level(logging.ERROR, logger="cachedirs")
        settings = Settings(_env_file=None, continue_on_cache_error=True)
        store = MagicMock()
        store.restore = AsyncMock(return_value=None)
        store.save = AsyncMock(side_effect=[CacheServiceError("quota"), "archive-2"])

        with pytest.raises(CacheServiceError, match=r"1 path\(s\): /tmp/c1"):
            await make_orchestrator(store, settings, lock_file).run(cache_config)

        assert store.save.await_count == 2
        assert "Cache operation failed for path /tmp/c1: quota" in caplog.text


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_parallel_preserves_order(self, lock_file):
        settings = Settings(_env_file=None, max_concurrency=3)
        active = 0
        peak = 0

        async def slow_restore(paths, key):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01 if paths == ["p0"] else 0)
            active -= 1
            return key

        store = MagicMock()
        store.restore = AsyncMock(side_effect=slow_restore)
        config = CacheConfiguration(
            cache_paths=["p0", "p1", "p2", "p3"],
            key_template="{path}{hash}",
            invalidation_pattern="x",
        )
        report = await make_orchestrator(store, settings, lock_file).run(config)

        assert [o.path for o in report.outcomes] == ["p0", "p1", "p2", "p3"]
        assert 1 < peak <= 3

    @pytest.mark.asyncio
    async def test_parallel_failure_raised(self, lock_file):
        settings = Settings(_env_file=None, max_concurrency=2)
        store = MagicMock()
        store.restore = AsyncMock(side_effect=[None, CacheServiceError("down")])
        store.save = AsyncMock(return_value="id")
        config = CacheConfiguration(
            cache_paths=["p0", "p1"], key_template="{path}{hash}", invalidation_pattern="x"
        )
        with pytest.raises(CacheServiceError, match="p1"):
            await make_orchestrator(store, settings, lock_file).run(config)


class TestPlan:
    @pytest.mark.asyncio
    async def test_plan_has_no_store_calls(self, store, settings, cache_config, lock_file):
        keys = await make_orchestrator(store, settings, lock_file).plan(cache_config)
        assert keys == {
            "/tmp/c1": "linux--_tmp_c1" + ABC_DIGEST,
            "/tmp/c2": "linux--_tmp_c2" + ABC_DIGEST,
        }
        assert store.restore_calls == []
