"""Tests for TranslationCacheManager.

Tests lookup, expiry, capacity limits, persistence and statistics.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

import pytest

from core.cache.manager import SECONDS_PER_DAY, TranslationCacheManager
from core.storage.kv_store import TRANSLATION_CACHE_KEY, KeyValueStore, KeyValueStoreError, MemoryKeyValueStore
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from models.cache_models import CacheStatistics
    from models.config_models import Config


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now: float = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenStore(MemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        msg = "disk full"
        raise KeyValueStoreError(msg)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def cache_manager(config: Config, store: MemoryKeyValueStore, clock: FakeClock) -> TranslationCacheManager:
    config.CACHE.SAVE_DELAY = 0.01
    return TranslationCacheManager(config, store, clock=clock)


@pytest.fixture
async def loaded_manager(cache_manager: TranslationCacheManager) -> AsyncGenerator[TranslationCacheManager]:
    await cache_manager.component_load()
    yield cache_manager
    await cache_manager.component_teardown()


def test_miss_then_hit(cache_manager: TranslationCacheManager) -> None:
    assert cache_manager.get("你好", "en") is None

    cache_manager.set("你好", "Hello", "en")

    assert cache_manager.get("你好", "en") == "Hello"
    assert cache_manager.get("你好", "ja") is None
    stats: CacheStatistics = cache_manager.get_cache_statistics()
    assert stats.hits == 1
    assert stats.misses == 2


def test_overwrite_keeps_one_entry_per_pair(cache_manager: TranslationCacheManager) -> None:
    cache_manager.set("你好", "Hi", "en")
    cache_manager.get("你好", "en")
    cache_manager.set("你好", "Hello", "en")

    assert len(cache_manager) == 1
    assert cache_manager.get("你好", "en") == "Hello"
    entry = cache_manager._entries[StringUtils.generate_cache_key("你好", "en")]
    assert entry.access_count == 2


def test_hit_updates_access_metadata(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    cache_manager.set("首頁", "Home", "en")
    clock.advance(30)

    cache_manager.get("首頁", "en")

    entry = cache_manager._entries[StringUtils.generate_cache_key("首頁", "en")]
    assert entry.access_count == 2
    assert entry.last_accessed_at == clock.now
    assert entry.created_at == clock.now - 30


def test_expired_entry_is_a_miss_and_sweeps_others(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    cache_manager.set("舊", "old", "en")
    cache_manager.set("也舊", "also old", "en")
    clock.advance(7 * SECONDS_PER_DAY - 1)
    cache_manager.set("新", "new", "en")
    clock.advance(2)

    assert cache_manager.get("舊", "en") is None

    assert len(cache_manager) == 1
    assert cache_manager.get("新", "en") == "new"
    assert cache_manager.get_cache_statistics().misses == 1


def test_has_entry_does_not_count(cache_manager: TranslationCacheManager) -> None:
    cache_manager.set("你好", "Hello", "en")

    assert cache_manager.has_entry("你好", "en") is True
    assert ("你好", "ja") not in cache_manager
    stats = cache_manager.get_cache_statistics()
    assert stats.hits == 0
    assert stats.misses == 0


def test_entry_ceiling_evicts_least_recently_accessed(
    config: Config, store: MemoryKeyValueStore, clock: FakeClock
) -> None:
    config.CACHE.MAX_ENTRIES = 10
    manager = TranslationCacheManager(config, store, clock=clock)
    for index in range(10):
        manager.set(f"text-{index}", f"translation-{index}", "en")
        clock.advance(1)
    # touch the two oldest so they become the most recently used
    manager.get("text-0", "en")
    manager.get("text-1", "en")
    clock.advance(1)

    manager.set("text-10", "translation-10", "en")

    # 20 % of 11 entries rounds down to 2
    assert len(manager) == 9
    assert manager.has_entry("text-0", "en")
    assert manager.has_entry("text-1", "en")
    assert not manager.has_entry("text-2", "en")
    assert not manager.has_entry("text-3", "en")
    assert manager.has_entry("text-10", "en")


def test_byte_ceiling_evicts_until_under_limit(config: Config, store: MemoryKeyValueStore, clock: FakeClock) -> None:
    config.CACHE.MAX_BYTES = 2000
    manager = TranslationCacheManager(config, store, clock=clock)

    for index in range(20):
        manager.set(f"text-{index}", "x" * 100, "en")
        clock.advance(1)

    assert manager.approx_byte_size <= 2000
    assert manager.has_entry("text-19", "en")
    assert not manager.has_entry("text-0", "en")


async def test_debounced_save_writes_once(
    cache_manager: TranslationCacheManager, store: MemoryKeyValueStore
) -> None:
    calls: list[str] = []
    original_set = store.set

    def recording_set(key: str, value: str) -> None:
        calls.append(key)
        original_set(key, value)

    store.set = recording_set  # type: ignore[method-assign]

    cache_manager.set("一", "one", "en")
    cache_manager.set("二", "two", "en")
    cache_manager.set("三", "three", "en")
    assert cache_manager.save_pending is True
    assert calls == []

    await asyncio.sleep(0.05)

    assert calls == [TRANSLATION_CACHE_KEY]
    assert cache_manager.save_pending is False


async def test_round_trip_through_sqlite(config: Config, tmp_path: Path, clock: FakeClock) -> None:
    with KeyValueStore(tmp_path / "state.sqlite3") as store:
        first = TranslationCacheManager(config, store, clock=clock)
        first.set("你好", "Hello", "en")
        first.get("你好", "en")
        assert first.save() is True

        second = TranslationCacheManager(config, store, clock=clock)
        second.load()

    assert second.get("你好", "en") == "Hello"
    entry = second._entries[StringUtils.generate_cache_key("你好", "en")]
    assert entry.access_count == 3
    assert second.get_cache_statistics().hits == 2


def test_persisted_payload_uses_camel_case(cache_manager: TranslationCacheManager, store: MemoryKeyValueStore) -> None:
    cache_manager.set("你好", "Hello", "en")
    cache_manager.save()

    payload = json.loads(store.data[TRANSLATION_CACHE_KEY])
    entry = next(iter(payload["entries"].values()))

    assert set(entry) == {"text", "translation", "language", "createdAt", "accessCount", "lastAccessed"}
    assert entry["translation"] == "Hello"


def test_corrupted_payload_starts_empty(
    config: Config, clock: FakeClock, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING)
    store = MemoryKeyValueStore({TRANSLATION_CACHE_KEY: "{not json"})
    manager = TranslationCacheManager(config, store, clock=clock)

    manager.load()

    assert len(manager) == 0
    assert any("corrupted" in rec.message for rec in caplog.records)


def test_save_failure_is_logged_not_raised(
    config: Config, clock: FakeClock, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING)
    manager = TranslationCacheManager(config, BrokenStore(), clock=clock)
    manager._put("你好", "Hello", "en")

    assert manager.save() is False
    assert any("Failed to save" in rec.message for rec in caplog.records)


def test_clear_resets_everything(cache_manager: TranslationCacheManager, store: MemoryKeyValueStore) -> None:
    cache_manager.set("你好", "Hello", "en")
    cache_manager.get("你好", "en")
    cache_manager.save()

    cache_manager.clear()

    assert len(cache_manager) == 0
    assert TRANSLATION_CACHE_KEY not in store.data
    assert cache_manager.save_pending is False
    stats = cache_manager.get_cache_statistics()
    assert (stats.hits, stats.misses, stats.total_entries) == (0, 0, 0)


def test_statistics_report_ages_and_hit_rate(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    empty = cache_manager.get_cache_statistics()
    assert empty.oldest_entry_age is None
    assert empty.hit_rate == 0.0

    cache_manager.set("一", "one", "en")
    clock.advance(100)
    cache_manager.set("二", "two", "en")
    clock.advance(10)
    cache_manager.get("一", "en")
    cache_manager.get("三", "en")

    stats = cache_manager.get_cache_statistics()
    assert stats.total_entries == 2
    assert stats.oldest_entry_age == 110
    assert stats.newest_entry_age == 10
    assert stats.hit_rate == 0.5
    assert stats.cache_size > 0


def test_preload_accepts_mapping_and_pairs(cache_manager: TranslationCacheManager) -> None:
    assert cache_manager.preload({"首頁": "Home", "關於": "About"}, "en") == 2
    assert cache_manager.preload([("文章", "Articles")], "en") == 1

    assert cache_manager.get("關於", "en") == "About"
    assert cache_manager.get("文章", "en") == "Articles"


async def test_component_load_drops_expired_and_teardown_flushes(
    config: Config, store: MemoryKeyValueStore, clock: FakeClock
) -> None:
    config.CACHE.SAVE_DELAY = 60.0
    seed = TranslationCacheManager(config, store, clock=clock)
    seed._put("舊", "old", "en")
    clock.advance(8 * SECONDS_PER_DAY)
    seed._put("新", "new", "en")
    seed.save()

    manager = TranslationCacheManager(config, store, clock=clock)
    await manager.component_load()
    assert manager.is_initialized is True
    assert len(manager) == 1

    manager.set("再", "again", "en")
    assert manager.save_pending is True
    await manager.component_teardown()

    reloaded = TranslationCacheManager(config, store, clock=clock)
    reloaded.load()
    assert reloaded.has_entry("再", "en")
    assert not reloaded.has_entry("舊", "en")


async def test_loaded_manager_fixture_starts_sweeper(loaded_manager: TranslationCacheManager) -> None:
    assert loaded_manager._sweeper is not None
    assert loaded_manager._sweeper.is_running is True
