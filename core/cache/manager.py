"""Translation cache manager.

Keeps translations in memory keyed by (text, target language), expires them after a fixed
age, bounds the cache by entry count and serialized size with least-recently-accessed
eviction, and persists the whole cache as one JSON blob in the key/value store.
"""

from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING, ClassVar

from core.cache.write_scheduler import DebouncedWriter
from core.storage.kv_store import TRANSLATION_CACHE_KEY, KeyValueStoreError
from models.cache_models import CacheSnapshot, CacheStatistics, TranslationCacheEntry
from utils.interval_timer import IntervalTimer
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Iterable, Mapping

    from core.storage.kv_store import KeyValueStore, MemoryKeyValueStore
    from models.config_models import Config

__all__: list[str] = ["TranslationCacheManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SECONDS_PER_DAY: int = 24 * 60 * 60


class TranslationCacheManager:
    """Bounded, expiring translation cache with debounced persistence.

    The read/write API is synchronous; only persistence and the hourly sweep are
    scheduled on the event loop.

    Attributes:
        STORAGE_KEY (ClassVar[str]): Key of the serialized cache in the key/value store.
        max_entries (int): Entry count ceiling.
        max_bytes (int): Serialized size ceiling in bytes.
        expiry_seconds (float): Entry lifetime measured from creation.
        eviction_ratio (float): Minimum share of entries removed by one eviction.
    """

    STORAGE_KEY: ClassVar[str] = TRANSLATION_CACHE_KEY

    def __init__(
        self,
        config: Config,
        store: KeyValueStore | MemoryKeyValueStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache manager.

        Args:
            config (Config): Application configuration.
            store (KeyValueStore | MemoryKeyValueStore | None): Durable store. None keeps the cache in memory only.
            clock (Callable[[], float]): Source of epoch seconds.
        """
        self.config: Config = config
        self.max_entries: int = config.CACHE.MAX_ENTRIES
        self.max_bytes: int = config.CACHE.MAX_BYTES
        self.expiry_seconds: float = config.CACHE.EXPIRY_DAYS * SECONDS_PER_DAY
        self.eviction_ratio: float = config.CACHE.EVICTION_RATIO

        self._store: KeyValueStore | MemoryKeyValueStore | None = store
        self._clock: Callable[[], float] = clock
        self._entries: dict[str, TranslationCacheEntry] = {}
        self._entry_sizes: dict[str, int] = {}
        self._hits: int = 0
        self._misses: int = 0
        self._writer: DebouncedWriter = DebouncedWriter(self.save, delay=config.CACHE.SAVE_DELAY)
        self._sweeper: IntervalTimer | None = None
        self._is_initialized: bool = False
        logger.debug("TranslationCacheManager instance created")

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def save_pending(self) -> bool:
        return self._writer.is_pending

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: tuple[str, str]) -> bool:
        text, language = item
        return self.has_entry(text, language)

    def has_entry(self, text: str, language: str) -> bool:
        """Report whether a fresh entry exists, without touching counters or access metadata."""
        entry: TranslationCacheEntry | None = self._entries.get(StringUtils.generate_cache_key(text, language))
        return entry is not None and not self._is_expired(entry, self._clock())

    async def component_load(self) -> None:
        """Restore the cache from the durable store and start the hourly sweep."""
        logger.info("TranslationCacheManager initialization started")
        self.load()
        self.cleanup_expired_entries()
        self._sweeper = IntervalTimer(
            self.config.CACHE.SWEEP_INTERVAL,
            self._scheduled_maintenance,
            name="cache-sweep",
        )
        self._sweeper.start()
        self._is_initialized = True
        logger.info("TranslationCacheManager initialized with %d entries", len(self._entries))

    async def component_teardown(self) -> None:
        """Stop the sweep timer and flush any pending save."""
        logger.info("TranslationCacheManager shutdown started")
        if self._sweeper is not None:
            await self._sweeper.stop(cancel_pending=True)
            self._sweeper = None
        self._writer.flush()
        self._is_initialized = False
        logger.info("TranslationCacheManager shutdown completed")

    async def _scheduled_maintenance(self) -> None:
        self.cleanup_expired_entries()
        self.save()

    def get(self, text: str, language: str) -> str | None:
        """Return the cached translation of `text` into `language`, if present and fresh.

        A hit updates the entry's access metadata. A stale entry counts as a miss and
        triggers a sweep of every expired entry.

        Args:
            text (str): Source text.
            language (str): Target language code.

        Returns:
            str | None: The translation, or None on a miss.
        """
        key: str = StringUtils.generate_cache_key(text, language)
        entry: TranslationCacheEntry | None = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        now: float = self._clock()
        if self._is_expired(entry, now):
            self._misses += 1
            logger.debug("Cache entry expired: %s", key[:16])
            self.cleanup_expired_entries(now)
            return None

        entry.touch(now)
        self._hits += 1
        return entry.translation

    def set(self, text: str, translation: str, language: str) -> None:
        """Insert or overwrite the translation of `text` into `language`.

        Args:
            text (str): Source text.
            translation (str): Translated text.
            language (str): Target language code.
        """
        self._put(text, translation, language)
        self._enforce_limits()
        self._writer.request()

    def preload(self, translations: Mapping[str, str] | Iterable[tuple[str, str]], language: str) -> int:
        """Warm the cache with known translations into `language`.

        Args:
            translations (Mapping[str, str] | Iterable[tuple[str, str]]): Source text to translation pairs.
            language (str): Target language code.

        Returns:
            int: Number of entries written.
        """
        pairs = translations.items() if hasattr(translations, "items") else translations
        count: int = 0
        for text, translation in pairs:
            self._put(text, translation, language)
            count += 1
        if count:
            self._enforce_limits()
            self._writer.request()
        logger.info("Preloaded %d translations for '%s'", count, language)
        return count

    def clear(self) -> None:
        """Empty the cache, reset the counters and delete the durable copy."""
        self._writer.cancel()
        self._entries.clear()
        self._entry_sizes.clear()
        self._hits = 0
        self._misses = 0
        if self._store is not None:
            try:
                self._store.delete(self.STORAGE_KEY)
            except KeyValueStoreError as err:
                logger.warning("Failed to delete the stored translation cache: %s", err)
        logger.info("Translation cache cleared")

    def cleanup_expired_entries(self, now: float | None = None) -> int:
        """Remove every expired entry.

        Returns:
            int: Number of entries removed.
        """
        now = self._clock() if now is None else now
        expired: list[str] = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            self._remove(key)
        if expired:
            logger.info("Removed %d expired cache entries", len(expired))
            self._writer.request()
        return len(expired)

    def get_cache_statistics(self) -> CacheStatistics:
        """Summarize the cache contents and lookup counters.

        Returns:
            CacheStatistics: Current statistics.
        """
        now: float = self._clock()
        lookups: int = self._hits + self._misses
        created: list[float] = [entry.created_at for entry in self._entries.values()]
        return CacheStatistics(
            total_entries=len(self._entries),
            cache_size=self.approx_byte_size,
            hit_rate=self._hits / lookups if lookups else 0.0,
            oldest_entry_age=now - min(created) if created else None,
            newest_entry_age=now - max(created) if created else None,
            hits=self._hits,
            misses=self._misses,
        )

    @property
    def approx_byte_size(self) -> int:
        return sum(self._entry_sizes.values())

    def load(self) -> None:
        """Replace the in-memory cache with the durable copy.

        A missing copy leaves the cache empty. Unreadable or corrupted data is logged and
        also leaves the cache empty.
        """
        if self._store is None:
            return
        try:
            payload: str | None = self._store.get(self.STORAGE_KEY)
        except KeyValueStoreError as err:
            logger.warning("Failed to read the stored translation cache: %s", err)
            return
        if not payload:
            logger.debug("No stored translation cache")
            return

        try:
            snapshot: CacheSnapshot = CacheSnapshot.from_json(payload)
        except (ValueError, KeyError, TypeError, AttributeError) as err:
            logger.warning("Stored translation cache is corrupted; starting empty: %s", err)
            self._entries.clear()
            self._entry_sizes.clear()
            return

        self._entries = dict(snapshot.entries)
        self._entry_sizes = {key: self._measure(key, entry) for key, entry in self._entries.items()}
        self._hits = snapshot.hits
        self._misses = snapshot.misses
        logger.info("Loaded %d translation cache entries", len(self._entries))

    def save(self) -> bool:
        """Write the cache to the durable store.

        When the serialized form exceeds the byte ceiling, entries are evicted and the
        save is retried.

        Returns:
            bool: True when the cache was written.
        """
        if self._store is None:
            return False

        payload: str = self._serialize()
        while len(payload.encode("utf-8")) > self.max_bytes and self._entries:
            self._evict(self._eviction_count())
            payload = self._serialize()

        try:
            self._store.set(self.STORAGE_KEY, payload)
        except KeyValueStoreError as err:
            logger.warning("Failed to save the translation cache: %s", err)
            return False
        logger.debug("Saved %d translation cache entries", len(self._entries))
        return True

    def _serialize(self) -> str:
        snapshot = CacheSnapshot(
            entries=self._entries,
            hits=self._hits,
            misses=self._misses,
            last_saved=self._clock(),
        )
        return snapshot.to_json(ensure_ascii=False)

    def _put(self, text: str, translation: str, language: str) -> None:
        now: float = self._clock()
        key: str = StringUtils.generate_cache_key(text, language)
        entry = TranslationCacheEntry(
            text=text,
            translation=translation,
            language=language,
            created_at=now,
            access_count=1,
            last_accessed_at=now,
        )
        self._entries[key] = entry
        self._entry_sizes[key] = self._measure(key, entry)

    def _remove(self, key: str) -> None:
        self._entries.pop(key, None)
        self._entry_sizes.pop(key, None)

    def _is_expired(self, entry: TranslationCacheEntry, now: float) -> bool:
        return now - entry.created_at > self.expiry_seconds

    @staticmethod
    def _measure(key: str, entry: TranslationCacheEntry) -> int:
        return len(key.encode("utf-8")) + len(entry.to_json(ensure_ascii=False).encode("utf-8"))

    def _over_limits(self) -> bool:
        return len(self._entries) > self.max_entries or self.approx_byte_size > self.max_bytes

    def _eviction_count(self) -> int:
        return max(1, math.floor(len(self._entries) * self.eviction_ratio))

    def _enforce_limits(self) -> None:
        if not self._over_limits():
            return
        removed: int = self._evict(self._eviction_count())
        while self._over_limits() and self._entries:
            removed += self._evict(1)
        logger.info("Evicted %d cache entries (remaining: %d)", removed, len(self._entries))

    def _evict(self, count: int) -> int:
        """Remove the `count` least-recently-accessed entries."""
        victims: list[str] = sorted(self._entries, key=lambda k: self._entries[k].last_accessed_at)[:count]
        for key in victims:
            self._remove(key)
        return len(victims)
