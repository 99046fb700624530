"""Models for translation cache data.

Defines the cache entry, the persisted cache snapshot and the cache statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, LetterCase, config, dataclass_json

__all__: list[str] = [
    "CacheSnapshot",
    "CacheStatistics",
    "TranslationCacheEntry",
]


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class TranslationCacheEntry(DataClassJsonMixin):
    """Translation cache entry data.

    Timestamps are epoch seconds.

    Attributes:
        text (str): Source text.
        translation (str): Translated text.
        language (str): Target language code.
        created_at (float): Entry creation time, the reference point for expiry.
        access_count (int): Number of times the entry was written or read.
        last_accessed_at (float): Last read or write time, the LRU ordering key.
    """

    text: str
    translation: str
    language: str
    created_at: float
    access_count: int = 1
    last_accessed_at: float = field(default=0.0, metadata=config(field_name="lastAccessed"))

    def touch(self, now: float) -> None:
        self.access_count += 1
        self.last_accessed_at = now


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class CacheSnapshot(DataClassJsonMixin):
    """Serialized form of the whole cache as kept in the durable store.

    Attributes:
        entries (dict[str, TranslationCacheEntry]): Entries by cache key, in insertion order.
        hits (int): Lifetime hit counter.
        misses (int): Lifetime miss counter.
        last_saved (float): Epoch seconds of the save.
    """

    entries: dict[str, TranslationCacheEntry] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0
    last_saved: float = 0.0


@dataclass
class CacheStatistics:
    """Cache usage statistics.

    Attributes:
        total_entries (int): Number of cache entries.
        cache_size (int): Approximate serialized size of the cache in bytes.
        hit_rate (float): hits / (hits + misses), 0.0 before any lookup.
        oldest_entry_age (float | None): Seconds since the oldest entry was created.
        newest_entry_age (float | None): Seconds since the newest entry was created.
        hits (int): Lifetime hit counter.
        misses (int): Lifetime miss counter.
    """

    total_entries: int = 0
    cache_size: int = 0
    hit_rate: float = 0.0
    oldest_entry_age: float | None = None
    newest_entry_age: float | None = None
    hits: int = 0
    misses: int = 0
