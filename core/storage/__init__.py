"""Durable key/value storage for preferences and the translation cache."""

from core.storage.kv_store import (
    LANGUAGE_PREFERENCE_KEY,
    TRANSLATION_CACHE_KEY,
    KeyValueStore,
    KeyValueStoreError,
    MemoryKeyValueStore,
)

__all__: list[str] = [
    "LANGUAGE_PREFERENCE_KEY",
    "TRANSLATION_CACHE_KEY",
    "KeyValueStore",
    "KeyValueStoreError",
    "MemoryKeyValueStore",
]
