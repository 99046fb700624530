"""Data models for Site Companion.

This package contains dataclass definitions for configuration, the translation cache,
translation results, the display-language state and the player-count monitor.
"""

from __future__ import annotations

from models.cache_models import CacheSnapshot, CacheStatistics, TranslationCacheEntry
from models.config_models import Config
from models.language_models import LANGUAGE_NAMES, DisplayState, LanguageState
from models.monitor_models import (
    DailyPeakRecord,
    PlayerSnapshot,
    ServerConfig,
    SnapshotRecord,
    TimeSeriesPoint,
)
from models.translation_models import TranslationResult

__all__: list[str] = [
    "LANGUAGE_NAMES",
    "CacheSnapshot",
    "CacheStatistics",
    "Config",
    "DailyPeakRecord",
    "DisplayState",
    "LanguageState",
    "PlayerSnapshot",
    "ServerConfig",
    "SnapshotRecord",
    "TimeSeriesPoint",
    "TranslationCacheEntry",
    "TranslationResult",
]
