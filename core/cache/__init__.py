"""Translation cache package.

Provides the bounded translation cache and its debounced persistence.
"""

from __future__ import annotations

from core.cache.manager import TranslationCacheManager
from core.cache.write_scheduler import DebouncedWriter

__all__: list[str] = ["DebouncedWriter", "TranslationCacheManager"]
