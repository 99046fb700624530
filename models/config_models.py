"""Configuration data models for the site companion service.

Each dataclass mirrors one section of ``site_companion.ini``. Defaults are usable as-is,
so the service runs with an empty configuration file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__: list[str] = [
    "Cache",
    "Config",
    "General",
    "Monitor",
    "Server",
    "Translation",
]


@dataclass
class General:
    DEBUG: bool = False
    SCRIPT_NAME: str = ""
    LOG_FILE: str = "site_companion.log"
    STATE_DB: str = "data/state.sqlite3"


@dataclass
class Translation:
    ENGINE: list[str] = field(default_factory=lambda: ["google", "libre", "dictionary"])
    NATIVE_LANGUAGE: str = "zh"
    SECOND_LANGUAGE: str = "en"
    TIMEOUT: float = 10.0
    GOOGLE_URL: str = "https://translate.googleapis.com/translate_a/single"
    LIBRE_URL: str = "https://libretranslate.de/translate"
    PRELOAD_PHRASES: bool = True


@dataclass
class Cache:
    MAX_ENTRIES: int = 1000
    MAX_BYTES: int = 5 * 1024 * 1024
    EXPIRY_DAYS: float = 7.0
    SAVE_DELAY: float = 1.0
    SWEEP_INTERVAL: float = 3600.0
    EVICTION_RATIO: float = 0.2


@dataclass
class Monitor:
    SERVERS: list[dict[str, Any]] = field(default_factory=list)
    API_URL: str = "https://servers-frontend.fivem.net/api/servers/single/"
    POLL_INTERVAL: float = 60.0
    TIMEOUT: float = 10.0
    LOG_DIR: str = "data/fivem"


@dataclass
class Server:
    HOST: str = "127.0.0.1"
    PORT: int = 8080


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    CACHE: Cache = field(default_factory=Cache)
    MONITOR: Monitor = field(default_factory=Monitor)
    SERVER: Server = field(default_factory=Server)
