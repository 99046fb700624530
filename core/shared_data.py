"""Shared service container.

This module defines the SharedData class, which owns the configuration and every long-lived
service of the application: the key/value store, translation cache and resolver, language
context, live snapshot client, snapshot log store and the monitor poller. Services are created
in dependency order by `async_init()` and released in reverse order by `async_close()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.cache.manager import TranslationCacheManager
from core.language.context import LanguageContext
from core.monitor.fivem_client import FivemClient
from core.monitor.log_store import SnapshotLogStore
from core.monitor.poller import ServerMonitorPoller
from core.monitor.server_list import load_server_configs
from core.storage.kv_store import KeyValueStore, KeyValueStoreError, MemoryKeyValueStore
from core.trans.engines.const_phrases import COMMON_TRANSLATIONS
from core.trans.manager import TransManager
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config
    from models.monitor_models import ServerConfig


__all__: list[str] = ["SharedData"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class SharedData:
    _config: Config = field()
    _store: KeyValueStore | MemoryKeyValueStore = field(init=False)
    _cache_manager: TranslationCacheManager = field(init=False)
    _trans_manager: TransManager = field(init=False)
    _language_context: LanguageContext = field(init=False)
    _fivem_client: FivemClient = field(init=False)
    _log_store: SnapshotLogStore = field(init=False)
    _poller: ServerMonitorPoller = field(init=False)

    async def async_init(self) -> None:
        self._store = self._open_store()
        self._cache_manager = TranslationCacheManager(self.config, self._store)
        await self._cache_manager.component_load()
        if self.config.TRANSLATION.PRELOAD_PHRASES:
            for language, phrases in COMMON_TRANSLATIONS.items():
                self._cache_manager.preload(phrases, language)

        self._trans_manager = TransManager(self.config, self._cache_manager)
        await self._trans_manager.initialize()
        self._language_context = LanguageContext(self.config, self._trans_manager, self._store)
        self._language_context.restore()

        self._fivem_client = FivemClient(self.config)
        self._log_store = SnapshotLogStore(self.config.MONITOR.LOG_DIR)
        self._poller = ServerMonitorPoller.from_services(
            self.config,
            servers=self.load_servers,
            client=self._fivem_client,
            log_store=self._log_store,
        )
        logger.info("Shared services initialized")

    async def async_close(self) -> None:
        """Release the services in reverse order, skipping any that `async_init` never created."""
        poller: ServerMonitorPoller | None = getattr(self, "_poller", None)
        if poller is not None:
            await poller.stop()
        fivem_client: FivemClient | None = getattr(self, "_fivem_client", None)
        if fivem_client is not None:
            await fivem_client.close()
        trans_manager: TransManager | None = getattr(self, "_trans_manager", None)
        if trans_manager is not None:
            await trans_manager.shutdown_engines()
        cache_manager: TranslationCacheManager | None = getattr(self, "_cache_manager", None)
        if cache_manager is not None:
            await cache_manager.component_teardown()
        store: KeyValueStore | MemoryKeyValueStore | None = getattr(self, "_store", None)
        if store is not None:
            store.close()
        logger.info("Shared services closed")

    def _open_store(self) -> KeyValueStore | MemoryKeyValueStore:
        store: KeyValueStore = KeyValueStore(self.config.GENERAL.STATE_DB)
        try:
            store.open()
        except KeyValueStoreError as err:
            logger.error("State database unavailable, keeping state in memory: %s", err)
            return MemoryKeyValueStore()
        return store

    def load_servers(self) -> list[ServerConfig]:
        return load_server_configs(self.config)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def store(self) -> KeyValueStore | MemoryKeyValueStore:
        return self._store

    @property
    def cache_manager(self) -> TranslationCacheManager:
        return self._cache_manager

    @property
    def trans_manager(self) -> TransManager:
        return self._trans_manager

    @property
    def language_context(self) -> LanguageContext:
        return self._language_context

    @property
    def fivem_client(self) -> FivemClient:
        return self._fivem_client

    @property
    def log_store(self) -> SnapshotLogStore:
        return self._log_store

    @property
    def poller(self) -> ServerMonitorPoller:
        return self._poller
