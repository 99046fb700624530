"""Translation resolver.

Resolves text through the cache and then an ordered list of translation strategies,
falling through to the next strategy on any failure. Resolution never raises: when every
strategy fails the original text is returned.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from core.trans import engines as _engines  # noqa: F401  # registers the bundled strategies
from core.trans.interface import TransInterface, TranslateExceptionError
from models.translation_models import TranslationResult
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable, Sequence

    from core.cache.manager import TranslationCacheManager
    from core.trans.interface import Result
    from models.config_models import Config


__all__: list[str] = ["TransManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

CACHE_ENGINE_NAME: str = "cache"


class TransManager:
    """Manager for the translation strategy chain.

    Strategies are tried in configuration order (``TRANSLATION.ENGINE``). The first
    strategy that returns a non-empty translation wins and its result is written to the
    cache.
    """

    def __init__(
        self,
        config: Config,
        cache_manager: TranslationCacheManager | None = None,
        engines: Sequence[TransInterface] | None = None,
    ) -> None:
        """Initialize the TransManager.

        Args:
            config (Config): Application configuration.
            cache_manager (TranslationCacheManager | None): Cache consulted before and filled after strategies.
            engines (Sequence[TransInterface] | None): Ready-to-use strategies, in order. When omitted,
                strategies named in the configuration are created by `initialize()`.
        """
        self.config: Config = config
        self.cache_manager: TranslationCacheManager | None = cache_manager
        self._engines: list[TransInterface] = list(engines) if engines is not None else []
        self._injected: bool = engines is not None
        logger.debug("Registered translation engines: %s", list(TransInterface.registered))

    async def initialize(self) -> None:
        """Create and initialize the configured strategies."""
        logger.info("TransManager initialization started")
        if self._injected:
            logger.info("Using %d injected translation engines", len(self._engines))
            return

        self._engines.clear()
        for _name in self.config.TRANSLATION.ENGINE:
            _cls: type[TransInterface] | None = TransInterface.registered.get(_name)
            if _cls is None:
                logger.critical("Translation class not found: '%s'", _name)
                continue
            _instance: TransInterface = _cls()
            try:
                _instance.initialize(self.config)
            except (RuntimeError, TranslateExceptionError) as err:
                logger.critical("Exception in '%s' translation setup: %s", _name, err)
                continue
            self._engines.append(_instance)
            logger.info("Translation engine initialized: '%s'", _name)

    def fetch_engine_names(self) -> list[str]:
        return [engine.engine_name for engine in self._engines]

    def needs_backend(self, text: str, src_lang: str, tgt_lang: str) -> bool:
        """Report whether resolving `text` would call a strategy.

        False for blank text, identical languages and fresh cache entries.
        """
        src: str = StringUtils.normalize_language_code(src_lang)
        tgt: str = StringUtils.normalize_language_code(tgt_lang)
        if StringUtils.is_blank(text) or src == tgt:
            return False
        return self.cache_manager is None or not self.cache_manager.has_entry(text, tgt)

    async def translate(self, text: str, src_lang: str, tgt_lang: str) -> str:
        """Translate `text` from `src_lang` into `tgt_lang`.

        Returns:
            str: The translation, or `text` unchanged when it cannot be translated.
        """
        result: TranslationResult = await self.resolve(text, src_lang, tgt_lang)
        return result.translated_text

    async def resolve(self, text: str, src_lang: str, tgt_lang: str) -> TranslationResult:
        """Resolve `text` into `tgt_lang` and report how it was resolved.

        Args:
            text (str): Text to translate.
            src_lang (str): Source language code.
            tgt_lang (str): Target language code.

        Returns:
            TranslationResult: The outcome. `succeeded` is False only when every strategy failed.
        """
        src: str = StringUtils.normalize_language_code(src_lang)
        tgt: str = StringUtils.normalize_language_code(tgt_lang)
        untranslated = TranslationResult(
            source_text=text, translated_text=text, source_lang=src, target_lang=tgt
        )

        if StringUtils.is_blank(text) or src == tgt:
            logger.debug("Translation not required (src: '%s', tgt: '%s')", src, tgt)
            return untranslated

        if self.cache_manager is not None:
            cached: str | None = self.cache_manager.get(text, tgt)
            if cached is not None:
                logger.debug("Translation cache hit: '%s'", cached[:50])
                untranslated.translated_text = cached
                untranslated.engine = CACHE_ENGINE_NAME
                untranslated.from_cache = True
                return untranslated

        for engine in self._engines:
            if not engine.is_available:
                continue
            translated: str | None = await self._attempt(engine, text, src, tgt)
            if translated is None:
                continue
            if self.cache_manager is not None:
                self.cache_manager.set(text, translated, tgt)
            logger.debug("Translated by '%s' (%s > %s): %s", engine.engine_name, src, tgt, translated[:50])
            return TranslationResult(
                source_text=text,
                translated_text=translated,
                source_lang=src,
                target_lang=tgt,
                engine=engine.engine_name,
            )

        logger.warning("All translation engines failed; returning the original text")
        untranslated.succeeded = False
        return untranslated

    async def _attempt(self, engine: TransInterface, text: str, src: str, tgt: str) -> str | None:
        try:
            result: Result = await engine.translation(content=text, tgt_lang=tgt, src_lang=src)
        except TranslateExceptionError as err:
            logger.warning("Translation engine '%s' failed: %s", engine.engine_name, err)
            return None
        except Exception:  # noqa: BLE001
            logger.exception("Translation engine '%s' failed with unexpected error.", engine.engine_name)
            return None

        translated: str = StringUtils.ensure_str(result.text)
        if StringUtils.is_blank(translated):
            logger.warning("Translation engine '%s' returned an empty result", engine.engine_name)
            return None
        return translated

    async def translate_batch(self, texts: Iterable[str], src_lang: str, tgt_lang: str) -> list[str]:
        """Translate several texts concurrently.

        Each text is settled on its own; one failure leaves the others unaffected and
        yields that text unchanged.
        """
        items: list[str] = list(texts)
        results: list[str | BaseException] = await asyncio.gather(
            *(self.translate(item, src_lang, tgt_lang) for item in items),
            return_exceptions=True,
        )
        output: list[str] = []
        for item, result in zip(items, results, strict=True):
            if isinstance(result, BaseException):
                logger.error("Batch translation failed for '%s': %s", item[:50], result)
                output.append(item)
            else:
                output.append(result)
        return output

    async def shutdown_engines(self) -> None:
        """Shut down all active translation engines."""
        logger.info("Class '%s' termination process started.", self.__class__.__name__)
        for _inst in self._engines:
            await _inst.close()
        logger.info("Class '%s' termination process completed.", self.__class__.__name__)
