"""Process-wide display language state.

`LanguageContext` owns the active language, persists the choice, notifies subscribers
when it changes, and forwards translation requests to the resolver using the primary
language as the source.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.storage.kv_store import LANGUAGE_PREFERENCE_KEY, KeyValueStoreError
from core.trans.interface import NotSupportedLanguagesError
from models.language_models import LANGUAGE_NAMES, LanguageState
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from core.storage.kv_store import KeyValueStore, MemoryKeyValueStore
    from core.trans.manager import TransManager
    from models.config_models import Config
    from models.translation_models import TranslationResult

__all__: list[str] = ["LanguageContext", "LanguageListener"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type LanguageListener = Callable[[str], None]


class LanguageContext:
    """Active display language with subscriber notification.

    Attributes:
        primary_language (str): Language the site content is written in.
        secondary_language (str): The alternative display language.
    """

    def __init__(
        self,
        config: Config,
        resolver: TransManager,
        store: KeyValueStore | MemoryKeyValueStore | None = None,
    ) -> None:
        self.primary_language: str = config.TRANSLATION.NATIVE_LANGUAGE
        self.secondary_language: str = config.TRANSLATION.SECOND_LANGUAGE
        self._resolver: TransManager = resolver
        self._store: KeyValueStore | MemoryKeyValueStore | None = store
        self._language: str = self.primary_language
        self._subscribers: list[LanguageListener] = []
        self._in_flight: int = 0

    @property
    def supported_languages(self) -> tuple[str, str]:
        return (self.primary_language, self.secondary_language)

    @staticmethod
    def language_name(lang: str) -> str:
        return LANGUAGE_NAMES.get(lang, lang)

    @property
    def language(self) -> str:
        return self._language

    def get_language(self) -> str:
        return self._language

    @property
    def is_translating(self) -> bool:
        return self._in_flight > 0

    @property
    def state(self) -> LanguageState:
        return LanguageState(active_language=self._language, is_resolving=self.is_translating)

    def restore(self) -> str:
        """Load the persisted language choice.

        A missing, unreadable or unsupported stored value leaves the primary language active.

        Returns:
            str: The active language after restoring.
        """
        if self._store is None:
            return self._language
        try:
            stored: str | None = self._store.get(LANGUAGE_PREFERENCE_KEY)
        except KeyValueStoreError as err:
            logger.warning("Failed to read the language preference: %s", err)
            return self._language

        if stored is None:
            return self._language
        lang: str = StringUtils.normalize_language_code(stored)
        if lang in self.supported_languages:
            self._language = lang
            logger.info("Restored language preference: '%s'", lang)
        else:
            logger.warning("Ignoring unsupported stored language: '%s'", stored)
        return self._language

    def set_language(self, lang: str) -> None:
        """Switch the active language, persist it and notify subscribers.

        Subscribers are called synchronously in subscription order before this method
        returns. A subscriber that raises is logged and does not prevent the others from
        being notified.

        Args:
            lang (str): Language code; common spellings such as "zh-TW" are accepted.

        Raises:
            NotSupportedLanguagesError: If the language is neither the primary nor the secondary language.
        """
        normalized: str = StringUtils.normalize_language_code(lang)
        if normalized not in self.supported_languages:
            msg = f"Unsupported language: '{lang}'"
            raise NotSupportedLanguagesError(msg)

        changed: bool = normalized != self._language
        self._language = normalized
        self._persist(normalized)
        if not changed:
            return

        logger.info("Language changed to '%s'", normalized)
        for callback in list(self._subscribers):
            try:
                callback(normalized)
            except Exception:  # noqa: BLE001
                logger.exception("Language subscriber %r failed", callback)

    def toggle_language(self) -> str:
        other: str = self.secondary_language if self._language == self.primary_language else self.primary_language
        self.set_language(other)
        return other

    def subscribe(self, callback: LanguageListener) -> Callable[[], None]:
        """Register `callback` for language changes.

        Returns:
            Callable[[], None]: Function that removes the subscription. Calling it twice is harmless.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def translate(self, text: str, lang: str | None = None) -> str:
        """Translate `text` from the primary language into `lang` (default: the active language)."""
        result: TranslationResult = await self.translate_detailed(text, lang)
        return result.translated_text

    async def translate_detailed(
        self, text: str, lang: str | None = None, *, src_lang: str | None = None
    ) -> TranslationResult:
        """Like `translate`, but returns the full resolution outcome.

        Args:
            text (str): Text to translate.
            lang (str | None): Target language. Defaults to the active language.
            src_lang (str | None): Source language. Defaults to the primary language.
        """
        target: str = StringUtils.normalize_language_code(lang) if lang else self._language
        source: str = StringUtils.normalize_language_code(src_lang) if src_lang else self.primary_language
        if not self._resolver.needs_backend(text, source, target):
            return await self._resolver.resolve(text, source, target)

        self._in_flight += 1
        try:
            return await self._resolver.resolve(text, source, target)
        finally:
            self._in_flight -= 1

    def _persist(self, lang: str) -> None:
        if self._store is None:
            return
        try:
            self._store.set(LANGUAGE_PREFERENCE_KEY, lang)
        except KeyValueStoreError as err:
            logger.warning("Failed to save the language preference: %s", err)
