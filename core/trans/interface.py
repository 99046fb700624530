"""This module defines the abstract base class for translation strategies and related exceptions.
It includes the Result data class for translation results, and exceptions raised by strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = [
    "EngineAttributes",
    "NotSupportedLanguagesError",
    "Result",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationRateLimitError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class EngineAttributes:
    """Engine-specific capabilities and behavior flags.

    Attributes:
        name (str): Display name of the translation engine.
        requires_network (bool): Whether the engine calls a remote service.
    """

    name: str
    requires_network: bool = True


@dataclass
class Result:
    """Data class for translation results.

    Attributes:
        text (str | None): Translated text. None if translation fails.
        detected_source_lang (str | None): Detected source language code. None if unknown.
        metadata (dict[str, str] | None): Engine-specific metadata.
    """

    text: str | None = None
    detected_source_lang: str | None = None
    metadata: dict[str, str] | None = None

    def __str__(self) -> str:
        if self.text is None:
            return ""
        return self.text


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class NotSupportedLanguagesError(TranslateExceptionError):
    """An unsupported language code was specified."""


class TranslationRateLimitError(TranslateExceptionError):
    """The translation request was rate-limited by the API."""


class TransInterface(ABC):
    """Abstract base class for translation strategies.

    Each concrete strategy registers itself under `fetch_engine_name()` when the class is
    defined; the resolver instantiates strategies by name in the configured order.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): Registered strategy classes by name.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass in the registered dictionary.

        Classes whose `fetch_engine_name()` returns an empty string are not registered,
        which lets tests define throwaway strategies.

        Raises:
            ValueError: If another class is already registered under the same name.
        """
        super().__init_subclass__(**kwargs)
        name: str = cls.fetch_engine_name()
        if not isinstance(name, str) or name == "":
            return

        if name in cls.registered:
            msg: str = f"A translation engine with the name '{name}' is already registered."
            raise ValueError(msg)

        cls.registered[name] = cls

    def __init__(self) -> None:
        self._engine_attributes: EngineAttributes | None = None

    @property
    def engine_attributes(self) -> EngineAttributes:
        if self._engine_attributes is None:
            msg = "Engine attributes have not been set."
            raise RuntimeError(msg)
        return self._engine_attributes

    @engine_attributes.setter
    def engine_attributes(self, attributes: EngineAttributes) -> None:
        if self._engine_attributes is not None:
            msg = "Engine attributes can only be set once during initialization."
            raise RuntimeError(msg)
        self._engine_attributes = attributes

    @property
    def engine_name(self) -> str:
        if self._engine_attributes is None:
            return self.fetch_engine_name() or self.__class__.__name__
        return self._engine_attributes.name

    @property
    def is_available(self) -> bool:
        """Whether the strategy can currently be attempted."""
        return True

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the translation engine.

        Called during class registration in __init_subclass__, so the implementation must
        be available at subclass definition time.

        Returns:
            str: The distinguished name of the translation engine.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Initialize the translation engine with the given configuration.

        Args:
            config (Config): Application configuration.
        """
        raise NotImplementedError

    @abstractmethod
    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        """Translate input text to the target language.

        Args:
            content (str): Text to be translated.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code. If None, auto-detect.

        Returns:
            Result: Translation result with translated text.

        Raises:
            NotSupportedLanguagesError: If the specified language is not supported.
            TranslationRateLimitError: If the request is rate-limited by the service.
            TranslateExceptionError: If translation fails for any other reason.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release resources held by the engine."""
        raise NotImplementedError
