"""LibreTranslate strategy.

Sends ``{"q", "source", "target", "format"}`` as JSON and reads ``translatedText`` (and,
when the source is ``auto``, ``detectedLanguage.language``) from the response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.trans.interface import (
    EngineAttributes,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from handlers.async_comm import AsyncCommError, AsyncHttp
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = ["LibreTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class LibreTranslation(TransInterface):
    def __init__(self) -> None:
        super().__init__()
        self.__http: AsyncHttp | None = None
        self.url: str = ""
        self.timeout: float = 10.0

    @property
    def _http(self) -> AsyncHttp:
        if self.__http is None:
            msg = "The libre instance is not initialised"
            raise TranslateExceptionError(msg)
        return self.__http

    @_http.setter
    def _http(self, http: AsyncHttp | None) -> None:
        self.__http = http

    @staticmethod
    def fetch_engine_name() -> str:
        return "libre"

    def initialize(self, config: Config) -> None:
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name="libre")
        self.url = config.TRANSLATION.LIBRE_URL
        self.timeout = config.TRANSLATION.TIMEOUT
        self._http = AsyncHttp()

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)
        payload: dict[str, str] = {
            "q": content,
            "source": src_lang or "auto",
            "target": tgt_lang,
            "format": "text",
        }
        try:
            data: Any = await self._http.post(url=self.url, data=payload, total_timeout=self.timeout)
        except AsyncCommError as err:
            logger.error(err)
            msg = "an anomaly occurred during translation at LibreTranslate"
            if err.status == 429:  # noqa: PLR2004
                raise TranslationRateLimitError(msg) from err
            raise TranslateExceptionError(msg) from err

        if not isinstance(data, dict) or not isinstance(data.get("translatedText"), str) or not data["translatedText"]:
            msg = f"Unexpected response format from LibreTranslate: {str(data)[:200]}"
            raise TranslateExceptionError(msg)

        detected: Any = data.get("detectedLanguage")
        detected_lang: str | None = detected.get("language") if isinstance(detected, dict) else None
        logger.info("translation completed (%s > %s)", src_lang, tgt_lang)
        return Result(text=data["translatedText"], detected_source_lang=detected_lang or src_lang)

    async def close(self) -> None:
        if self.__http is not None:
            await self.__http.close()
        logger.info("'%s' process termination", self.__class__.__name__)
