"""Google Translate strategy using the public ``translate_a/single`` endpoint.

The endpoint answers with nested JSON arrays::

    [[["<translated segment>", "<source segment>", ...], ...], null, "<detected lang>", ...]

Segments are joined in order to form the full translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

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

__all__: list[str] = ["GoogleTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS: Final[int] = 429
USER_AGENT: Final[str] = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko)"


class GoogleTranslation(TransInterface):
    def __init__(self) -> None:
        super().__init__()
        self.__http: AsyncHttp | None = None
        self.url: str = ""
        self.timeout: float = 10.0

    @property
    def _http(self) -> AsyncHttp:
        if self.__http is None:
            msg = "The google instance is not initialised"
            raise TranslateExceptionError(msg)
        return self.__http

    @_http.setter
    def _http(self, http: AsyncHttp | None) -> None:
        self.__http = http

    @staticmethod
    def fetch_engine_name() -> str:
        return "google"

    def initialize(self, config: Config) -> None:
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name="google")
        self.url = config.TRANSLATION.GOOGLE_URL
        self.timeout = config.TRANSLATION.TIMEOUT
        self._http = AsyncHttp(headers={"User-Agent": USER_AGENT})

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)
        params: dict[str, str] = {
            "client": "gtx",
            "sl": src_lang or "auto",
            "tl": tgt_lang,
            "dt": "t",
            "q": content,
        }
        try:
            data: Any = await self._http.get(url=self.url, params=params, total_timeout=self.timeout)
        except AsyncCommError as err:
            logger.error(err)
            msg = "an anomaly occurred during translation at Google"
            if err.status == HTTP_TOO_MANY_REQUESTS:
                raise TranslationRateLimitError(msg) from err
            raise TranslateExceptionError(msg) from err

        result: Result = self.parse_response(data)
        logger.info("translation completed (%s > %s)", src_lang, tgt_lang)
        return result

    @staticmethod
    def parse_response(data: Any) -> Result:
        """Extract the translation and detected language from a response body.

        Raises:
            TranslateExceptionError: If the body does not have the expected shape.
        """
        try:
            segments: list[Any] = data[0]
            text: str = "".join(str(segment[0]) for segment in segments if segment and segment[0] is not None)
        except (TypeError, IndexError, KeyError) as err:
            msg = f"Unexpected response format from Google: {str(data)[:200]}"
            raise TranslateExceptionError(msg) from err

        if not text:
            msg = "Google returned an empty translation"
            raise TranslateExceptionError(msg)

        detected: str | None = None
        if isinstance(data, list) and len(data) > 2 and isinstance(data[2], str):
            detected = data[2]
        return Result(text=text, detected_source_lang=detected)

    async def close(self) -> None:
        if self.__http is not None:
            await self.__http.close()
        logger.info("'%s' process termination", self.__class__.__name__)
