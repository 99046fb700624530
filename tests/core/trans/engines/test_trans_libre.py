from __future__ import annotations

from typing import Any

import pytest

from core.trans.engines import libre as libre_module
from core.trans.interface import Result, TranslateExceptionError, TranslationRateLimitError
from handlers.async_comm import AsyncCommError
from models.config_models import Config


class DummyHttp:
    def __init__(self, *, headers: dict[str, str] | None = None) -> None:
        _ = headers
        self.response: Any = {"translatedText": "Hello", "detectedLanguage": {"confidence": 90, "language": "zh"}}
        self.error: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    async def post(self, *, url: str, data: Any = None, total_timeout: float = 10.0) -> Any:
        self.calls.append({"url": url, "data": data, "timeout": total_timeout})
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self) -> None:
        pass


@pytest.fixture
def engine(monkeypatch: pytest.MonkeyPatch, config: Config) -> libre_module.LibreTranslation:
    monkeypatch.setattr(libre_module, "AsyncHttp", DummyHttp)
    config.TRANSLATION.LIBRE_URL = "http://libre.local/translate"
    instance = libre_module.LibreTranslation()
    instance.initialize(config)
    return instance


async def test_translation_posts_payload(engine: libre_module.LibreTranslation) -> None:
    result: Result = await engine.translation("你好", tgt_lang="en")

    assert result.text == "Hello"
    assert result.detected_source_lang == "zh"
    assert engine._http.calls[0] == {
        "url": "http://libre.local/translate",
        "data": {"q": "你好", "source": "auto", "target": "en", "format": "text"},
        "timeout": 10.0,
    }


@pytest.mark.parametrize("response", [None, {}, {"translatedText": ""}, {"translatedText": 5}, ["Hello"]])
async def test_malformed_response_is_a_failure(engine: libre_module.LibreTranslation, response: Any) -> None:
    engine._http.response = response

    with pytest.raises(TranslateExceptionError):
        await engine.translation("你好", tgt_lang="en")


async def test_rate_limit_is_reported(engine: libre_module.LibreTranslation) -> None:
    error = AsyncCommError("too many")
    error.status = 429
    engine._http.error = error

    with pytest.raises(TranslationRateLimitError):
        await engine.translation("你好", tgt_lang="en", src_lang="zh")
