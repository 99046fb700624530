from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from core.trans.interface import EngineAttributes, Result, TransInterface, TranslateExceptionError
from models.config_models import Config

if TYPE_CHECKING:
    from collections.abc import Callable


class FakeEngine(TransInterface):
    """Scripted translation strategy that records its calls.

    `reply` is either the translated text, an exception to raise, or a callable that maps
    the source text to one of those.
    """

    def __init__(self, name: str, reply: str | Exception | Callable[[str], str | Exception]) -> None:
        super().__init__()
        self.engine_attributes = EngineAttributes(name=name)
        self.reply: str | Exception | Callable[[str], str | Exception] = reply
        self.calls: list[tuple[str, str, str | None]] = []
        self.closed: bool = False

    @staticmethod
    def fetch_engine_name() -> str:
        return ""

    def initialize(self, config: Config) -> None:
        _ = config

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        self.calls.append((content, tgt_lang, src_lang))
        reply = self.reply(content) if callable(self.reply) else self.reply
        if isinstance(reply, Exception):
            raise reply
        return Result(text=reply, detected_source_lang=src_lang)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def config() -> Config:
    """Default configuration, as loaded from an empty file."""
    return Config()


@pytest.fixture
def failing_engine() -> FakeEngine:
    return FakeEngine("failing", TranslateExceptionError("backend down"))
