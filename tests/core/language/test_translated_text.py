from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from core.language.context import LanguageContext
from core.language.display import TRANSLATION_FAILED_NOTICE, TranslatedText, extract_text, translate_document
from core.trans.interface import Result, TranslateExceptionError
from core.trans.manager import TransManager
from tests.conftest import FakeEngine

if TYPE_CHECKING:
    from models.config_models import Config
    from models.language_models import DisplayState


class ControlledEngine(FakeEngine):
    """Engine whose replies are released one text at a time."""

    def __init__(self) -> None:
        super().__init__("controlled", lambda text: f"<{text}>")
        self.gates: dict[str, asyncio.Event] = {}

    def release(self, text: str) -> None:
        self.gates.setdefault(text, asyncio.Event()).set()

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        await self.gates.setdefault(content, asyncio.Event()).wait()
        return await super().translation(content, tgt_lang, src_lang)


def _context(config: Config, engine: FakeEngine) -> LanguageContext:
    return LanguageContext(config, TransManager(config, engines=[engine]))


@pytest.mark.parametrize(
    ("content", "expected"),
    [("abc", "abc"), (42, "42"), (None, ""), (True, ""), (["a", ["b", 1], None], "ab1")],
)
def test_extract_text(content: object, expected: str) -> None:
    assert extract_text(content) == expected  # type: ignore[arg-type]


async def test_native_language_renders_without_resolution(config: Config) -> None:
    engine = FakeEngine("primary", "unused")
    display = TranslatedText(_context(config, engine), "首頁")

    state: DisplayState = await display.wait()

    assert state.text == "首頁"
    assert state.is_pending is False
    assert engine.calls == []


async def test_placeholder_then_translation(config: Config) -> None:
    engine = ControlledEngine()
    context = _context(config, engine)
    context.set_language("en")
    changes: list[DisplayState] = []

    display = TranslatedText(context, "首頁", on_change=changes.append)
    assert display.text == "首頁"
    assert display.is_pending is True

    engine.release("首頁")
    await display.wait()

    assert display.text == "<首頁>"
    assert display.is_pending is False
    assert display.render() == "<首頁>"
    assert [state.text for state in changes] == ["首頁", "<首頁>"]


async def test_skip_translation_always_shows_original(config: Config) -> None:
    engine = FakeEngine("primary", "unused")
    context = _context(config, engine)
    context.set_language("en")

    display = TranslatedText(context, "第七席", skip_translation=True)
    await display.wait()

    assert display.text == "第七席"
    assert engine.calls == []


async def test_failure_keeps_original_with_notice(config: Config) -> None:
    context = _context(config, FakeEngine("primary", TranslateExceptionError("down")))
    context.set_language("en")

    display = TranslatedText(context, "首頁")
    await display.wait()

    assert display.text == "首頁"
    assert display.error == TRANSLATION_FAILED_NOTICE
    assert display.render().startswith("首頁 ")


async def test_only_latest_text_updates_display(config: Config) -> None:
    engine = ControlledEngine()
    context = _context(config, engine)
    context.set_language("en")
    display = TranslatedText(context, "舊")

    display.set_text("新")
    engine.release("新")
    await asyncio.sleep(0.01)
    assert display.text == "<新>"

    engine.release("舊")
    await display.wait()

    assert display.text == "<新>"


async def test_language_change_re_resolves(config: Config) -> None:
    engine = FakeEngine("primary", lambda text: f"[{text}]")
    context = _context(config, engine)
    display = TranslatedText(context, "關於")
    await display.wait()
    assert display.text == "關於"

    context.set_language("en")
    await display.wait()
    assert display.text == "[關於]"

    context.set_language("zh")
    assert display.text == "關於"


async def test_english_source_translates_into_primary(config: Config) -> None:
    engine = FakeEngine("primary", "哈囉")
    display = TranslatedText(_context(config, engine), "Hello", native_language="en")

    await display.wait()

    assert display.text == "哈囉"
    assert engine.calls == [("Hello", "zh", "en")]


async def test_close_stops_following_the_context(config: Config) -> None:
    engine = ControlledEngine()
    context = _context(config, engine)
    context.set_language("en")
    display = TranslatedText(context, "首頁")

    display.close()
    engine.release("首頁")
    await display.wait()
    context.set_language("zh")

    assert display.text == "首頁"
    assert display.is_pending is True


async def test_translate_document_keeps_code_blocks(config: Config) -> None:
    def reply(text: str) -> str | Exception:
        if text == "壞段落":
            return TranslateExceptionError("nope")
        return f"EN({text})"

    context = _context(config, FakeEngine("primary", reply))
    document = "第一段\n\n```\ncode\n```\n\n壞段落\n\n第二段"

    translated = await translate_document(context, document, "en")

    assert translated == "EN(第一段)\n\n```\ncode\n```\n\n壞段落\n\nEN(第二段)"
