"""Display adapters that render text in the active language.

`TranslatedText` shows the original text as a placeholder, swaps in the translation
once it resolves, and keeps the original with an error notice when resolution fails.
Only the most recent request may change what is displayed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

from models.language_models import DisplayState
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from core.language.context import LanguageContext
    from models.translation_models import TranslationResult

__all__: list[str] = ["TRANSLATION_FAILED_NOTICE", "TranslatedText", "extract_text", "translate_document"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type Displayable = str | int | float | Sequence[Displayable] | None

TRANSLATION_FAILED_NOTICE: Final[str] = "翻譯失敗"
ERROR_MARKER: Final[str] = "⚠"
PARAGRAPH_SEPARATOR: Final[str] = "\n\n"
UNTRANSLATED_BLOCK_PREFIXES: Final[tuple[str, ...]] = ("```", "---")


def extract_text(content: Displayable) -> str:
    """Flatten displayable content into a single string.

    Strings and numbers are used as-is, nested sequences are concatenated in order,
    and None or booleans contribute nothing.
    """
    if content is None or isinstance(content, bool):
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, (int, float)):
        return str(content)
    if isinstance(content, Sequence):
        return "".join(extract_text(item) for item in content)
    return str(content)


class TranslatedText:
    """Text bound to a language context.

    Must be created while an event loop is running, because translation starts at once.

    Attributes:
        native_language (str): Language the text is written in.
        skip_translation (bool): Always render the original text.
    """

    def __init__(
        self,
        context: LanguageContext,
        content: Displayable,
        *,
        native_language: str | None = None,
        skip_translation: bool = False,
        on_change: Callable[[DisplayState], None] | None = None,
    ) -> None:
        self._context: LanguageContext = context
        self._text: str = extract_text(content)
        self.native_language: str = native_language or context.primary_language
        self.skip_translation: bool = skip_translation
        self._on_change: Callable[[DisplayState], None] | None = on_change
        self._state: DisplayState = DisplayState(text=self._text)
        self._generation: int = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed: bool = False
        self._unsubscribe: Callable[[], None] = context.subscribe(self._on_language_change)
        self.refresh()

    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def text(self) -> str:
        return self._state.text

    @property
    def original_text(self) -> str:
        return self._text

    @property
    def is_pending(self) -> bool:
        return self._state.is_pending

    @property
    def error(self) -> str | None:
        return self._state.error

    def render(self) -> str:
        """Return the text with the error marker appended when translation failed."""
        if self._state.error:
            return f"{self._state.text} {ERROR_MARKER}"
        return self._state.text

    def needs_translation(self) -> bool:
        if self.skip_translation or StringUtils.is_blank(self._text):
            return False
        return self._context.language != self.native_language

    def set_text(self, content: Displayable) -> None:
        """Replace the displayed content and resolve it again."""
        text: str = extract_text(content)
        if text == self._text:
            return
        self._text = text
        self.refresh()

    def refresh(self) -> None:
        """Start resolving the current text for the active language.

        Any resolution still running for earlier input is left to finish, but its
        result is ignored.
        """
        if self._closed:
            return
        self._generation += 1
        if not self.needs_translation():
            self._apply(DisplayState(text=self._text))
            return

        self._apply(DisplayState(text=self._text, is_pending=True))
        task: asyncio.Task[None] = asyncio.create_task(
            self._resolve(self._generation, self._text, self._context.language)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self) -> DisplayState:
        """Wait for every outstanding resolution and return the resulting state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        return self._state

    def close(self) -> None:
        """Stop following the language context and discard outstanding results."""
        self._closed = True
        self._generation += 1
        self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()

    def _on_language_change(self, lang: str) -> None:
        logger.debug("Language changed to '%s'; re-resolving '%s'", lang, self._text[:30])
        self.refresh()

    async def _resolve(self, generation: int, text: str, target: str) -> None:
        result: TranslationResult = await self._context.translate_detailed(
            text, target, src_lang=self.native_language
        )
        if generation != self._generation:
            logger.debug("Discarding stale translation for '%s'", text[:30])
            return
        if result.succeeded:
            self._apply(DisplayState(text=result.translated_text))
        else:
            self._apply(DisplayState(text=text, error=TRANSLATION_FAILED_NOTICE))

    def _apply(self, state: DisplayState) -> None:
        if state == self._state:
            return
        self._state = state
        if self._on_change is not None:
            self._on_change(state)


async def translate_document(context: LanguageContext, content: str, lang: str | None = None) -> str:
    """Translate markdown text paragraph by paragraph.

    Paragraphs are separated by blank lines. Fenced code and front-matter/rule blocks
    are kept verbatim; the other paragraphs are translated concurrently, and a paragraph
    that fails keeps its original text.

    Args:
        context (LanguageContext): Context providing the resolver and active language.
        content (str): Markdown text in the primary language.
        lang (str | None): Target language. Defaults to the active language.

    Returns:
        str: The translated document.
    """
    paragraphs: list[str] = content.split(PARAGRAPH_SEPARATOR)
    targets: list[int] = [
        index
        for index, paragraph in enumerate(paragraphs)
        if paragraph.strip() and not paragraph.lstrip().startswith(UNTRANSLATED_BLOCK_PREFIXES)
    ]
    results: list[str | BaseException] = await asyncio.gather(
        *(context.translate(paragraphs[index], lang) for index in targets),
        return_exceptions=True,
    )
    translated: list[str] = list(paragraphs)
    for index, result in zip(targets, results, strict=True):
        if isinstance(result, BaseException):
            logger.error("Paragraph translation failed: %s", result)
            continue
        translated[index] = result
    return PARAGRAPH_SEPARATOR.join(translated)
