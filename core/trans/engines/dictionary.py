"""Offline dictionary strategy.

Looks the whole text up in the phrase table for the target language first. Failing that,
every known phrase found in the text is replaced, longest phrases first so that a long
phrase is not broken up by one of its own substrings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.trans.engines.const_phrases import PHRASE_TABLES
from core.trans.interface import EngineAttributes, Result, TransInterface, TranslateExceptionError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = ["DictionaryTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class DictionaryTranslation(TransInterface):
    def __init__(self, tables: dict[str, dict[str, str]] | None = None) -> None:
        super().__init__()
        self.tables: dict[str, dict[str, str]] = tables if tables is not None else PHRASE_TABLES

    @property
    def is_available(self) -> bool:
        return bool(self.tables)

    @staticmethod
    def fetch_engine_name() -> str:
        return "dictionary"

    def initialize(self, config: Config) -> None:
        _ = config
        self.engine_attributes = EngineAttributes(name="dictionary", requires_network=False)

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        table: dict[str, str] | None = self.tables.get(tgt_lang)
        if not table:
            msg = f"No phrase table for '{tgt_lang}'"
            raise TranslateExceptionError(msg)

        exact: str | None = table.get(content) or table.get(content.strip())
        if exact:
            return Result(text=exact, detected_source_lang=src_lang, metadata={"match": "exact"})

        replaced: str = content
        for phrase in sorted(table, key=len, reverse=True):
            if phrase in replaced:
                replaced = replaced.replace(phrase, table[phrase])

        if replaced == content:
            msg = "No known phrase found in the text"
            raise TranslateExceptionError(msg)

        logger.debug("Dictionary substitution: '%s' -> '%s'", content, replaced)
        return Result(text=replaced, detected_source_lang=src_lang, metadata={"match": "partial"})

    async def close(self) -> None:
        pass
