"""Models for translation-related data."""

from __future__ import annotations

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin, LetterCase, dataclass_json

__all__: list[str] = ["TranslationResult"]


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class TranslationResult(DataClassJsonMixin):
    """Outcome of one resolution request.

    Attributes:
        source_text (str): Text that was asked for.
        translated_text (str): Text to display. Equals `source_text` when nothing could translate it.
        source_lang (str): Source language code.
        target_lang (str): Target language code.
        engine (str): Strategy that produced the translation, "cache", or "" when untranslated.
        from_cache (bool): Whether the translation came from the cache.
        succeeded (bool): False when every strategy failed.
    """

    source_text: str
    translated_text: str
    source_lang: str
    target_lang: str
    engine: str = ""
    from_cache: bool = False
    succeeded: bool = True
