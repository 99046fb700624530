"""Active display language and text adapters that follow it."""

from core.language.context import LanguageContext
from core.language.display import TranslatedText, extract_text, translate_document

__all__: list[str] = ["LanguageContext", "TranslatedText", "extract_text", "translate_document"]
