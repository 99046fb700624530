"""Translation strategies and the resolver that chains them.

This package provides translation through pluggable strategy implementations
(Google Translate, LibreTranslate and an offline phrase dictionary).
"""

from core.trans.interface import (
    NotSupportedLanguagesError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from core.trans.manager import TransManager

__all__: list[str] = [
    "NotSupportedLanguagesError",
    "Result",
    "TransInterface",
    "TransManager",
    "TranslateExceptionError",
    "TranslationRateLimitError",
]
