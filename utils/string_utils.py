from __future__ import annotations

import hashlib
import re
import unicodedata
from typing import Final

__all__: list[str] = ["StringUtils"]

CJK_PATTERN: Final[re.Pattern[str]] = re.compile(r"[\u4e00-\u9fff]")

LANGUAGE_ALIASES: Final[dict[str, str]] = {
    "zh": "zh",
    "zh-tw": "zh",
    "zh-cn": "zh",
    "zh-hant": "zh",
    "zh-hans": "zh",
    "chinese": "zh",
    "en": "en",
    "en-us": "en",
    "en-gb": "en",
    "english": "en",
}


class StringUtils:
    """Utility class for string manipulation and processing.

    Provides static methods for text normalization, cache key generation and
    lightweight language handling.
    """

    @staticmethod
    def ensure_str(value: object) -> str:
        """Ensure that the value is a string, returning an empty string if None.

        Args:
            value (object): The value to ensure as a string.

        Returns:
            str: The value as a string, or empty string if None.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def is_blank(value: str | None) -> bool:
        return not StringUtils.ensure_str(value).strip()

    @staticmethod
    def normalize_text(text: str) -> str:
        """Normalize text using Unicode NFC normalization.

        Args:
            text (str): Text to normalize.

        Returns:
            str: Normalized text.
        """
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def generate_cache_key(text: str, language: str) -> str:
        """Generate the translation cache key for a (text, language) pair.

        The key is ``"<language>:<sha256>"`` so that keys for one language share a prefix.

        Args:
            text (str): Source text.
            language (str): Target language code.

        Returns:
            str: The cache key.
        """
        key_data: str = f"{StringUtils.normalize_text(text)}|{language}"
        digest: str = hashlib.sha256(key_data.encode("utf-8")).hexdigest()
        return f"{language}:{digest}"

    @staticmethod
    def normalize_language_code(code: str) -> str:
        """Map common language spellings to the short codes used internally.

        Unknown codes are returned lower-cased and stripped.

        Examples:
            >>> StringUtils.normalize_language_code("zh-TW")
            'zh'
            >>> StringUtils.normalize_language_code("English")
            'en'
        """
        lowered: str = StringUtils.ensure_str(code).strip().lower().replace("_", "-")
        return LANGUAGE_ALIASES.get(lowered, lowered)

    @staticmethod
    def detect_language(text: str) -> str:
        """Classify text as Chinese ("zh") when it contains CJK ideographs, otherwise English ("en")."""
        return "zh" if CJK_PATTERN.search(StringUtils.ensure_str(text)) else "en"
