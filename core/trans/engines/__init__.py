"""Translation strategy implementations.

Importing this package registers every strategy with `TransInterface.registered`.

Modules:
- GoogleTranslation: Google Translate public endpoint.
- LibreTranslation: LibreTranslate service.
- DictionaryTranslation: Offline phrase table lookup.
"""

from core.trans.engines.const_phrases import COMMON_TRANSLATIONS, PHRASE_TABLES
from core.trans.engines.dictionary import DictionaryTranslation
from core.trans.engines.google import GoogleTranslation
from core.trans.engines.libre import LibreTranslation

__all__: list[str] = [
    "COMMON_TRANSLATIONS",
    "PHRASE_TABLES",
    "DictionaryTranslation",
    "GoogleTranslation",
    "LibreTranslation",
]
