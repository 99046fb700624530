from __future__ import annotations

import pytest

from core.trans.engines.const_phrases import COMMON_TRANSLATIONS, PHRASE_TABLES
from core.trans.engines.dictionary import DictionaryTranslation
from core.trans.interface import TransInterface, TranslateExceptionError
from models.config_models import Config

TABLES: dict[str, dict[str, str]] = {
    "en": {"首頁": "Home", "返回首頁": "Back to Home", "文章": "Articles"},
}


@pytest.fixture
def engine(config: Config) -> DictionaryTranslation:
    instance = DictionaryTranslation(TABLES)
    instance.initialize(config)
    return instance


def test_registered_and_offline(engine: DictionaryTranslation) -> None:
    assert TransInterface.registered["dictionary"] is DictionaryTranslation
    assert engine.engine_attributes.requires_network is False


async def test_exact_match(engine: DictionaryTranslation) -> None:
    result = await engine.translation("首頁", tgt_lang="en", src_lang="zh")

    assert result.text == "Home"
    assert result.metadata == {"match": "exact"}


async def test_longest_phrase_replaced_first(engine: DictionaryTranslation) -> None:
    result = await engine.translation("請返回首頁閱讀文章", tgt_lang="en")

    assert result.text == "請Back to Home閱讀Articles"
    assert result.metadata == {"match": "partial"}


async def test_no_known_phrase_is_a_failure(engine: DictionaryTranslation) -> None:
    with pytest.raises(TranslateExceptionError):
        await engine.translation("完全未知", tgt_lang="en")


async def test_missing_table_is_a_failure(engine: DictionaryTranslation) -> None:
    with pytest.raises(TranslateExceptionError):
        await engine.translation("首頁", tgt_lang="ja")


def test_default_tables_cover_common_phrases() -> None:
    for phrase, translation in COMMON_TRANSLATIONS["en"].items():
        assert PHRASE_TABLES["en"][phrase] == translation
