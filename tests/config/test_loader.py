from __future__ import annotations

import logging
from dataclasses import fields
from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)

if TYPE_CHECKING:
    from pathlib import Path


def _write_ini(tmp_path: Path, content: str) -> Path:
    ini_path: Path = tmp_path / "site_companion.ini"
    ini_path.write_text(dedent(content), encoding="utf-8")
    return ini_path


def test_config_loader_raises_for_missing_file(tmp_path: Path) -> None:
    ini_path: Path = tmp_path / "missing.ini"
    with pytest.raises(ConfigFileNotFoundError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_defaults_only_when_no_file_given() -> None:
    loader = ConfigLoader(config_filename=None, script_name="test")

    assert loader.config.TRANSLATION.ENGINE == ["google", "libre", "dictionary"]
    assert loader.config.TRANSLATION.NATIVE_LANGUAGE == "zh"
    assert loader.config.TRANSLATION.SECOND_LANGUAGE == "en"
    assert loader.config.CACHE.MAX_ENTRIES == 1000
    assert loader.config.CACHE.MAX_BYTES == 5 * 1024 * 1024
    assert loader.config.MONITOR.POLL_INTERVAL == 60.0
    assert loader.config.GENERAL.SCRIPT_NAME == "test"


def test_unknown_general_keys_are_ignored(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        VERSION = 1.2.3
        DEBUG = no
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert [key.name for key in fields(config.GENERAL)] == ["DEBUG", "SCRIPT_NAME", "LOG_FILE", "STATE_DB"]
    assert not hasattr(config.GENERAL, "VERSION")
    assert config.GENERAL.DEBUG is False


def test_values_are_coerced_to_field_types(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = yes
        LOG_FILE = "logs/site.log"

        [TRANSLATION]
        ENGINE = ["dictionary", "google"]
        NATIVE_LANGUAGE = ZH
        TIMEOUT = 5

        [CACHE]
        MAX_ENTRIES = 50
        EXPIRY_DAYS = 1.5

        [MONITOR]
        SERVERS = [{"name": "Alpha", "id": "abc123"}]
        POLL_INTERVAL = 30
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.GENERAL.DEBUG is True
    assert config.GENERAL.LOG_FILE == "logs/site.log"
    assert config.TRANSLATION.ENGINE == ["dictionary", "google"]
    assert config.TRANSLATION.NATIVE_LANGUAGE == "zh"
    assert config.TRANSLATION.TIMEOUT == 5.0
    assert config.CACHE.MAX_ENTRIES == 50
    assert config.CACHE.EXPIRY_DAYS == 1.5
    assert config.MONITOR.SERVERS == [{"name": "Alpha", "id": "abc123"}]
    assert config.MONITOR.POLL_INTERVAL == 30.0


def test_cli_overrides_win_over_file(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [SERVER]
        HOST = 127.0.0.1
        PORT = 8080
        """,
    )

    config = ConfigLoader(
        config_filename=str(ini_path),
        script_name="test",
        debug=True,
        host="0.0.0.0",
        port=9000,
        log_dir="/tmp/fivem",
    ).config

    assert config.GENERAL.DEBUG is True
    assert config.SERVER.HOST == "0.0.0.0"
    assert config.SERVER.PORT == 9000
    assert config.MONITOR.LOG_DIR == "/tmp/fivem"


def test_unknown_engine_is_warned_not_rejected(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        ENGINE = "deepl"
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.TRANSLATION.ENGINE == ["deepl"]
    assert any("Unknown value 'deepl'" in rec.message for rec in caplog.records)


def test_invalid_translation_engine_type_raises_format_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        ENGINE = 1
        """,
    )

    with pytest.raises(ConfigFormatError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_invalid_boolean_value_raises_config_value_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = maybe
        """,
    )

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_identical_languages_are_rejected(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        NATIVE_LANGUAGE = en
        SECOND_LANGUAGE = EN
        """,
    )

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


@pytest.mark.parametrize(
    ("section", "key", "value"),
    [
        ("CACHE", "MAX_ENTRIES", "0"),
        ("CACHE", "SWEEP_INTERVAL", "-1"),
        ("MONITOR", "POLL_INTERVAL", "0"),
        ("CACHE", "EVICTION_RATIO", "1.5"),
    ],
)
def test_non_positive_limits_are_rejected(tmp_path: Path, section: str, key: str, value: str) -> None:
    ini_path: Path = _write_ini(tmp_path, f"[{section}]\n{key} = {value}\n")

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_server_list_must_be_a_list(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [MONITOR]
        SERVERS = {"Alpha": "abc123"}
        """,
    )

    with pytest.raises(ConfigTypeError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")
