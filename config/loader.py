"""Configuration file loader and validator.

Handles reading, formatting, and validating settings from the INI configuration file.
Raises exceptions for any issues encountered during loading.
"""

from __future__ import annotations

import ast
import configparser
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

from models.config_models import Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "ALLOWED_TRANSLATION_ENGINES",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ALLOWED_TRANSLATION_ENGINES: list[str] = ["google", "libre", "dictionary"]


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    Settings missing from the file keep the defaults declared in `models.config_models`.
    Keyword overrides (typically command-line options) are applied after the file is read
    and before validation.

    Args:
        config_filename (str | None): INI file name to load. None loads the defaults only.
        script_name (str): Executing script name, used in error messaging.
        **overrides: Optional overrides: ``debug``, ``host``, ``port``, ``log_dir``.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str | None,
        script_name: str,
        **overrides: Any,
    ) -> None:
        self.config = Config()
        self.config.GENERAL.SCRIPT_NAME = script_name

        if config_filename is not None:
            parser: ConfigParser = self._read_file(config_filename, script_name)
            self._convert_settings(parser)

        self._apply_overrides(overrides)
        self._validate_settings()

    @staticmethod
    def _read_file(config_filename: str, script_name: str) -> ConfigParser:
        msg: str
        if not Path(config_filename).exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        parser: ConfigParser = ConfigParser()
        # keep option names upper case so they match the dataclass fields
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            parser.read(config_filename, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None
        return parser

    def _apply_overrides(self, overrides: dict[str, Any]) -> None:
        if overrides.get("debug", False):
            self.config.GENERAL.DEBUG = True
        if overrides.get("host") is not None:
            self.config.SERVER.HOST = str(overrides["host"])
        if overrides.get("port") is not None:
            self.config.SERVER.PORT = int(overrides["port"])
        if overrides.get("log_dir") is not None:
            self.config.MONITOR.LOG_DIR = str(overrides["log_dir"])

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Convert configuration settings from the parser to the Config object.

        Args:
            parser (ConfigParser): Parsed INI data.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config, parser)
        for section in fields(self.config):
            if not parser.has_section(section.name):
                logger.debug("Skipping undefined section: '%s'", section.name)
                continue
            for key in fields(getattr(self.config, section.name)):
                if not parser.has_option(section.name, key.name):
                    logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                    continue
                formatted_value = formatter.apply_format(section, key)
                setattr(getattr(self.config, section.name), key.name, formatted_value)

    def _validate_settings(self) -> None:
        """Validate languages, engines, intervals and the server list.

        Raises:
            ConfigFormatError: If validation fails for any setting.
        """
        self._inspect_defined_item("TRANSLATION", "ENGINE", ALLOWED_TRANSLATION_ENGINES)
        self._validate_languages()
        for section_name, key_name in (
            ("TRANSLATION", "TIMEOUT"),
            ("CACHE", "MAX_ENTRIES"),
            ("CACHE", "MAX_BYTES"),
            ("CACHE", "EXPIRY_DAYS"),
            ("CACHE", "SWEEP_INTERVAL"),
            ("MONITOR", "POLL_INTERVAL"),
        ):
            self._validate_positive(section_name, key_name)

        ratio: float = self.config.CACHE.EVICTION_RATIO
        if not 0.0 < ratio <= 1.0:
            msg = f"'CACHE.EVICTION_RATIO' must be within (0, 1]: {ratio}"
            raise ConfigValueError(msg)

        if not isinstance(self.config.MONITOR.SERVERS, list):
            msg = f"Unsupported type used for 'MONITOR.SERVERS': {type(self.config.MONITOR.SERVERS)}"
            raise ConfigTypeError(msg)

    def _validate_languages(self) -> None:
        native: str = self.config.TRANSLATION.NATIVE_LANGUAGE.strip().lower()
        second: str = self.config.TRANSLATION.SECOND_LANGUAGE.strip().lower()
        if not native or not second:
            msg = "'TRANSLATION.NATIVE_LANGUAGE' and 'TRANSLATION.SECOND_LANGUAGE' must not be empty."
            raise ConfigValueError(msg)
        if native == second:
            msg = f"'TRANSLATION.NATIVE_LANGUAGE' and 'TRANSLATION.SECOND_LANGUAGE' are both '{native}'."
            raise ConfigValueError(msg)
        self.config.TRANSLATION.NATIVE_LANGUAGE = native
        self.config.TRANSLATION.SECOND_LANGUAGE = second

    def _validate_positive(self, section_name: str, key_name: str) -> None:
        value: float = getattr(getattr(self.config, section_name), key_name)
        if value <= 0:
            msg = f"'{section_name}.{key_name}' must be a positive number: {value}"
            raise ConfigValueError(msg)

    def _inspect_defined_item(self, section_name: str, key_name: str, defined_list: list[str]) -> None:
        """Verify that configuration values match allowed options.

        Logs warnings for unrecognized values but does not raise exceptions.

        Args:
            section_name (str): Section name in the config model.
            key_name (str): Field name to inspect.
            defined_list (list[str]): Allowed values.

        Raises:
            ConfigTypeError: If the configured value is neither list nor str.
        """
        value: str | list[str] = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"

        if not isinstance(value, (list, str)):
            msg: str = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)

        values: list[str] = value if isinstance(value, list) else [value]
        for val in values:
            if val not in defined_list:
                logger.warning("Unknown value '%s' is set for '%s'", val, field_name)
        setattr(getattr(self.config, section_name), key_name, values)


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, list, dict)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert INI value to the expected Python type based on the Config field default.

        Args:
            section (DataclassField[Any]): Configuration section field containing the key.
            key (DataclassField[Any]): Target field within the section.

        Returns:
            Any: Parsed value coerced to the type of the default value.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[type, Callable[[DataclassField[Any], DataclassField[Any]], Any]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
            str: self.parse_as_string,
        }

        formatter: Callable[[DataclassField[Any], DataclassField[Any]], Any] | None = formatters.get(
            type(getattr(getattr(self.config, section.name), key.name))
        )
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser[section.name][key.name]
        try:
            return ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

    def _stripped(self, section: DataclassField[Any], key: DataclassField[Any], chars: tuple[str, ...]) -> str:
        value: str = self.parser.get(section.name, key.name).strip()
        for char in chars:
            value = value.removeprefix(char).removesuffix(char)
        return value

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        """Convert INI string to float."""
        return float(self._stripped(section, key, ("'", '"', "%")))

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        """Convert INI string to integer."""
        return int(float(self._stripped(section, key, ("'", '"', "%"))))

    def parse_as_string(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        """Return the INI string with surrounding quotes removed."""
        return self._stripped(section, key, ("'", '"'))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        """Convert INI string to boolean."""
        return self.parser.getboolean(section.name, key.name)
