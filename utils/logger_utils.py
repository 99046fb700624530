"""Namespaced logging for Site Companion.

Every module obtains its logger through `LoggerUtils.get_logger(__name__)`, which places it
under the ``SiteCompanion`` namespace. Handlers are attached once, to the namespace root, by
`LoggerUtils.setup()` in the entry scripts; until then records propagate to the standard
root logger, which is what pytest's ``caplog`` captures.
"""

from __future__ import annotations

import logging
import sys
import warnings
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Final, Literal, NamedTuple, Self, TextIO

if TYPE_CHECKING:
    from collections.abc import Callable

__all__: list[str] = ["LogLevel", "LoggerUtils"]

type LevelType = Literal[
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

_LOG_FILE_SIZE: Final[int] = 2 * 1024 * 1024  # 2MB
_LOG_BACKUP_COUNT: Final[int] = 2

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_NAMESPACE: Final[str] = "SiteCompanion"

CONSOLE_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(message)s"
FILE_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(process)5d %(lineno)4d %(name)-44s\t%(funcName)s\t%(message)s"


class LogLevel(NamedTuple):
    """Logging level as name and numeric value."""

    name: str
    value: int


class LoggerUtils:
    """Singleton that owns the handlers of the application's logger namespace.

    Attributes:
        _LOGGER_NAMESPACE (str): Prefix of every application logger.
        _configured (bool): Set once handlers have been attached.
        _instance (LoggerUtils | None): The singleton instance.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _instance: ClassVar[Self | None] = None
    _previous_showwarning: ClassVar[Callable[..., None] | None] = None

    def __new__(cls, *args, **kwargs) -> Self:
        _ = args, kwargs
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(
        self,
        filename: str | Path,
        *,
        console_level: int = logging.WARNING,
        use_null_console: bool = False,
    ) -> None:
        """Attach the console and file handlers.

        Does nothing when the namespace is already configured.

        Args:
            filename (str | Path): Log file path. An empty value disables file logging.
            console_level (int): Minimum level written to stderr.
            use_null_console (bool): Discard console output instead of writing to stderr.
        """
        if LoggerUtils._configured:
            return

        self.root_logger: logging.Logger = logging.getLogger(self._LOGGER_NAMESPACE)
        self._use_null_console: bool = bool(use_null_console) or sys.stderr is None
        # the logger level must not be above the handler levels
        self.root_logger.setLevel(DEFAULT_LOG_LEVEL)

        self._console_logging(console_level)
        if str(filename).strip():
            self._file_logging(Path(filename))
        else:
            self.root_logger.warning("Log file name is empty. Logging to the file is not performed.")

        LoggerUtils._previous_showwarning = warnings.showwarning
        warnings.showwarning = self.warning_to_log
        LoggerUtils._configured = True

    @classmethod
    def setup(cls, filename: str | Path, *, debug: bool = False, verbose: bool = False) -> LoggerUtils:
        """Configure logging for an entry script.

        Args:
            filename (str | Path): Log file path, resolved against the working directory.
            debug (bool): Log DEBUG records instead of INFO.
            verbose (bool): Also echo INFO records to the console.

        Returns:
            LoggerUtils: The configured singleton.
        """
        target: str | Path = Path(filename).resolve() if str(filename).strip() else ""
        instance: LoggerUtils = cls(target, console_level=logging.INFO if verbose else logging.WARNING)
        instance.set_level("DEBUG" if debug else "INFO")
        return instance

    @classmethod
    def reset(cls) -> None:
        """Detach every handler and allow the namespace to be configured again."""
        root: logging.Logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.NOTSET)
        if cls._previous_showwarning is not None:
            warnings.showwarning = cls._previous_showwarning
            cls._previous_showwarning = None
        cls._configured = False
        cls._instance = None

    def warning_to_log(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        """Route `warnings.warn` output to the log; signature matches `warnings.showwarning`."""
        _ = file, line
        self.root_logger.warning("%s:%d: %s: %s", filename, lineno, category.__name__, message)

    def _console_logging(self, level: int) -> None:
        if self._use_null_console:
            if not self._has_handler(NullHandler):
                self.root_logger.addHandler(NullHandler())
            return

        if self._has_handler(StreamHandler, exact=True):
            self.root_logger.warning("Console logging is already configured.")
            return

        console_handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        self.root_logger.addHandler(console_handler)

    def _file_logging(self, path: Path) -> None:
        """Attach a UTF-8 rotating file handler at DEBUG level.

        Args:
            path (Path): Log file path. Missing parent directories are created.
        """
        if self._has_handler(RotatingFileHandler):
            self.root_logger.warning("File logging is already configured.")
            return

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=path,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as err:
            self.root_logger.error("Cannot open log file '%s': %s. Logging to the file is not performed.", path, err)
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(Formatter(FILE_FORMAT))
        self.root_logger.addHandler(file_handler)

    def _has_handler(self, handler_type: type, *, exact: bool = False) -> bool:
        if exact:
            return any(type(h) is handler_type for h in self.root_logger.handlers)
        return any(isinstance(h, handler_type) for h in self.root_logger.handlers)

    def set_level(self, level: LevelType) -> None:
        """Set the namespace level; unknown names fall back to INFO with a warning."""
        level_map: dict[str, int] = logging.getLevelNamesMapping()
        try:
            self.root_logger.setLevel(level_map[level.upper()])
        except KeyError:
            self.root_logger.setLevel(DEFAULT_LOG_LEVEL)
            self.root_logger.warning("Unknown logging level '%s' specified. Logging level set to 'INFO'.", level)

    def get_level(self) -> LogLevel:
        level_value: int = self.root_logger.getEffectiveLevel()
        return LogLevel(name=logging.getLevelName(level_value), value=level_value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Return the logger `name` inside the application namespace.

        Args:
            name (str | None): Module name. None returns the namespace root logger.

        Returns:
            logging.Logger: The logger instance.
        """
        namespace: str = LoggerUtils._LOGGER_NAMESPACE
        if not namespace:
            return logging.getLogger(name or None)
        return logging.getLogger(f"{namespace}.{name}" if name else namespace)
