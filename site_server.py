"""Serve the translation and player-count HTTP API.

Starts the shared services (state database, translation cache and resolver, language
context and the monitor poller) and exposes them through aiohttp.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Final, NoReturn

from aiohttp import web

from config.loader import Config, ConfigLoader, ConfigLoaderError
from core.shared_data import SharedData
from handlers.web_api import create_app
from utils.logger_utils import LoggerUtils

CFG_FILE: Final[str] = "site_companion.ini"


def check_python_version() -> None:
    """Check if Python version is 3.13 or later.

    Raises:
        RuntimeError: If Python version is below 3.13.
    """
    if sys.version_info < (3, 13):
        msg = "Python 3.13 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = _ArgumentParser(
        description="Site companion API server",
        epilog="Example: python site_server.py --host 0.0.0.0 --port 8080",
    )
    parser.add_argument("--config", dest="config", metavar="FILE", default=CFG_FILE, help="Configuration file")
    parser.add_argument("--host", dest="host", metavar="HOST", help="Override SERVER.HOST")
    parser.add_argument("--port", dest="port", metavar="PORT", type=int, help="Override SERVER.PORT")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file, if present, and apply CLI overrides.

    Raises:
        ConfigLoaderError: If the configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).name
    config_filename: str | None = args.config
    if args.config == CFG_FILE and not Path(CFG_FILE).exists():
        config_filename = None
    return ConfigLoader(
        config_filename=config_filename,
        script_name=script_name,
        debug=args.debug,
        host=args.host,
        port=args.port,
    ).config


def main(argv: list[str] | None = None) -> int:
    check_python_version()
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    LoggerUtils.setup(config.GENERAL.LOG_FILE, debug=config.GENERAL.DEBUG)
    app: web.Application = create_app(SharedData(config), manage_lifecycle=True)
    web.run_app(app, host=config.SERVER.HOST, port=config.SERVER.PORT)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except RuntimeError as err:
        print(f"\nFatal error: {err}", file=sys.stderr)
        sys.exit(1)
