"""Record FiveM player counts to the daily snapshot logs.

Fetches every configured server once a minute and appends the results to
``<LOG_DIR>/<YYYY-MM-DD>.jsonl``, keeping the per-day peak map under ``daily-max/``.
Run it alongside the web server, or on its own; it talks to the FiveM API directly.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Final, NoReturn

from config.loader import Config, ConfigLoader, ConfigLoaderError
from core.monitor.fivem_client import FivemClient
from core.monitor.log_store import SnapshotLogStore
from core.monitor.server_list import load_server_configs
from core.monitor.snapshot_logger import SnapshotLogger
from models.monitor_models import ServerConfig
from utils.logger_utils import LoggerUtils

CFG_FILE: Final[str] = "site_companion.ini"
TICK_SECONDS: Final[float] = 60.0


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
        description="Record FiveM player counts once a minute",
        epilog="Example: python fivem_cron.py --log-dir data/fivem --once",
    )
    parser.add_argument("--config", dest="config", metavar="FILE", default=CFG_FILE, help="Configuration file")
    parser.add_argument("--log-dir", dest="log_dir", metavar="DIR", help="Override MONITOR.LOG_DIR")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--once", dest="once", action="store_true", help="Record a single tick and exit")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file, if present, and apply CLI overrides.

    The default file is optional; an explicitly named file must exist.

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
        log_dir=args.log_dir,
    ).config


async def main(argv: list[str] | None = None) -> int:
    check_python_version()
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    LoggerUtils.setup(config.GENERAL.LOG_FILE, debug=config.GENERAL.DEBUG, verbose=True)
    logger = LoggerUtils.get_logger(Path(__file__).stem)

    servers: list[ServerConfig] = load_server_configs(config)
    if not servers:
        logger.warning("No servers configured. Set FIVEM_SERVERS or MONITOR.SERVERS.")
        return 0

    client = FivemClient(config)
    recorder = SnapshotLogger(
        servers,
        client.fetch_snapshot,
        SnapshotLogStore(config.MONITOR.LOG_DIR),
        interval=TICK_SECONDS,
    )
    logger.info("FiveM cron started. Log directory: %s", config.MONITOR.LOG_DIR)
    try:
        if args.once:
            await recorder.tick()
        else:
            await recorder.run_forever()
    finally:
        await client.close()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nStopped.", file=sys.stderr)
    except RuntimeError as err:
        print(f"\nFatal error: {err}", file=sys.stderr)
        sys.exit(1)
