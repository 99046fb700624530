"""Resolution of the monitored server list.

Precedence: the ``FIVEM_SERVERS`` environment variable, then ``MONITOR.SERVERS`` from the
configuration file, then the built-in defaults. The environment value is JSON, either a
list of ``{"name", "id", "color"}`` objects or a ``{name: id}`` map.
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any, Final

from models.monitor_models import ServerConfig
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

    from models.config_models import Config

__all__: list[str] = ["DEFAULT_SERVERS", "SERVERS_ENV_VAR", "load_server_configs", "parse_server_list"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SERVERS_ENV_VAR: Final[str] = "FIVEM_SERVERS"

DEFAULT_SERVERS: Final[tuple[ServerConfig, ...]] = (
    ServerConfig(name="第七席", id="6e9ro6", color="#3b82f6"),
    ServerConfig(name="Eoxgen", id="polpm5", color="#ef4444"),
    ServerConfig(name="示例伺服器 C", id="example_c", color="#10b981"),
)


def _from_item(item: Any) -> ServerConfig | None:
    if isinstance(item, ServerConfig):
        return item
    if isinstance(item, str) and item.strip():
        return ServerConfig(name=item.strip(), id=item.strip())
    if not isinstance(item, dict) or not item.get("id"):
        return None
    server_id: str = str(item["id"])
    color: Any = item.get("color")
    return ServerConfig(name=str(item.get("name") or server_id), id=server_id, color=str(color) if color else None)


def parse_server_list(value: Any) -> list[ServerConfig]:
    """Build server configs from a decoded list or ``{name: id}`` map.

    Entries without an id are dropped.

    Raises:
        ValueError: If `value` is neither a list nor a mapping.
    """
    if isinstance(value, list):
        servers: list[ServerConfig] = []
        for item in value:
            server: ServerConfig | None = _from_item(item)
            if server is None:
                logger.warning("Ignoring server entry without an id: %r", item)
                continue
            servers.append(server)
        return servers
    if isinstance(value, dict):
        return [ServerConfig(name=str(name), id=str(server_id)) for name, server_id in value.items() if server_id]
    msg = f"Server list must be a list or an object, not {type(value).__name__}"
    raise ValueError(msg)


def load_server_configs(config: Config, environ: Mapping[str, str] | None = None) -> list[ServerConfig]:
    """Return the servers to monitor, in display order.

    An unparsable environment value is logged and the defaults are used, matching the
    behaviour of an unset variable with an empty configuration.

    Args:
        config (Config): Application configuration.
        environ (Mapping[str, str] | None): Environment to read. Defaults to `os.environ`.

    Returns:
        list[ServerConfig]: Possibly empty list of servers.
    """
    env: Mapping[str, str] = os.environ if environ is None else environ
    raw: str | None = env.get(SERVERS_ENV_VAR)
    if raw:
        try:
            return parse_server_list(json.loads(raw))
        except ValueError as err:
            logger.warning("Failed to parse %s, using defaults: %s", SERVERS_ENV_VAR, err)
            return list(DEFAULT_SERVERS)

    if config.MONITOR.SERVERS:
        try:
            return parse_server_list(config.MONITOR.SERVERS)
        except ValueError as err:
            logger.warning("Invalid MONITOR.SERVERS, using defaults: %s", err)
            return list(DEFAULT_SERVERS)

    return list(DEFAULT_SERVERS)
