"""Game-server player-count monitoring.

Live snapshots, the date-partitioned snapshot logs, the in-memory poller and the
standalone snapshot logger.
"""

from core.monitor.errors import LogFileNotFoundError, MonitorError, SnapshotFetchError
from core.monitor.fivem_client import FivemClient, normalize_snapshot
from core.monitor.log_store import SnapshotLogStore
from core.monitor.poller import ServerMonitorPoller
from core.monitor.server_list import load_server_configs, parse_server_list
from core.monitor.snapshot_logger import SnapshotLogger

__all__: list[str] = [
    "FivemClient",
    "LogFileNotFoundError",
    "MonitorError",
    "ServerMonitorPoller",
    "SnapshotFetchError",
    "SnapshotLogStore",
    "SnapshotLogger",
    "load_server_configs",
    "normalize_snapshot",
    "parse_server_list",
]
