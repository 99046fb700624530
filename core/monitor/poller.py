"""In-memory player-count time series fed by periodic polling.

`ServerMonitorPoller` seeds its series from today's snapshot log, then polls every
configured server on a fixed interval. All series share one minute-label axis, and the
combined series is the index-wise sum of the per-server series.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from core.monitor.errors import LogFileNotFoundError, MonitorError
from core.monitor.log_store import parse_timestamp
from models.monitor_models import TimeSeriesPoint
from utils.interval_timer import IntervalTimer
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable, Sequence

    from core.monitor.fivem_client import FivemClient
    from core.monitor.log_store import SnapshotLogStore
    from models.config_models import Config
    from models.monitor_models import PlayerSnapshot, ServerConfig, SnapshotRecord

__all__: list[str] = ["PollerState", "ServerMonitorPoller", "SnapshotSource", "format_time_label", "minute_slot"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type PollerState = Literal["uninitialized", "loading_config", "config_empty", "polling", "stopped"]
type SnapshotSource = Callable[[str], Awaitable[PlayerSnapshot | None]]

COMBINED_SERIES_LABEL: str = "整體在線數 (合計)"


def format_time_label(moment: datetime) -> str:
    """Return the local ``HH:MM`` label of `moment`."""
    return moment.astimezone().strftime("%H:%M")


def minute_slot(moment: datetime) -> str:
    """Return the local date-qualified minute of `moment`; points are unique per slot."""
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


def _local_now() -> datetime:
    return datetime.now().astimezone()


class ServerMonitorPoller:
    """Polls player counts and keeps aligned per-server series.

    Snapshot sources are tried in order for each server; the first one that returns a
    snapshot supplies the point. When every source fails the point is 0.
    """

    def __init__(
        self,
        config: Config,
        *,
        server_loader: Callable[[], Sequence[ServerConfig]],
        sources: Sequence[SnapshotSource],
        history_loader: Callable[[], Sequence[SnapshotRecord]] | None = None,
        clock: Callable[[], datetime] = _local_now,
        on_update: Callable[[ServerMonitorPoller], None] | None = None,
    ) -> None:
        """Initialize the poller.

        Args:
            config (Config): Application configuration.
            server_loader (Callable[[], Sequence[ServerConfig]]): Returns the servers to poll.
            sources (Sequence[SnapshotSource]): Snapshot sources in fallback order.
            history_loader (Callable[[], Sequence[SnapshotRecord]] | None): Returns today's logged
                records. None skips the history merge.
            clock (Callable[[], datetime]): Source of the current time.
            on_update (Callable[[ServerMonitorPoller], None] | None): Called after the series change.
        """
        self.interval: float = config.MONITOR.POLL_INTERVAL
        self._server_loader: Callable[[], Sequence[ServerConfig]] = server_loader
        self._sources: list[SnapshotSource] = list(sources)
        self._history_loader: Callable[[], Sequence[SnapshotRecord]] | None = history_loader
        self._clock: Callable[[], datetime] = clock
        self._on_update: Callable[[ServerMonitorPoller], None] | None = on_update

        self._state: PollerState = "uninitialized"
        self._servers: list[ServerConfig] = []
        self._labels: list[str] = []
        self._slots: list[str] = []
        self._series: dict[str, list[int]] = {}
        self._timer: IntervalTimer | None = None
        self._ticks_in_flight: int = 0
        self._session: int = 0

    @classmethod
    def from_services(
        cls,
        config: Config,
        *,
        servers: Callable[[], Sequence[ServerConfig]],
        client: FivemClient,
        log_store: SnapshotLogStore,
        **kwargs: Any,
    ) -> ServerMonitorPoller:
        """Build a poller that uses the live API first and today's log as the fallback tier."""

        async def logged_snapshot(server_id: str) -> PlayerSnapshot | None:
            return log_store.latest_snapshot(server_id)

        def history() -> Sequence[SnapshotRecord]:
            try:
                return log_store.read_samples()
            except LogFileNotFoundError:
                logger.info("No snapshot log for today; starting with empty series")
                return []

        return cls(
            config,
            server_loader=servers,
            sources=[client.fetch_snapshot, logged_snapshot],
            history_loader=history,
            **kwargs,
        )

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._ticks_in_flight > 0

    @property
    def servers(self) -> list[ServerConfig]:
        return list(self._servers)

    @property
    def labels(self) -> list[str]:
        return list(self._labels)

    def series(self, server_id: str) -> list[TimeSeriesPoint]:
        values: list[int] = self._series.get(server_id, [])
        return [TimeSeriesPoint(label=label, players=value) for label, value in zip(self._labels, values, strict=False)]

    def values(self, server_id: str) -> list[int]:
        return list(self._series.get(server_id, []))

    @property
    def combined_series(self) -> list[int]:
        combined: list[int] = [0] * len(self._labels)
        for server in self._servers:
            for index, value in enumerate(self._series.get(server.id, [])[: len(combined)]):
                combined[index] += value
        return combined

    def latest_per_server(self) -> dict[str, int]:
        return {
            server.id: (self._series[server.id][-1] if self._series.get(server.id) else 0) for server in self._servers
        }

    def chart_data(self) -> dict[str, Any]:
        """Return labels and one dataset per server, plus the combined dataset when several servers exist."""
        datasets: list[dict[str, Any]] = [
            {"label": server.name, "id": server.id, "color": server.color, "data": self.values(server.id)}
            for server in self._servers
        ]
        if len(self._servers) > 1 and self._labels:
            datasets.append({"label": COMBINED_SERIES_LABEL, "id": None, "color": None, "data": self.combined_series})
        return {"labels": self.labels, "datasets": datasets}

    async def start(self) -> PollerState:
        """Load the servers, merge today's history and begin polling.

        Returns:
            PollerState: "config_empty" when there is nothing to poll, otherwise "polling".
        """
        if self._state == "polling":
            return self._state
        self._state = "loading_config"
        try:
            self._servers = list(self._server_loader())
        except (MonitorError, OSError, ValueError) as err:
            logger.error("Failed to load the server list: %s", err)
            self._servers = []

        if not self._servers:
            logger.warning("No servers configured; polling is disabled")
            self._state = "config_empty"
            return self._state

        self._series = {server.id: [] for server in self._servers}
        self._labels = []
        self._slots = []
        if self._history_loader is not None:
            try:
                self.merge_history(self._history_loader())
            except (MonitorError, OSError, ValueError) as err:
                logger.warning("History merge failed; starting with empty series: %s", err)

        self._session += 1
        self._state = "polling"
        self._timer = IntervalTimer(self.interval, self.tick, name="fivem-poller", run_immediately=True)
        self._timer.start()
        logger.info("Polling %d servers every %ss", len(self._servers), self.interval)
        return self._state

    async def stop(self) -> None:
        """Stop polling. Ticks still running complete, but their results are discarded."""
        self._session += 1
        if self._timer is not None:
            await self._timer.stop()
            self._timer = None
        self._state = "stopped"
        logger.info("Polling stopped")

    def merge_history(self, records: Sequence[SnapshotRecord]) -> None:
        """Seed the series from logged records.

        Records of unknown servers are ignored. Each distinct minute becomes one point for
        every server, zero-filled where the server has no record; when a server has several
        records for one minute, the last one in timestamp order wins.
        """
        known: set[str] = {server.id for server in self._servers}
        dated: list[tuple[datetime, SnapshotRecord]] = []
        for record in records:
            if record.id not in known:
                continue
            stamp: datetime | None = parse_timestamp(record.timestamp)
            if stamp is not None:
                dated.append((stamp, record))
        dated.sort(key=lambda pair: pair[0].timestamp())

        slots: list[str] = []
        labels: list[str] = []
        index_of: dict[str, int] = {}
        for stamp, _ in dated:
            slot: str = minute_slot(stamp)
            if slot not in index_of:
                index_of[slot] = len(slots)
                slots.append(slot)
                labels.append(format_time_label(stamp))

        series: dict[str, list[int]] = {server.id: [0] * len(labels) for server in self._servers}
        for stamp, record in dated:
            series[record.id][index_of[minute_slot(stamp)]] = record.players or 0

        self._slots = slots
        self._labels = labels
        self._series = series
        logger.info("Merged %d logged records into %d labels", len(dated), len(labels))
        self._notify()

    async def tick(self) -> None:
        """Fetch every server once and record one point per server."""
        if not self._servers:
            return
        session: int = self._session
        moment: datetime = self._clock()
        self._ticks_in_flight += 1
        try:
            results: list[int | BaseException] = await asyncio.gather(
                *(self._resolve_count(server) for server in self._servers),
                return_exceptions=True,
            )
        finally:
            self._ticks_in_flight -= 1

        if session != self._session:
            logger.debug("Discarding tick results after stop")
            return

        counts: dict[str, int] = {}
        for server, result in zip(self._servers, results, strict=True):
            if isinstance(result, BaseException):
                logger.error("Unexpected failure polling '%s': %s", server.id, result)
                counts[server.id] = 0
            else:
                counts[server.id] = result
        self._record(moment, counts)

    async def _resolve_count(self, server: ServerConfig) -> int:
        for source in self._sources:
            try:
                snapshot: PlayerSnapshot | None = await source(server.id)
            except (MonitorError, OSError, ValueError) as err:
                logger.debug("Snapshot source failed for '%s': %s", server.id, err)
                continue
            if snapshot is not None:
                return snapshot.players
        logger.warning("No snapshot available for '%s'; recording 0", server.id)
        return 0

    def _record(self, moment: datetime, counts: dict[str, int]) -> None:
        slot: str = minute_slot(moment)
        if slot in self._slots:
            index: int = self._slots.index(slot)
            for server in self._servers:
                self._series[server.id][index] = counts[server.id]
        else:
            self._slots.append(slot)
            self._labels.append(format_time_label(moment))
            for server in self._servers:
                self._series[server.id].append(counts[server.id])
        self._notify()

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update(self)
