"""Periodic recorder of player-count snapshots to the daily logs."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from core.monitor.errors import MonitorError
from core.monitor.log_store import date_str
from models.monitor_models import DailyPeakRecord, SnapshotRecord
from utils.interval_timer import IntervalTimer
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable, Sequence

    from core.monitor.log_store import SnapshotLogStore
    from models.monitor_models import PlayerSnapshot, ServerConfig

__all__: list[str] = ["SnapshotLogger"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# a server with no recorded peak loses to any count, including 0
NO_PEAK: int = -1


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _describe_error(err: BaseException) -> str:
    if isinstance(err, MonitorError):
        return str(err)
    return f"{type(err).__name__}: {err}"


class SnapshotLogger:
    """Appends one record per server per tick and maintains the daily peak map.

    Attributes:
        servers (list[ServerConfig]): Servers to record, in log order.
        interval (float): Seconds between ticks.
    """

    def __init__(
        self,
        servers: Sequence[ServerConfig],
        fetch: Callable[[str], Awaitable[PlayerSnapshot]],
        log_store: SnapshotLogStore,
        *,
        interval: float = 60.0,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.servers: list[ServerConfig] = list(servers)
        self.interval: float = interval
        self._fetch: Callable[[str], Awaitable[PlayerSnapshot]] = fetch
        self._log_store: SnapshotLogStore = log_store
        self._clock: Callable[[], datetime] = clock
        self._timer: IntervalTimer | None = None

    @property
    def is_running(self) -> bool:
        return self._timer is not None and self._timer.is_running

    def start(self) -> None:
        """Record immediately, then every `interval` seconds."""
        if not self.servers:
            logger.warning("No servers configured; nothing to record")
            return
        if self.is_running:
            return
        self._timer = IntervalTimer(self.interval, self.tick, name="fivem-cron", run_immediately=True)
        self._timer.start()
        logger.info("Recording %d servers every %ss to '%s'", len(self.servers), self.interval, self._log_store.log_dir)

    async def stop(self) -> None:
        if self._timer is not None:
            await self._timer.stop()
            self._timer = None

    async def tick(self) -> list[SnapshotRecord]:
        """Fetch all servers once and write the results.

        Every record of one tick shares the same timestamp, and the log date is the local
        date of that timestamp.

        Returns:
            list[SnapshotRecord]: The records written, in server order.
        """
        moment: datetime = self._clock()
        timestamp: str = moment.isoformat()
        date: str = date_str(moment)

        results: list[PlayerSnapshot | BaseException] = await asyncio.gather(
            *(self._fetch(server.id) for server in self.servers),
            return_exceptions=True,
        )

        peaks: dict[str, DailyPeakRecord] = self._log_store.read_daily_peaks(date, missing_ok=True)
        changed: bool = False
        records: list[SnapshotRecord] = []
        for server, result in zip(self.servers, results, strict=True):
            record: SnapshotRecord
            if isinstance(result, BaseException):
                logger.error("Error fetching %s(%s): %s", server.name, server.id, result)
                record = SnapshotRecord(timestamp=timestamp, id=server.id, name=server.name, error=_describe_error(result))
            else:
                record = SnapshotRecord(
                    timestamp=timestamp,
                    id=server.id,
                    name=server.name,
                    players=result.players,
                    max_players=result.max_players,
                )
                logger.info("%s(%s) players=%s", server.name, server.id, self._format_count(result))
                previous: DailyPeakRecord | None = peaks.get(server.id)
                if result.players > (previous.players if previous is not None else NO_PEAK):
                    peaks[server.id] = DailyPeakRecord(
                        id=server.id,
                        name=server.name,
                        players=result.players,
                        timestamp=timestamp,
                        max_players=result.max_players,
                    )
                    changed = True
                    logger.info("New daily peak for %s(%s): %s", server.name, server.id, self._format_count(result))

            try:
                self._log_store.append_record(record, date)
            except OSError as err:
                logger.error("Failed to write snapshot record for '%s': %s", server.id, err)
            records.append(record)

        if changed:
            try:
                self._log_store.write_daily_peaks(date, peaks)
            except OSError as err:
                logger.error("Failed to write daily peak file for %s: %s", date, err)
        return records

    @staticmethod
    def _format_count(snapshot: PlayerSnapshot) -> str:
        if snapshot.max_players:
            return f"{snapshot.players}/{snapshot.max_players}"
        return str(snapshot.players)

    async def run_forever(self) -> None:
        """Run until cancelled."""
        self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()
