"""Date-partitioned snapshot logs on local disk.

Layout under the log directory::

    <YYYY-MM-DD>.jsonl            one SnapshotRecord per line, append-only
    daily-max/<YYYY-MM-DD>.json   {server id: DailyPeakRecord}

Dates are local calendar dates; record timestamps are ISO-8601 UTC.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from core.monitor.errors import LogFileNotFoundError
from models.monitor_models import DailyPeakRecord, PlayerSnapshot, SnapshotRecord
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

__all__: list[str] = ["SnapshotLogStore", "date_str", "parse_timestamp"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DAILY_PEAK_DIR: Final[str] = "daily-max"

type _LogSignature = tuple[int, int]


def date_str(moment: datetime | None = None) -> str:
    """Return the local calendar date of `moment` (default: now) as ``YYYY-MM-DD``."""
    local: datetime = (moment or datetime.now().astimezone()).astimezone()
    return local.strftime("%Y-%m-%d")


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when it is not one."""
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


class SnapshotLogStore:
    """Reads and writes snapshot logs and daily peak maps.

    Attributes:
        log_dir (Path): Directory holding the daily logs.
    """

    def __init__(self, log_dir: str | Path) -> None:
        self.log_dir: Path = Path(log_dir)
        self._latest: dict[str, tuple[_LogSignature, dict[str, SnapshotRecord]]] = {}

    @property
    def peak_dir(self) -> Path:
        return self.log_dir / DAILY_PEAK_DIR

    def log_path(self, date: str) -> Path:
        return self.log_dir / f"{date}.jsonl"

    def peak_path(self, date: str) -> Path:
        return self.peak_dir / f"{date}.json"

    def append_record(self, record: SnapshotRecord, date: str | None = None) -> None:
        """Append one record to the log of `date` (default: the record's own local date).

        Raises:
            OSError: If the log file cannot be written.
        """
        if date is None:
            stamp: datetime | None = parse_timestamp(record.timestamp)
            date = date_str(stamp)
        path: Path = self.log_path(date)
        path.parent.mkdir(parents=True, exist_ok=True)
        before: _LogSignature | None = self._signature(path)
        with path.open("a", encoding="utf-8") as fp:
            fp.write(record.to_json(ensure_ascii=False) + "\n")
        self._remember_appended(date, record, before)

    def read_samples(self, date: str | None = None, server_id: str | None = None) -> list[SnapshotRecord]:
        """Return the records of one day in ascending timestamp order.

        Lines that are not valid records are skipped.

        Args:
            date (str | None): ``YYYY-MM-DD``. Defaults to today.
            server_id (str | None): Only return records of this server.

        Returns:
            list[SnapshotRecord]: Records sorted by timestamp.

        Raises:
            LogFileNotFoundError: If no log exists for the date.
        """
        date = date or date_str()
        path: Path = self.log_path(date)
        try:
            raw: str = path.read_text(encoding="utf-8")
        except FileNotFoundError as err:
            msg = f"No log file for {date}"
            raise LogFileNotFoundError(msg) from err

        dated: list[tuple[datetime, SnapshotRecord]] = []
        for line_no, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            record: SnapshotRecord | None = self._parse_line(line)
            if record is None:
                logger.debug("Skipping malformed line %d in %s", line_no, path.name)
                continue
            if server_id is not None and record.id != server_id:
                continue
            stamp: datetime | None = parse_timestamp(record.timestamp)
            if stamp is None:
                logger.debug("Skipping record with invalid timestamp on line %d in %s", line_no, path.name)
                continue
            dated.append((stamp, record))

        dated.sort(key=lambda pair: pair[0].timestamp())
        return [record for _, record in dated]

    @staticmethod
    def _parse_line(line: str) -> SnapshotRecord | None:
        try:
            data: Any = json.loads(line)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict) or "timestamp" not in data or "id" not in data:
            return None
        try:
            return SnapshotRecord.from_dict(data)
        except (KeyError, TypeError, ValueError):
            return None

    def latest_snapshot(self, server_id: str, date: str | None = None) -> PlayerSnapshot | None:
        """Return the most recent successful snapshot of a server for a date, if any.

        The day log is parsed once and the result kept until the file changes on disk.
        """
        record: SnapshotRecord | None = self._latest_good_records(date or date_str()).get(server_id)
        if record is None:
            return None
        return PlayerSnapshot(players=record.players, max_players=record.max_players, last_updated=record.timestamp)

    def _latest_good_records(self, date: str) -> dict[str, SnapshotRecord]:
        signature: _LogSignature | None = self._signature(self.log_path(date))
        if signature is None:
            self._latest.pop(date, None)
            return {}
        cached: tuple[_LogSignature, dict[str, SnapshotRecord]] | None = self._latest.get(date)
        if cached is not None and cached[0] == signature:
            return cached[1]

        latest: dict[str, SnapshotRecord] = {}
        try:
            records: list[SnapshotRecord] = self.read_samples(date)
        except LogFileNotFoundError:
            return {}
        for record in records:
            if self._is_good(record):
                latest[record.id] = record
        self._latest[date] = (signature, latest)
        return latest

    def _remember_appended(self, date: str, record: SnapshotRecord, before: _LogSignature | None) -> None:
        cached: tuple[_LogSignature, dict[str, SnapshotRecord]] | None = self._latest.get(date)
        if cached is None:
            return
        after: _LogSignature | None = self._signature(self.log_path(date))
        if cached[0] != before or after is None:
            # written by someone else since the last parse
            self._latest.pop(date, None)
            return
        latest: dict[str, SnapshotRecord] = cached[1]
        stamp: datetime | None = parse_timestamp(record.timestamp)
        if stamp is not None and self._is_good(record):
            previous: SnapshotRecord | None = latest.get(record.id)
            previous_stamp: datetime | None = parse_timestamp(previous.timestamp) if previous is not None else None
            if previous_stamp is None or stamp.timestamp() >= previous_stamp.timestamp():
                latest[record.id] = record
        self._latest[date] = (after, latest)

    @staticmethod
    def _signature(path: Path) -> _LogSignature | None:
        try:
            stat = path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_size, stat.st_mtime_ns)

    @staticmethod
    def _is_good(record: SnapshotRecord) -> bool:
        return record.players is not None and not record.is_error
        for record in reversed(records):
            if record.players is not None and not record.is_error:
                return PlayerSnapshot(
                    players=record.players, max_players=record.max_players, last_updated=record.timestamp
                )
        return None

    def read_daily_peaks(self, date: str | None = None, *, missing_ok: bool = False) -> dict[str, DailyPeakRecord]:
        """Return the peak map of a date.

        Args:
            date (str | None): ``YYYY-MM-DD``. Defaults to today.
            missing_ok (bool): Return an empty map instead of raising when the file is
                missing or unreadable.

        Raises:
            LogFileNotFoundError: If the file is missing or unreadable and `missing_ok` is False.
        """
        date = date or date_str()
        path: Path = self.peak_path(date)
        try:
            data: Any = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                msg = f"Peak file for {date} is not an object"
                raise ValueError(msg)
            return {str(key): DailyPeakRecord.from_dict(value) for key, value in data.items()}
        except FileNotFoundError as err:
            if missing_ok:
                return {}
            msg = f"No daily peak file for {date}"
            raise LogFileNotFoundError(msg) from err
        except (ValueError, KeyError, TypeError, AttributeError) as err:
            logger.warning("Failed to read daily peak file %s: %s", path.name, err)
            if missing_ok:
                return {}
            msg = f"Unreadable daily peak file for {date}"
            raise LogFileNotFoundError(msg) from err

    def write_daily_peaks(self, date: str, peaks: Mapping[str, DailyPeakRecord]) -> None:
        path: Path = self.peak_path(date)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload: dict[str, Any] = {key: record.to_dict() for key, record in peaks.items()}
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
