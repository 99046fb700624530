from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from core.monitor.errors import LogFileNotFoundError
from core.monitor.log_store import SnapshotLogStore, date_str, parse_timestamp
from models.monitor_models import DailyPeakRecord, SnapshotRecord

if TYPE_CHECKING:
    from pathlib import Path

DATE = "2025-03-01"


@pytest.fixture
def log_store(tmp_path: Path) -> SnapshotLogStore:
    return SnapshotLogStore(tmp_path / "fivem")


def _write_lines(log_store: SnapshotLogStore, lines: list[str]) -> None:
    path = log_store.log_path(DATE)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_parse_timestamp() -> None:
    assert parse_timestamp("2025-03-01T10:00:00+00:00") == datetime(2025, 3, 1, 10, tzinfo=UTC)
    assert parse_timestamp("yesterday") is None


def test_date_str_formats_local_date() -> None:
    moment = datetime(2025, 3, 1, 12, 0).astimezone()

    assert date_str(moment) == "2025-03-01"


def test_append_creates_the_daily_file(log_store: SnapshotLogStore) -> None:
    log_store.append_record(SnapshotRecord(timestamp="2025-03-01T10:00:00+00:00", id="a", name="第七席", players=5), DATE)
    log_store.append_record(SnapshotRecord(timestamp="2025-03-01T10:01:00+00:00", id="b", error="timeout"), DATE)

    lines = log_store.log_path(DATE).read_text(encoding="utf-8").splitlines()

    assert [json.loads(line) for line in lines] == [
        {"timestamp": "2025-03-01T10:00:00+00:00", "id": "a", "name": "第七席", "players": 5},
        {"timestamp": "2025-03-01T10:01:00+00:00", "id": "b", "name": "", "error": "timeout"},
    ]
    assert "第七席" in lines[0]


def test_read_samples_sorts_filters_and_skips_bad_lines(log_store: SnapshotLogStore) -> None:
    _write_lines(
        log_store,
        [
            '{"timestamp": "2025-03-01T10:02:00+00:00", "id": "a", "players": 7}',
            "not json",
            '{"id": "a", "players": 1}',
            '{"timestamp": "soon", "id": "a", "players": 2}',
            "",
            '{"timestamp": "2025-03-01T10:00:00+00:00", "id": "a", "players": 5}',
            '{"timestamp": "2025-03-01T10:01:00+00:00", "id": "b", "players": 9}',
        ],
    )

    everything = log_store.read_samples(DATE)
    only_a = log_store.read_samples(DATE, "a")

    assert [(r.id, r.players) for r in everything] == [("a", 5), ("b", 9), ("a", 7)]
    assert [r.players for r in only_a] == [5, 7]


def test_read_samples_missing_file(log_store: SnapshotLogStore) -> None:
    with pytest.raises(LogFileNotFoundError):
        log_store.read_samples(DATE)


def test_latest_snapshot_skips_error_records(log_store: SnapshotLogStore) -> None:
    _write_lines(
        log_store,
        [
            '{"timestamp": "2025-03-01T10:00:00+00:00", "id": "a", "players": 5, "maxPlayers": 64}',
            '{"timestamp": "2025-03-01T10:01:00+00:00", "id": "a", "error": "timeout"}',
        ],
    )

    snapshot = log_store.latest_snapshot("a", DATE)

    assert snapshot is not None
    assert snapshot.players == 5
    assert snapshot.max_players == 64
    assert snapshot.last_updated == "2025-03-01T10:00:00+00:00"
    assert log_store.latest_snapshot("b", DATE) is None
    assert log_store.latest_snapshot("a", "2025-03-02") is None


def test_latest_snapshot_parses_the_day_log_once(log_store: SnapshotLogStore, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_lines(
        log_store,
        [
            '{"timestamp": "2025-03-01T10:00:00+00:00", "id": "a", "players": 5}',
            '{"timestamp": "2025-03-01T10:00:00+00:00", "id": "b", "players": 9}',
        ],
    )
    reads: list[str | None] = []
    read_samples = log_store.read_samples

    def counting_read_samples(date: str | None = None, server_id: str | None = None) -> list[SnapshotRecord]:
        reads.append(date)
        return read_samples(date, server_id)

    monkeypatch.setattr(log_store, "read_samples", counting_read_samples)

    first_a = log_store.latest_snapshot("a", DATE)
    first_b = log_store.latest_snapshot("b", DATE)
    log_store.append_record(SnapshotRecord(timestamp="2025-03-01T10:01:00+00:00", id="a", players=6), DATE)
    log_store.append_record(SnapshotRecord(timestamp="2025-03-01T10:01:00+00:00", id="b", error="timeout"), DATE)
    second_a = log_store.latest_snapshot("a", DATE)
    second_b = log_store.latest_snapshot("b", DATE)

    assert first_a is not None and first_a.players == 5
    assert first_b is not None and first_b.players == 9
    assert second_a is not None and second_a.players == 6
    assert second_b is not None and second_b.players == 9
    assert reads == [DATE]


def test_latest_snapshot_rereads_a_log_changed_elsewhere(log_store: SnapshotLogStore) -> None:
    _write_lines(log_store, ['{"timestamp": "2025-03-01T10:00:00+00:00", "id": "a", "players": 5}'])
    first = log_store.latest_snapshot("a", DATE)

    with log_store.log_path(DATE).open("a", encoding="utf-8") as fp:
        fp.write('{"timestamp": "2025-03-01T10:05:00+00:00", "id": "a", "players": 11}\n')
    second = log_store.latest_snapshot("a", DATE)

    assert first is not None and first.players == 5
    assert second is not None and second.players == 11


def test_daily_peaks_round_trip(log_store: SnapshotLogStore) -> None:
    peaks = {
        "a": DailyPeakRecord(id="a", name="Alpha", players=40, timestamp="2025-03-01T10:00:00+00:00", max_players=64),
        "b": DailyPeakRecord(id="b", name="Beta", players=3, timestamp="2025-03-01T11:00:00+00:00"),
    }

    log_store.write_daily_peaks(DATE, peaks)

    stored = json.loads(log_store.peak_path(DATE).read_text(encoding="utf-8"))
    assert stored["a"]["maxPlayers"] == 64
    assert "maxPlayers" not in stored["b"]
    assert log_store.read_daily_peaks(DATE) == peaks


def test_missing_peaks(log_store: SnapshotLogStore) -> None:
    assert log_store.read_daily_peaks(DATE, missing_ok=True) == {}
    with pytest.raises(LogFileNotFoundError):
        log_store.read_daily_peaks(DATE)


def test_corrupt_peaks(log_store: SnapshotLogStore) -> None:
    log_store.peak_path(DATE).parent.mkdir(parents=True)
    log_store.peak_path(DATE).write_text("[1, 2]", encoding="utf-8")

    assert log_store.read_daily_peaks(DATE, missing_ok=True) == {}
    with pytest.raises(LogFileNotFoundError):
        log_store.read_daily_peaks(DATE)
