"""Data models for the game-server player-count monitor."""

from __future__ import annotations

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, LetterCase, Undefined, config, dataclass_json

__all__: list[str] = [
    "DailyPeakRecord",
    "PlayerSnapshot",
    "ServerConfig",
    "SnapshotRecord",
    "TimeSeriesPoint",
]


def _omit_none(value: object) -> bool:
    return value is None


@dataclass_json(undefined=Undefined.EXCLUDE)
@dataclass(frozen=True)
class ServerConfig(DataClassJsonMixin):
    """A monitored game server.

    Attributes:
        name (str): Display name.
        id (str): Server identifier used by the live snapshot API.
        color (str | None): Chart color.
    """

    name: str
    id: str
    color: str | None = field(default=None, metadata=config(exclude=_omit_none))


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class PlayerSnapshot(DataClassJsonMixin):
    """A point-in-time player count.

    Attributes:
        players (int): Connected players.
        max_players (int | None): Server capacity, when reported.
        last_updated (str): ISO-8601 time the snapshot was taken.
        error (str | None): Set when the count is a fallback after a failed fetch.
    """

    players: int
    max_players: int | None = None
    last_updated: str = ""
    error: str | None = field(default=None, metadata=config(exclude=_omit_none))


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One labelled sample of a server's series.

    Attributes:
        label (str): Minute label ("HH:MM") shared by all series.
        players (int): Player count at that label.
    """

    label: str
    players: int


@dataclass_json(letter_case=LetterCase.CAMEL, undefined=Undefined.EXCLUDE)
@dataclass
class SnapshotRecord(DataClassJsonMixin):
    """One line of the daily snapshot log.

    Successful fetches carry `players` (and `max_players` when known); failed fetches
    carry `error` instead.
    """

    timestamp: str
    id: str
    name: str = ""
    players: int | None = field(default=None, metadata=config(exclude=_omit_none))
    max_players: int | None = field(default=None, metadata=config(exclude=_omit_none))
    error: str | None = field(default=None, metadata=config(exclude=_omit_none))

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass_json(letter_case=LetterCase.CAMEL, undefined=Undefined.EXCLUDE)
@dataclass
class DailyPeakRecord(DataClassJsonMixin):
    """Highest player count seen for one server on one date."""

    id: str
    name: str
    players: int
    timestamp: str
    max_players: int | None = field(default=None, metadata=config(exclude=_omit_none))
