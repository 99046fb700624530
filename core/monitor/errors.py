"""Exceptions raised by the player-count monitor."""

from __future__ import annotations

__all__: list[str] = ["LogFileNotFoundError", "MonitorError", "SnapshotFetchError"]


class MonitorError(Exception):
    """An error occurred in the player-count monitor."""


class SnapshotFetchError(MonitorError):
    """A player-count snapshot could not be obtained."""


class LogFileNotFoundError(MonitorError):
    """No snapshot log exists for the requested date."""
