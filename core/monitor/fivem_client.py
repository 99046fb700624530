"""Client for the public FiveM server-list API.

The API wraps the server object in ``Data`` (or ``data``) and names the player and
capacity fields differently across versions; `normalize_snapshot` reduces all of them
to a `PlayerSnapshot`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import quote

from core.monitor.errors import SnapshotFetchError
from handlers.async_comm import AsyncCommError, AsyncHttp
from models.monitor_models import PlayerSnapshot
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = ["FivemClient", "normalize_snapshot"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

PLAYER_COUNT_KEYS: Final[tuple[str, ...]] = ("clients", "players", "PlayerCount", "playersCount", "online")
MAX_PLAYER_KEYS: Final[tuple[str, ...]] = ("sv_maxclients", "maxClients", "maxPlayers", "MaxPlayers")
PAYLOAD_KEYS: Final[tuple[str, ...]] = ("Data", "data")


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, list):
        # some versions return the player list instead of a count
        return len(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return None
    return None


def _first_int(payload: dict[str, Any], keys: tuple[str, ...]) -> int | None:
    for key in keys:
        if key in payload and payload[key] is not None:
            number: int | None = _as_int(payload[key])
            if number is not None:
                return number
    return None


def normalize_snapshot(body: Any, *, now: datetime | None = None) -> PlayerSnapshot:
    """Convert an API response body into a `PlayerSnapshot`.

    ``sv_maxclients`` may also appear under ``vars``.

    Args:
        body (Any): Decoded JSON body.
        now (datetime | None): Time stamped on the snapshot. Defaults to the current UTC time.

    Returns:
        PlayerSnapshot: The normalized snapshot.

    Raises:
        SnapshotFetchError: If the body is not an object or carries no player count.
    """
    if not isinstance(body, dict):
        msg = f"Unexpected snapshot payload type: {type(body).__name__}"
        raise SnapshotFetchError(msg)

    payload: dict[str, Any] = body
    for key in PAYLOAD_KEYS:
        if isinstance(body.get(key), dict):
            payload = body[key]
            break

    players: int | None = _first_int(payload, PLAYER_COUNT_KEYS)
    if players is None:
        msg = "Snapshot payload has no player count"
        raise SnapshotFetchError(msg)

    max_players: int | None = _first_int(payload, MAX_PLAYER_KEYS)
    if max_players is None and isinstance(payload.get("vars"), dict):
        max_players = _first_int(payload["vars"], MAX_PLAYER_KEYS)

    stamp: datetime = now or datetime.now(UTC)
    return PlayerSnapshot(players=players, max_players=max_players, last_updated=stamp.isoformat())


class FivemClient:
    """Fetches live player-count snapshots by server id."""

    def __init__(self, config: Config, http: AsyncHttp | None = None) -> None:
        self.base_url: str = config.MONITOR.API_URL.rstrip("/") + "/"
        self.timeout: float = config.MONITOR.TIMEOUT
        self._http: AsyncHttp = http or AsyncHttp(headers={"Accept": "application/json"})

    def build_url(self, server_id: str) -> str:
        return f"{self.base_url}{quote(server_id, safe='')}"

    async def fetch_snapshot(self, server_id: str) -> PlayerSnapshot:
        """Fetch the current player count of one server.

        Raises:
            SnapshotFetchError: On network failure, non-2xx status or an unusable body.
        """
        try:
            body: Any = await self._http.get(url=self.build_url(server_id), total_timeout=self.timeout)
        except AsyncCommError as err:
            logger.debug("Snapshot fetch failed for '%s': %s", server_id, err)
            msg = f"Failed to fetch snapshot for '{server_id}': {err}"
            raise SnapshotFetchError(msg) from err
        snapshot: PlayerSnapshot = normalize_snapshot(body)
        logger.debug("Snapshot for '%s': %s", server_id, snapshot)
        return snapshot

    async def close(self) -> None:
        await self._http.close()
