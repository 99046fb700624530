"""HTTP endpoints for the translation and player-count services.

Routes:
    GET  /api/fivem/servers           configured servers
    GET  /api/fivem/players?id=       live snapshot of one server
    GET  /api/fivem/logs?date=&id=    logged records of one day
    GET  /api/fivem/peaks?date=&id=   daily peaks of one day
    GET  /api/fivem/series            the poller's in-memory series
    GET  /api/translate?q=&source=&target=
    POST /api/translate {text, source, target}
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final

from aiohttp import web

from core.monitor.errors import LogFileNotFoundError, SnapshotFetchError
from core.monitor.log_store import date_str
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging

    from core.shared_data import SharedData
    from models.monitor_models import DailyPeakRecord, PlayerSnapshot, SnapshotRecord
    from models.translation_models import TranslationResult

__all__: list[str] = ["SHARED_DATA_KEY", "create_app"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SHARED_DATA_KEY: Final[web.AppKey[SharedData]] = web.AppKey("shared_data")

DEFAULT_SOURCE_LANG: Final[str] = "auto"
DEFAULT_TARGET_LANG: Final[str] = "en"

routes = web.RouteTableDef()


def _shared(request: web.Request) -> SharedData:
    return request.app[SHARED_DATA_KEY]


@routes.get("/api/fivem/servers")
async def get_servers(request: web.Request) -> web.Response:
    servers = _shared(request).load_servers()
    return web.json_response({"servers": [server.to_dict() for server in servers]})


@routes.get("/api/fivem/players")
async def get_players(request: web.Request) -> web.Response:
    server_id: str | None = request.query.get("id")
    if not server_id:
        return web.json_response({"error": "Missing id"}, status=400)
    try:
        snapshot: PlayerSnapshot = await _shared(request).fivem_client.fetch_snapshot(server_id)
    except SnapshotFetchError as err:
        logger.warning("Live snapshot unavailable for '%s': %s", server_id, err)
        return web.json_response({"error": "Failed to fetch"}, status=502)
    return web.json_response(snapshot.to_dict())


@routes.get("/api/fivem/logs")
async def get_logs(request: web.Request) -> web.Response:
    date: str = request.query.get("date") or date_str()
    server_id: str | None = request.query.get("id") or None
    try:
        samples: list[SnapshotRecord] = _shared(request).log_store.read_samples(date, server_id)
    except LogFileNotFoundError as err:
        return web.json_response({"error": "No log file", "date": date, "message": str(err)}, status=404)
    return web.json_response({"samples": [sample.to_dict() for sample in samples]})


@routes.get("/api/fivem/peaks")
async def get_peaks(request: web.Request) -> web.Response:
    date: str = request.query.get("date") or date_str()
    server_id: str | None = request.query.get("id") or None
    try:
        peaks: dict[str, DailyPeakRecord] = _shared(request).log_store.read_daily_peaks(date)
    except LogFileNotFoundError as err:
        return web.json_response({"error": "No daily max file", "date": date, "message": str(err)}, status=404)

    if server_id is None:
        return web.json_response([peak.to_dict() for peak in peaks.values()])
    entry: DailyPeakRecord | None = peaks.get(server_id)
    if entry is None:
        return web.json_response({"error": "Not found", "date": date, "id": server_id}, status=404)
    return web.json_response(entry.to_dict())


@routes.get("/api/fivem/series")
async def get_series(request: web.Request) -> web.Response:
    poller = _shared(request).poller
    payload: dict[str, Any] = poller.chart_data()
    payload["state"] = poller.state
    payload["isLoading"] = poller.is_loading
    payload["latest"] = poller.latest_per_server()
    return web.json_response(payload)


async def _translate(request: web.Request, text: str | None, source: str, target: str) -> web.Response:
    if text is None or StringUtils.is_blank(text):
        return web.json_response({"error": "Text is required"}, status=400)
    if source.strip().lower() == DEFAULT_SOURCE_LANG:
        source = StringUtils.detect_language(text)
    result: TranslationResult = await _shared(request).trans_manager.resolve(text, source, target)
    return web.json_response(
        {
            "sourceText": result.source_text,
            "translatedText": result.translated_text,
            "sourceLang": result.source_lang,
            "targetLang": result.target_lang,
        }
    )


@routes.get("/api/translate")
async def get_translate(request: web.Request) -> web.Response:
    query = request.query
    text: str | None = query.get("q") or query.get("text")
    source: str = query.get("source") or query.get("sl") or DEFAULT_SOURCE_LANG
    target: str = query.get("target") or query.get("tl") or DEFAULT_TARGET_LANG
    return await _translate(request, text, source, target)


@routes.post("/api/translate")
async def post_translate(request: web.Request) -> web.Response:
    try:
        body: Any = await request.json()
    except json.JSONDecodeError:
        return web.json_response({"error": "Invalid JSON body"}, status=400)
    if not isinstance(body, dict):
        return web.json_response({"error": "Invalid JSON body"}, status=400)

    text: Any = body.get("text")
    return await _translate(
        request,
        text if isinstance(text, str) else None,
        str(body.get("source") or DEFAULT_SOURCE_LANG),
        str(body.get("target") or DEFAULT_TARGET_LANG),
    )


def create_app(shared_data: SharedData, *, manage_lifecycle: bool = False) -> web.Application:
    """Build the web application.

    Args:
        shared_data (SharedData): Service container used by every handler.
        manage_lifecycle (bool): Initialize the services and start the poller on start-up,
            and close them on clean-up.

    Returns:
        web.Application: The configured application.
    """
    app = web.Application()
    app[SHARED_DATA_KEY] = shared_data
    app.add_routes(routes)

    if manage_lifecycle:

        async def on_startup(app: web.Application) -> None:
            await app[SHARED_DATA_KEY].async_init()
            await app[SHARED_DATA_KEY].poller.start()

        async def on_cleanup(app: web.Application) -> None:
            await app[SHARED_DATA_KEY].async_close()

        app.on_startup.append(on_startup)
        app.on_cleanup.append(on_cleanup)
    return app
