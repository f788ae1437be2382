#!/usr/bin/env python3
"""
Streaming catalog service (Flask).

- Config via .env (ADMIN_USERNAME, ADMIN_PASSWORD, CATALOG_PATH, HOST, PORT,
  IDLE_TIMEOUT_SEC, MOBILE_MAX_WIDTH, PLAYER_LOG_MAX, PLAYER_STALE_SEC)
- Public catalog routes: paginated listing, search, details, suggestions
- Admin login -> server issues a random session token (in memory); create and
  update routes require it as a Bearer token
- Player routes: every mounted video player has a server-side PlayerState.
  The page forwards gestures and media element events, then drains the
  queued commands (play, pause, set_time, fullscreen requests, ...) and
  reports back how fullscreen/orientation requests ended.
"""
import os
import time
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, request

# Load .env if present
load_dotenv()

from catalog.admin import AdminDirectory, AdminSession, SessionRegistry
from catalog.errors import CatalogError
from catalog.service import CatalogService, ListingQuery
from catalog.store import DocumentStore
from player.config import IDLE_TIMEOUT_SEC, PLAYER_STALE_SEC, SKIP_SECONDS
from player.player_state import PlayerState
from player.registry import PlayerRegistry, UnknownPlayer

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "change_me_now")

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
CATALOG_PATH = os.getenv("CATALOG_PATH", os.path.join(BASE_DIR, "data", "catalog.json"))

api = Blueprint("api", __name__, url_prefix="/api")


def create_app(config: Optional[dict] = None) -> Flask:
    """
    Build the application. ``config`` overrides the environment defaults;
    set CATALOG_PATH to None for a memory-only catalog and TIMER_FACTORY to
    drive the player idle timers by hand. PLAYER_CLOCK replaces the
    monotonic clock used to reap stale players.
    """
    app = Flask(__name__)
    app.config.update(
        CATALOG_PATH=CATALOG_PATH,
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        IDLE_TIMEOUT_SEC=IDLE_TIMEOUT_SEC,
        TIMER_FACTORY=None,
        PLAYER_STALE_SEC=PLAYER_STALE_SEC,
        PLAYER_CLOCK=None,
    )
    if config:
        app.config.update(config)

    store = DocumentStore(app.config["CATALOG_PATH"])
    admins = AdminDirectory(store)
    if app.config["ADMIN_USERNAME"] and app.config["ADMIN_PASSWORD"]:
        admins.ensure_admin(app.config["ADMIN_USERNAME"], app.config["ADMIN_PASSWORD"])

    app.extensions["catalog"] = CatalogService(store)
    app.extensions["admins"] = admins
    app.extensions["sessions"] = SessionRegistry()
    app.extensions["players"] = PlayerRegistry(
        idle_timeout=float(app.config["IDLE_TIMEOUT_SEC"]),
        timer_factory=app.config["TIMER_FACTORY"],
        stale_after=float(app.config["PLAYER_STALE_SEC"]),
        clock=app.config["PLAYER_CLOCK"] or time.monotonic,
    )

    app.register_blueprint(api)

    @app.errorhandler(CatalogError)
    def _catalog_error(e: CatalogError):
        return jsonify({"detail": str(e)}), e.status_code

    @app.errorhandler(UnknownPlayer)
    def _unknown_player(e: UnknownPlayer):
        return jsonify({"detail": "Player not found"}), 404

    @app.get("/")
    def index():
        return jsonify({"name": "Streaming Movie App API", "ok": True})

    return app


def _catalog() -> CatalogService:
    return current_app.extensions["catalog"]


def _players() -> PlayerRegistry:
    return current_app.extensions["players"]


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _bad_request(detail: str):
    return jsonify({"detail": detail}), 400


# ========== AUTH HELPERS ==========


def _get_token_from_header() -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1]


def _current_session() -> Optional[AdminSession]:
    return current_app.extensions["sessions"].get(_get_token_from_header())


def _unauthorized():
    return jsonify({"detail": "Unauthorized"}), 401


# ========== ADMIN ROUTES ==========


@api.post("/admin/login")
def admin_login():
    data = _json_body()
    username = data.get("username")
    password = data.get("password")

    if not current_app.extensions["admins"].verify(username, password):
        return jsonify({"success": False, "message": "Invalid credentials"}), 401

    session = current_app.extensions["sessions"].open(username)
    return jsonify({"success": True, "message": "Admin login successful", "token": session.token})


@api.post("/admin/logout")
def admin_logout():
    closed = current_app.extensions["sessions"].close(_get_token_from_header())
    return jsonify({"ok": True, "closed": closed})


@api.get("/admin/session")
def admin_session():
    session = _current_session()
    if session is None:
        return _unauthorized()
    return jsonify({"username": session.username, "created_at": session.created_at})


# ========== CATALOG ROUTES ==========


@api.get("/movies")
def list_movies():
    movies, total = _catalog().list_movies(ListingQuery.from_args(request.args))
    return jsonify({"movies": movies, "totalCount": total})


@api.get("/movies/search")
def search_movies():
    return jsonify(_catalog().search(request.args.get("q")))


@api.get("/movies/suggestions")
def movie_suggestions():
    return jsonify(_catalog().suggestions(request.args.get("exclude"), request.args.get("limit")))


@api.get("/movies/<movie_id>")
def get_movie(movie_id: str):
    return jsonify(_catalog().get_movie(movie_id))


@api.post("/movies")
def create_movie():
    if _current_session() is None:
        return _unauthorized()
    movie = _catalog().create_movie(request.get_json(silent=True))
    return jsonify(movie), 201


@api.put("/movies/<movie_id>")
def update_movie(movie_id: str):
    if _current_session() is None:
        return _unauthorized()
    movie = _catalog().update_movie(movie_id, request.get_json(silent=True))
    return jsonify(movie)


# ========== PLAYER ROUTES ==========


def _int_field(data: dict, key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer") from None


def _resolve_player_source(data: dict) -> Optional[str]:
    """
    Turn a mount/switch request into a media URL.
    Either an explicit ``src`` or a catalog ``movieId`` plus
    ``source`` (movies) / ``season`` + ``episode`` (series) indexes.
    """
    if data.get("src"):
        return str(data["src"])
    movie_id = data.get("movieId")
    if not movie_id:
        return None
    _, link = _catalog().playable_source(
        str(movie_id),
        source=_int_field(data, "source", 0),
        season=_int_field(data, "season", 0),
        episode=_int_field(data, "episode", 0),
    )
    return link


def _player_state(player: PlayerState):
    return jsonify(player.get_state())


@api.post("/players")
def mount_player():
    data = _json_body()
    try:
        src = _resolve_player_source(data)
        width = _int_field(data, "viewportWidth", 1024)
    except ValueError as e:
        return _bad_request(str(e))
    player_id, player = _players().mount(src, viewport_width=width)
    return jsonify({"id": player_id, "state": player.get_state()}), 201


@api.get("/players/<player_id>")
def player_state(player_id: str):
    return _player_state(_players().get(player_id))


@api.delete("/players/<player_id>")
def unmount_player(player_id: str):
    _players().unmount(player_id)
    return jsonify({"ok": True})


@api.post("/players/<player_id>/source")
def switch_source(player_id: str):
    player = _players().get(player_id)
    try:
        src = _resolve_player_source(_json_body())
    except ValueError as e:
        return _bad_request(str(e))
    player.load_source(src)
    return _player_state(player)


@api.post("/players/<player_id>/toggle")
def player_toggle(player_id: str):
    player = _players().get(player_id)
    player.toggle_play_pause()
    return _player_state(player)


def _apply(player: PlayerState, method, *args: Any):
    try:
        method(*args)
    except ValueError as e:
        return _bad_request(str(e))
    return _player_state(player)


@api.post("/players/<player_id>/seek")
def player_seek(player_id: str):
    player = _players().get(player_id)
    return _apply(player, player.seek_to, _json_body().get("fraction"))


@api.post("/players/<player_id>/skip")
def player_skip(player_id: str):
    player = _players().get(player_id)
    return _apply(player, player.skip, _json_body().get("seconds", SKIP_SECONDS))


@api.post("/players/<player_id>/volume")
def player_volume(player_id: str):
    player = _players().get(player_id)
    return _apply(player, player.set_volume, _json_body().get("value"))


@api.post("/players/<player_id>/brightness")
def player_brightness(player_id: str):
    player = _players().get(player_id)
    return _apply(player, player.set_brightness, _json_body().get("value"))


@api.post("/players/<player_id>/subtitle")
def player_subtitle(player_id: str):
    player = _players().get(player_id)
    return _apply(player, player.select_subtitle, _json_body().get("option"))


@api.post("/players/<player_id>/speed")
def player_speed(player_id: str):
    player = _players().get(player_id)
    return _apply(player, player.select_playback_speed, _json_body().get("speed"))


@api.post("/players/<player_id>/panel")
def player_panel(player_id: str):
    player = _players().get(player_id)
    return _apply(player, player.toggle_panel, _json_body().get("panel"))


@api.post("/players/<player_id>/fullscreen")
def player_fullscreen(player_id: str):
    player = _players().get(player_id)
    player.toggle_fullscreen()
    return _player_state(player)


@api.post("/players/<player_id>/interaction")
def player_interaction(player_id: str):
    player = _players().get(player_id)
    player.notify_interaction()
    return _player_state(player)


@api.post("/players/<player_id>/hide")
def player_hide(player_id: str):
    player = _players().get(player_id)
    player.hide_all()
    return _player_state(player)


@api.post("/players/<player_id>/viewport")
def player_viewport(player_id: str):
    player = _players().get(player_id)
    try:
        width = _int_field(_json_body(), "width", 0)
    except ValueError as e:
        return _bad_request(str(e))
    return _apply(player, player.set_viewport_width, width)


@api.post("/players/<player_id>/events")
def player_event(player_id: str):
    """
    Platform events forwarded by the page:
    loadedmetadata {duration}, timeupdate {currentTime}, ended, play, pause,
    fullscreenchange {fullscreen}, pointermove, touchstart, backgroundclick.
    """
    registry = _players()
    player = registry.get(player_id)
    data = _json_body()
    event = data.get("type")

    registry.surface(player_id).apply_event(event)
    if event == "loadedmetadata":
        player.on_loaded_metadata(data.get("duration"))
    elif event == "timeupdate":
        player.on_time_update(data.get("currentTime"))
    elif event == "ended":
        player.on_ended()
    elif event in ("play", "pause"):
        player.sync_play_state()
    elif event == "fullscreenchange":
        fullscreen = data.get("fullscreen")
        if not isinstance(fullscreen, bool):
            return _bad_request("fullscreen must be a boolean")
        player.on_fullscreen_change(fullscreen)
    elif event in ("pointermove", "touchstart"):
        player.notify_interaction()
    elif event == "backgroundclick":
        player.hide_all()
    else:
        return _bad_request(f"unknown event type: {event!r}")
    return _player_state(player)


@api.get("/players/<player_id>/commands")
def player_commands(player_id: str):
    surface = _players().surface(player_id)
    try:
        after = int(request.args.get("after", "0"))
    except ValueError:
        after = 0
    return jsonify({"commands": surface.commands(after), "pending": surface.pending_requests()})


@api.post("/players/<player_id>/requests/<request_id>")
def resolve_request(player_id: str, request_id: str):
    registry = _players()
    player = registry.get(player_id)
    data = _json_body()
    if not isinstance(data.get("ok"), bool):
        return _bad_request("ok must be a boolean")
    if not registry.surface(player_id).resolve(request_id, data["ok"], data.get("error")):
        return jsonify({"detail": "request not pending"}), 404
    return _player_state(player)


@api.get("/players/<player_id>/logs")
def player_logs(player_id: str):
    player = _players().get(player_id)
    try:
        limit = int(request.args.get("limit", "200"))
    except ValueError:
        limit = 200
    return jsonify({"lines": player.get_logs(limit, request.args.get("level"))})


if __name__ == "__main__":
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "5000"))

    app = create_app()
    print(f"[App] Catalog file: {app.config['CATALOG_PATH']}")
    print(f"[App] Starting Flask server on {host}:{port}")
    app.run(host=host, port=port, threaded=True)
