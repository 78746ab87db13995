from __future__ import annotations

import logging
import math
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request

from game import (
    ALL_EVENTS,
    CacheNotVisibleError,
    EmptyCacheError,
    EmptyInventoryError,
    Event,
    GameConfig,
    LatLng,
    SqliteStore,
    WorldSession,
)
from geocoin_core.logs import setup_logging

logger = logging.getLogger(__name__)

app = Flask(__name__)

# One player, one process. Tests replace this with their own session.
SESSION: Optional[WorldSession] = None


def get_session() -> WorldSession:
    global SESSION
    if SESSION is None:
        config = GameConfig.from_env()
        SESSION = WorldSession.load(config, SqliteStore(config.db_path))
        logger.info("Loaded session at cell %s (store %s)", SESSION.player_cell.key, config.db_path)
    return SESSION


def _run(action: Callable[[WorldSession], Any]) -> Tuple[Any, List[Dict[str, Any]], WorldSession]:
    """Runs `action` on the session while recording the events it emits."""
    session = get_session()
    events: List[Event] = []
    session.events.subscribe(ALL_EVENTS, events.append)
    try:
        result = action(session)
    finally:
        session.events.unsubscribe(ALL_EVENTS, events.append)
    return result, [e.to_json() for e in events], session


def _ok(session: WorldSession, events: List[Dict[str, Any]], **extra: Any) -> Any:
    body = {"ok": True, "state": session.snapshot(), "events": events}
    body.update(extra)
    return jsonify(body)


def _fail(status: int, error: str, **extra: Any) -> Any:
    body = {"ok": False, "error": error, "events": []}
    body.update(extra)
    return jsonify(body), status


def _cell_from_body(body: Dict[str, Any]) -> Optional[str]:
    cell = body.get("cell")
    return cell if isinstance(cell, str) and cell.strip() else None


@app.get("/api/state")
def api_state() -> Any:
    _, events, session = _run(lambda s: None)
    return _ok(session, events)


@app.post("/api/move")
def api_move() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        lat = float(body["latitude"])
        lng = float(body["longitude"])
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise ValueError("non-finite coordinate")
    except (KeyError, TypeError, ValueError) as e:
        return _fail(400, f"latitude and longitude required: {e}")
    _, events, session = _run(lambda s: s.move_player(LatLng(lat, lng)))
    return _ok(session, events)


@app.post("/api/step")
def api_step() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    direction = body.get("direction")
    if not isinstance(direction, str):
        return _fail(400, "direction required")
    try:
        _, events, session = _run(lambda s: s.step_player(direction))
    except ValueError as e:
        return _fail(400, str(e))
    return _ok(session, events)


def _transfer(op: Callable[[WorldSession, str], Any]) -> Any:
    body = request.get_json(force=True, silent=True) or {}
    cell = _cell_from_body(body)
    if cell is None:
        return _fail(400, "cell required")
    try:
        coin, events, session = _run(lambda s: op(s, cell))
    except CacheNotVisibleError as e:
        return _fail(404, str(e))
    except (EmptyCacheError, EmptyInventoryError) as e:
        return _fail(409, str(e), state=get_session().snapshot())
    except ValueError as e:
        return _fail(400, f"bad cell: {e}")
    return _ok(session, events, coin=coin.label)


@app.post("/api/collect")
def api_collect() -> Any:
    return _transfer(lambda s, cell: s.collect_from_cache(cell))


@app.post("/api/deposit")
def api_deposit() -> Any:
    return _transfer(lambda s, cell: s.deposit_to_cache(cell))


@app.post("/api/reset")
def api_reset() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    if body.get("confirm") is not True:
        return _fail(400, "reset must be confirmed with {\"confirm\": true}")
    _, events, session = _run(lambda s: s.reset_session())
    return _ok(session, events)


# Entrypoint for "python app.py"
if __name__ == "__main__":
    setup_logging()
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=debug)
