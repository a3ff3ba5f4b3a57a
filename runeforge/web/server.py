"""Runeforge Web - Flask server exposing the rune and talisman engines as a JSON API.

One in-memory session per process. Every request runs under a single lock,
so multi-currency purchases check and debit as one critical section.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from flask import Flask, jsonify, request

from runeforge.data.runes import ResetTier
from runeforge.data.talismans import FragmentKind
from runeforge.engine.errors import NotInitializedError, UnknownKeyError
from runeforge.engine.game_state import GameState
from runeforge.engine.runes import sacrifice_offerings
from runeforge.engine.save import load_state, save_state
from runeforge.engine.session import Session
from runeforge.engine.snapshots import snapshot_rune, snapshot_session, snapshot_talisman
from runeforge.engine.talismans import (
    autobuy_talisman_levels,
    buy_all_talisman_resources,
    buy_talisman_resources,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Flask app
# ---------------------------------------------------------------------------

app = Flask(__name__)

# ---------------------------------------------------------------------------
# In-memory game session (single-player)
# ---------------------------------------------------------------------------

_lock = threading.Lock()
_session: Session | None = None
_save_path: Path | None = None


def _ensure_game() -> Session:
    """Load the saved game (or start fresh) on first use."""
    global _session
    if _session is None:
        state = load_state(_save_path) or GameState()
        _session = Session.start(state)
    return _session


def _parse_tier(raw: str) -> ResetTier:
    if raw.isdigit():
        return ResetTier(int(raw))
    try:
        return ResetTier[raw.upper()]
    except KeyError:
        raise ValueError(f"unknown reset tier: {raw!r}") from None


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@app.errorhandler(UnknownKeyError)
def handle_unknown_key(exc: UnknownKeyError):
    return jsonify({"error": exc.message, "details": {k: str(v) for k, v in exc.details.items()}}), 404


@app.errorhandler(NotInitializedError)
def handle_not_initialized(exc: NotInitializedError):
    return jsonify({"error": exc.message}), 409


@app.errorhandler(ValueError)
def handle_bad_value(exc: ValueError):
    return jsonify({"error": str(exc)}), 400


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.route("/api/state")
def api_state():
    with _lock:
        session = _ensure_game()
        return jsonify(snapshot_session(session))


@app.route("/api/runes/<key>")
def api_rune(key: str):
    with _lock:
        session = _ensure_game()
        return jsonify(snapshot_rune(session.get_rune(key)).to_dict())


@app.route("/api/runes/<key>/sacrifice", methods=["POST"])
def action_sacrifice(key: str):
    with _lock:
        session = _ensure_game()
        body = request.get_json(silent=True) or {}
        budget = float(body.get("budget", session.state.offerings))
        budget = min(budget, session.state.offerings)
        spent = sacrifice_offerings(session, key, budget, auto=bool(body.get("auto", False)))
        return jsonify({
            "spent": spent,
            "offerings": session.state.offerings,
            "rune": snapshot_rune(session.get_rune(key)).to_dict(),
        })


@app.route("/api/talismans/<key>")
def api_talisman(key: str):
    with _lock:
        session = _ensure_game()
        return jsonify(snapshot_talisman(session.get_talisman(key)).to_dict())


@app.route("/api/talismans/<key>/buy", methods=["POST"])
def action_buy_talisman(key: str):
    with _lock:
        session = _ensure_game()
        talisman = session.get_talisman(key)
        body = request.get_json(silent=True) or {}
        mode = body.get("mode", "one")
        if mode == "one":
            bought = 1 if talisman.buy_level() else 0
        elif mode == "rarity":
            bought = talisman.buy_to_next_rarity()
        elif mode == "max":
            bought = talisman.buy_to_max()
        elif mode == "auto":
            bought = autobuy_talisman_levels(session, key)
        else:
            raise ValueError(f"unknown buy mode: {mode!r}")
        return jsonify({
            "bought": bought,
            "talisman": snapshot_talisman(talisman).to_dict(),
        })


@app.route("/api/fragments/<kind>/buy", methods=["POST"])
def action_buy_fragments(kind: str):
    with _lock:
        session = _ensure_game()
        body = request.get_json(silent=True) or {}
        bought = buy_talisman_resources(session.state, FragmentKind(kind), body.get("percentage"))
        return jsonify({"bought": bought, "state": snapshot_session(session)})


@app.route("/api/fragments/buy_all", methods=["POST"])
def action_buy_all_fragments():
    with _lock:
        session = _ensure_game()
        body = request.get_json(silent=True) or {}
        bought = buy_all_talisman_resources(session.state, body.get("percentage"))
        return jsonify({
            "bought": {kind.value: n for kind, n in bought.items()},
            "state": snapshot_session(session),
        })


@app.route("/api/reset/<tier>", methods=["POST"])
def action_reset(tier: str):
    with _lock:
        session = _ensure_game()
        cleared = session.reset(_parse_tier(tier))
        return jsonify({"reset": [k.value for k in cleared], "state": snapshot_session(session)})


@app.route("/api/action/save", methods=["POST"])
def action_save():
    with _lock:
        session = _ensure_game()
        path = save_state(session.state, _save_path)
        return jsonify({"saved": True, "path": str(path)})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run_server(
    host: str = "127.0.0.1",
    port: int = 5000,
    debug: bool = False,
    save_path: Path | None = None,
) -> None:
    """Start the Flask development server."""
    global _save_path
    _save_path = save_path
    logger.info("Serving runeforge API on http://%s:%d/", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
