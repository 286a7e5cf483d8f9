from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..game.actor import RoomActor

bp = Blueprint("rooms", __name__)


def _room() -> RoomActor:
    default_code = current_app.config.get("DEFAULT_ROOM_CODE", "demo")
    code = (request.args.get("code") or "").strip() or default_code
    registry = current_app.extensions["quizroom"]
    return registry.get(code)


def _body() -> dict:
    # Unparsable or non-object bodies count as empty input.
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.post("/create")
def create_room():
    data = _body()
    result = _room().create(mode=data.get("mode"), scenario=data.get("scenario"))
    return jsonify({"ok": True, **result})


@bp.post("/join")
def join_room():
    data = _body()
    result = _room().join(data.get("name"))
    return jsonify({"ok": True, **result})


@bp.post("/start")
def start_room():
    return jsonify({"ok": True, **_room().start()})


@bp.get("/current")
def current_round():
    return jsonify({"ok": True, **_room().current()})


@bp.post("/answer")
def submit_answer():
    data = _body()
    result = _room().answer(data.get("playerId"), data.get("choiceId"))
    return jsonify({"ok": True, **result})


@bp.post("/next")
def next_round():
    return jsonify({"ok": True, **_room().next()})


@bp.get("/scoreboard")
def scoreboard():
    return jsonify({"ok": True, "players": _room().scoreboard()})


@bp.get("/state")
def room_state():
    return jsonify({"ok": True, "room": _room().public_state()})
