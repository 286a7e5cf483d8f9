from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from copy import deepcopy
from threading import RLock
from typing import Any, Iterator

from ..errors import InvalidPhaseError, NotFoundError, ValidationError
from .models import MODES, Mode, Player, Room, Scenario
from .normalize import is_blank, is_true, normalize_choice_id
from .scenario import FALLBACK_SCENARIO, parse_scenario
from .storage import SnapshotStore


logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def resolve_mode(raw: Any) -> Mode | None:
    if isinstance(raw, str) and raw.strip().lower() in MODES:
        return raw.strip().lower()  # type: ignore[return-value]
    return None


class RoomActor:
    """Owns the state of one room.

    Every public method takes the actor's lock for its whole duration,
    including the snapshot write, so callers never observe a half-applied
    operation. Mutations are applied to a copy of the room that replaces the
    live state only after the store accepted it.
    """

    def __init__(self, code: str, store: SnapshotStore, default_mode: Mode = "serious") -> None:
        self.code = code
        self.store = store
        self.default_mode = default_mode
        self._lock = RLock()
        self._room: Room | None = None

    # ---- lifecycle ----

    def ensure(self) -> Room:
        with self._lock:
            if self._room is not None:
                return self._room

            stored = self.store.load(self.code)
            if stored is not None:
                self._room = Room.from_dict(stored)
                return self._room

            room = self._fresh_room(self.default_mode, FALLBACK_SCENARIO)
            self.store.save(self.code, room.to_dict())
            self._room = room
            logger.info(f"[ensure] room={self.code} mode={room.mode} created with fallback scenario")
            return self._room

    def _fresh_room(self, mode: Mode, scenario: Scenario) -> Room:
        return Room(code=self.code, mode=mode, scenario=scenario)

    @contextmanager
    def _mutate(self) -> Iterator[Room]:
        draft = deepcopy(self.ensure())
        yield draft
        self.store.save(self.code, draft.to_dict())
        self._room = draft

    def create(self, mode: Any = None, scenario: Any = None) -> dict:
        with self._lock:
            existing = self.ensure()

            chosen_mode = resolve_mode(mode)
            if mode is not None and chosen_mode is None:
                logger.warning(f"[create] room={self.code} ignoring unknown mode={mode!r}")
            chosen_mode = chosen_mode or existing.mode or "serious"

            chosen_scenario = FALLBACK_SCENARIO
            if scenario is not None:
                try:
                    chosen_scenario = parse_scenario(scenario)
                except ValidationError as exc:
                    logger.warning(f"[scenario-invalid] room={self.code} using fallback: {exc.message}")

            room = self._fresh_room(chosen_mode, chosen_scenario)
            self.store.save(self.code, room.to_dict())
            self._room = room

            logger.info(
                f"[create] room={self.code} mode={room.mode} title={chosen_scenario.title!r} "
                f"rounds={len(chosen_scenario.rounds)}"
            )
            return {"code": self.code, "mode": room.mode, "title": chosen_scenario.title}

    # ---- membership ----

    def join(self, name: Any) -> dict:
        if isinstance(name, (int, float)) and not isinstance(name, bool):
            name = str(name)
        if not isinstance(name, str) or is_blank(name):
            raise ValidationError("Missing name")
        name = name.strip()

        with self._lock:
            with self._mutate() as room:
                player_id = uuid.uuid4().hex
                room.join_counter += 1
                room.players[player_id] = Player(id=player_id, name=name, joined_seq=room.join_counter)

            logger.info(f"[join] room={self.code} player={player_id} name={name!r} total={len(self._room.players)}")
            return {"playerId": player_id, "room": self.public_state()}

    # ---- phase control ----

    def start(self) -> dict:
        with self._lock:
            if self.ensure().phase != "lobby":
                raise InvalidPhaseError("Already started")

            with self._mutate() as room:
                room.phase = "round"
                room.current_round_idx = 0
                room.started_at_ms = now_ms()

            logger.info(f"[start] room={self.code} players={len(self._room.players)}")
            return {"room": self.public_state()}

    def next(self) -> dict:
        with self._lock:
            if self.ensure().phase != "round":
                raise InvalidPhaseError("Not in round")

            with self._mutate() as room:
                last_idx = len(room.scenario.rounds) - 1
                if room.current_round_idx >= last_idx:
                    room.phase = "results"
                else:
                    room.current_round_idx += 1

            if self._room.phase == "results":
                logger.info(f"[results] room={self.code} finished at idx={self._room.current_round_idx}")
                return {"phase": "results"}

            logger.info(f"[next] room={self.code} idx={self._room.current_round_idx}")
            return {"idx": self._room.current_round_idx}

    # ---- answers ----

    def answer(self, player_id: Any, choice_id: Any) -> dict:
        if is_blank(player_id) or is_blank(choice_id):
            raise ValidationError("Missing playerId or choiceId")
        player_id = str(player_id)

        with self._lock:
            room = self.ensure()
            active = room.current_round()
            if active is None:
                raise InvalidPhaseError("No active round")

            player = room.players.get(player_id)
            if player is None:
                raise NotFoundError("Unknown player")

            if active.id in player.answered:
                logger.info(f"[answer-dup] room={self.code} player={player_id} round={active.id}")
                return {"already": True, "score": player.score}

            submitted = normalize_choice_id(choice_id)
            match = next((c for c in active.choices if normalize_choice_id(c.id) == submitted), None)
            correct = match is not None and is_true(match.correct)

            with self._mutate() as draft:
                p = draft.players[player_id]
                p.answered[active.id] = submitted
                if correct:
                    p.score += active.points
                score = p.score

            logger.info(
                f"[answer] room={self.code} player={player_id} round={active.id} "
                f"choice={submitted} correct={correct} score={score}"
            )
            return {"correct": correct, "score": score}

    # ---- read views ----

    def current(self) -> dict:
        with self._lock:
            room = self.ensure()
            active = room.current_round()
            return {
                "phase": room.phase,
                "round": active.redacted() if active else None,
                "idx": room.current_round_idx,
            }

    def public_state(self) -> dict:
        with self._lock:
            room = self.ensure()
            return {
                "code": room.code,
                "mode": room.mode,
                "title": room.scenario.title,
                "phase": room.phase,
                "idx": room.current_round_idx,
                "roundCount": len(room.scenario.rounds),
                "players": [p.public() for p in room.players.values()],
            }

    def scoreboard(self) -> list[dict]:
        """Players by score, highest first. Equal scores keep join order."""
        with self._lock:
            room = self.ensure()
            ranked = sorted(room.players.values(), key=lambda p: (-p.score, p.joined_seq))
            return [p.public() for p in ranked]
