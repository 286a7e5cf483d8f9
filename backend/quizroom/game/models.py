from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .normalize import is_true


Mode = Literal["serious", "funny", "easter"]
Phase = Literal["lobby", "round", "results"]

MODES: tuple[str, ...] = ("serious", "funny", "easter")
PHASES: tuple[str, ...] = ("lobby", "round", "results")


@dataclass(frozen=True)
class Choice:
    id: str
    text: str
    correct: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "correct": self.correct}

    def redacted(self) -> dict:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class Round:
    id: str
    prompt: str
    choices: tuple[Choice, ...]
    points: int = 10
    seconds: int = 30

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "choices": [c.to_dict() for c in self.choices],
            "points": self.points,
            "seconds": self.seconds,
        }

    def redacted(self) -> dict:
        # Correctness flags never leave the server through player-facing reads.
        payload = self.to_dict()
        payload["choices"] = [c.redacted() for c in self.choices]
        return payload


@dataclass(frozen=True)
class Scenario:
    title: str
    rounds: tuple[Round, ...]

    def to_dict(self) -> dict:
        return {"title": self.title, "rounds": [r.to_dict() for r in self.rounds]}


@dataclass
class Player:
    id: str
    name: str
    score: int = 0
    answered: dict[str, str] = field(default_factory=dict)
    joined_seq: int = 0

    def public(self) -> dict:
        return {"id": self.id, "name": self.name, "score": self.score}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "answered": dict(self.answered),
            "joinedSeq": self.joined_seq,
        }


@dataclass
class Room:
    code: str
    mode: Mode
    scenario: Scenario
    players: dict[str, Player] = field(default_factory=dict)
    phase: Phase = "lobby"
    current_round_idx: int = -1
    started_at_ms: int | None = None
    join_counter: int = 0

    def current_round(self) -> Round | None:
        idx = self.current_round_idx
        if idx < 0 or idx >= len(self.scenario.rounds):
            return None
        return self.scenario.rounds[idx]

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "mode": self.mode,
            "scenario": self.scenario.to_dict(),
            "players": {pid: p.to_dict() for pid, p in self.players.items()},
            "phase": self.phase,
            "currentRoundIdx": self.current_round_idx,
            "startedAt": self.started_at_ms,
            "joinCounter": self.join_counter,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        scenario_data = data.get("scenario") or {}
        rounds = tuple(
            Round(
                id=str(r["id"]),
                prompt=str(r.get("prompt", "")),
                choices=tuple(
                    Choice(id=str(c["id"]), text=str(c.get("text", "")), correct=is_true(c.get("correct")))
                    for c in r.get("choices") or []
                ),
                points=int(r.get("points", 10)),
                seconds=int(r.get("seconds", 30)),
            )
            for r in scenario_data.get("rounds") or []
        )
        scenario = Scenario(title=str(scenario_data.get("title", "")), rounds=rounds)

        players: dict[str, Player] = {}
        for seq, (pid, p) in enumerate((data.get("players") or {}).items()):
            players[pid] = Player(
                id=str(p.get("id", pid)),
                name=str(p.get("name", "")),
                score=int(p.get("score", 0)),
                answered={str(k): str(v) for k, v in (p.get("answered") or {}).items()},
                joined_seq=int(p.get("joinedSeq", seq)),
            )

        phase, idx = _checked_position(data.get("phase"), data.get("currentRoundIdx"), len(rounds))

        return cls(
            code=str(data["code"]),
            mode=data.get("mode") if data.get("mode") in MODES else "serious",
            scenario=scenario,
            players=players,
            phase=phase,
            current_round_idx=idx,
            started_at_ms=data.get("startedAt"),
            join_counter=int(data.get("joinCounter", len(players))),
        )


def _checked_position(phase: Any, idx: Any, round_count: int) -> tuple[Phase, int]:
    """Phase and round index from a snapshot, or lobby/-1 when they break
    the room invariants (idx is -1 iff lobby, otherwise a valid round)."""
    try:
        idx = int(idx)
    except (TypeError, ValueError):
        return "lobby", -1
    if phase not in PHASES or phase == "lobby" or not 0 <= idx < round_count:
        return "lobby", -1
    return phase, idx  # type: ignore[return-value]
