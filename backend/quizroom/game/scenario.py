from __future__ import annotations

from typing import Any

from ..errors import ValidationError
from .models import Choice, Round, Scenario
from .normalize import is_blank, is_true


DEFAULT_POINTS = 10
DEFAULT_SECONDS = 30
UNTITLED = "Untitled Scenario"


# Used whenever a room is created without a scenario, so the service works
# without any external configuration.
FALLBACK_SCENARIO = Scenario(
    title="Fallback Scenario",
    rounds=(
        Round(
            id="r1",
            prompt="Which log line is suspicious?",
            choices=(
                Choice(id="A", text="GET /intranet", correct=False),
                Choice(id="B", text="POST /admin", correct=True),
                Choice(id="C", text="healthcheck", correct=False),
                Choice(id="D", text="GET /docs", correct=False),
            ),
            points=10,
            seconds=45,
        ),
    ),
)


def _positive_int(raw: Any, default: int, field_name: str, round_id: str) -> int:
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise ValidationError(f"Round {round_id}: {field_name} must be a positive integer")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Round {round_id}: {field_name} must be a positive integer")
    if value <= 0:
        raise ValidationError(f"Round {round_id}: {field_name} must be a positive integer")
    return value


def _parse_choice(raw: Any, round_id: str) -> Choice:
    if not isinstance(raw, dict) or is_blank(raw.get("id")):
        raise ValidationError(f"Round {round_id}: every choice needs an id")
    return Choice(
        id=str(raw["id"]).strip(),
        text=str(raw.get("text", "")),
        correct=is_true(raw.get("correct")),
    )


def _parse_round(raw: Any, position: int) -> Round:
    if not isinstance(raw, dict) or is_blank(raw.get("id")):
        raise ValidationError(f"Round #{position + 1} needs an id")
    round_id = str(raw["id"]).strip()

    choices_raw = raw.get("choices")
    if not isinstance(choices_raw, list) or not choices_raw:
        raise ValidationError(f"Round {round_id}: choices must be a non-empty list")

    return Round(
        id=round_id,
        prompt=str(raw.get("prompt", "")),
        choices=tuple(_parse_choice(c, round_id) for c in choices_raw),
        points=_positive_int(raw.get("points"), DEFAULT_POINTS, "points", round_id),
        seconds=_positive_int(raw.get("seconds"), DEFAULT_SECONDS, "seconds", round_id),
    )


def parse_scenario(payload: Any) -> Scenario:
    """Build a Scenario from a client-supplied payload.

    Raises ValidationError when the payload cannot be played: not an object,
    no rounds, a round without id or choices, duplicate round ids, or
    non-positive points/seconds.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Scenario must be an object")

    rounds_raw = payload.get("rounds")
    if not isinstance(rounds_raw, list) or not rounds_raw:
        raise ValidationError("Scenario needs at least one round")

    rounds = tuple(_parse_round(r, i) for i, r in enumerate(rounds_raw))

    seen: set[str] = set()
    for r in rounds:
        if r.id in seen:
            raise ValidationError(f"Duplicate round id: {r.id}")
        seen.add(r.id)

    title = payload.get("title")
    title = str(title).strip() if not is_blank(title) else UNTITLED

    return Scenario(title=title, rounds=rounds)
