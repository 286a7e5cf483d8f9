"""Tolerant coercions used when matching submitted answers.

Clients and hand-written scenario files disagree on types and casing, so
choice ids and correctness flags go through these two functions before any
comparison.
"""
from __future__ import annotations

from typing import Any


def normalize_choice_id(value: Any) -> str:
    """Canonical form of a choice id: ``str()``, stripped, upper-cased.

    Accepts strings, ints and floats (``2`` -> ``"2"``, ``" b "`` -> ``"B"``).
    ``None`` becomes ``""``, which never matches a real choice.
    """
    if value is None:
        return ""
    return str(value).strip().upper()


def is_true(value: Any) -> bool:
    """Permissive correctness flag.

    ``True``, the number 1, ``"1"`` and ``"true"`` (any case, surrounding
    whitespace ignored) are true. Everything else, including ``None``, is false.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        v = value.strip().lower()
        return v in ("1", "true")
    return False


def is_blank(value: Any) -> bool:
    """True for ``None`` and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
