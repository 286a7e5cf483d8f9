from __future__ import annotations

import logging
from threading import RLock

from .actor import RoomActor, resolve_mode
from .models import Mode
from .storage import SnapshotStore


logger = logging.getLogger(__name__)


class RoomRegistry:
    """Maps room codes to their single RoomActor.

    The registry lock only guards the code -> actor map. Room operations run
    under each actor's own lock, so different rooms never wait on each other.
    """

    def __init__(self, store: SnapshotStore, default_mode: str = "serious") -> None:
        self.store = store
        mode = resolve_mode(default_mode)
        if mode is None:
            logger.warning(f"[config] DEFAULT_MODE={default_mode!r} is not a known mode, using 'serious'")
        self.default_mode: Mode = mode or "serious"
        self._lock = RLock()
        self._actors: dict[str, RoomActor] = {}

    def get(self, code: str) -> RoomActor:
        with self._lock:
            actor = self._actors.get(code)
            if actor is None:
                actor = RoomActor(code, self.store, default_mode=self.default_mode)
                self._actors[code] = actor
            return actor
