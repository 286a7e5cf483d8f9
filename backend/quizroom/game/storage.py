from __future__ import annotations

import json
import logging
import os
import tempfile
from copy import deepcopy
from pathlib import Path
from threading import RLock
from typing import Protocol
from urllib.parse import quote

from ..errors import StorageError


logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    def load(self, code: str) -> dict | None: ...

    def save(self, code: str, snapshot: dict) -> None: ...


class MemoryStore:
    """Keeps snapshots in process memory. Default when no STORAGE_DIR is set."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._snapshots: dict[str, dict] = {}

    def load(self, code: str) -> dict | None:
        with self._lock:
            snapshot = self._snapshots.get(code)
            return deepcopy(snapshot) if snapshot is not None else None

    def save(self, code: str, snapshot: dict) -> None:
        with self._lock:
            self._snapshots[code] = deepcopy(snapshot)


class JsonFileStore:
    """One ``<code>.json`` file per room, replaced atomically on every save."""

    def __init__(self, directory: str | os.PathLike) -> None:
        self.directory = Path(directory)

    def _path(self, code: str) -> Path:
        # Room codes come straight from the query string.
        safe = quote(code, safe="") or "_"
        return self.directory / f"{safe}.json"

    def load(self, code: str) -> dict | None:
        path = self._path(code)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.error(f"[store-load] room={code} path={path} failed: {exc}")
            raise StorageError(f"Could not load room {code}") from exc

    def save(self, code: str, snapshot: dict) -> None:
        path = self._path(code)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=self.directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(snapshot, fh, ensure_ascii=False)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
                raise
        except (OSError, TypeError, ValueError) as exc:
            logger.error(f"[store-save] room={code} path={path} failed: {exc}")
            raise StorageError(f"Could not save room {code}") from exc
        logger.debug(f"[store-save] room={code} path={path}")


def build_store(storage_dir: str | None) -> SnapshotStore:
    if storage_dir:
        return JsonFileStore(storage_dir)
    return MemoryStore()
