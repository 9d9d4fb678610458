# src/taskdesk/session/storage.py

"""
Storage backends for the credential store.

- FileStorage: JSON file on disk. Survives restarts; other processes sharing the
  file are detected by polling (watch()).
- MemoryStorageArea / MemoryStorage: one shared area, many views ("contexts").
  A write through one view is reported to the listeners of every other view.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from pathlib import Path

from ..core.errors import StorageUnavailableError
from ..core.ports import StorageListener

logger = logging.getLogger(__name__)


def _notify(listeners: list[StorageListener], key: str, value: str | None) -> None:
    for listener in list(listeners):
        try:
            listener(key, value)
        except Exception:
            logger.exception("Storage listener failed key=%s", key)


class FileStorage:
    """
    Key/value store persisted as a small JSON object.

    Writes go through a temp file + os.replace so readers never see a partial file.
    Own writes refresh the snapshot used by poll(), so they are never reported back.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._listeners: list[StorageListener] = []
        try:
            self._snapshot = self._read()
        except StorageUnavailableError:
            logger.warning("Credential file unreadable at startup: %s", self._path)
            self._snapshot = {}

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise StorageUnavailableError(f"Cannot read {self._path}") from e
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self._path}") from e
        with contextlib.suppress(OSError):
            # The file holds a bearer token: keep it private on disk.
            os.chmod(self._path, 0o600)
        self._snapshot = dict(data)

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key not in data:
            self._snapshot = data
            return
        del data[key]
        self._write(data)

    def subscribe(self, listener: StorageListener) -> None:
        self._listeners.append(listener)

    def poll(self) -> list[str]:
        """Compare the file with the last known snapshot and report changed keys."""
        try:
            current = self._read()
        except StorageUnavailableError:
            logger.warning("Credential file unreadable during poll: %s", self._path)
            return []

        changed = [
            k
            for k in sorted(set(current) | set(self._snapshot))
            if current.get(k) != self._snapshot.get(k)
        ]
        self._snapshot = current

        for key in changed:
            logger.debug("External change detected key=%s", key)
            _notify(self._listeners, key, current.get(key))
        return changed

    async def watch(self, interval_seconds: float = 1.0) -> None:
        """Poll forever; cancel the task to stop."""
        logger.info("Watching %s (interval=%.2fs)", self._path, interval_seconds)
        while True:
            self.poll()
            await asyncio.sleep(max(0.01, float(interval_seconds)))


class MemoryStorageArea:
    """Shared in-process area. Each open() returns an independent context view."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.available = True
        self._views: list[MemoryStorage] = []

    def open(self) -> MemoryStorage:
        view = MemoryStorage(self)
        self._views.append(view)
        return view

    def _check(self) -> None:
        if not self.available:
            raise StorageUnavailableError("Storage area is unavailable")

    def _broadcast(self, origin: MemoryStorage, key: str, value: str | None) -> None:
        for view in list(self._views):
            if view is not origin:
                _notify(view._listeners, key, value)


class MemoryStorage:
    def __init__(self, area: MemoryStorageArea) -> None:
        self._area = area
        self._listeners: list[StorageListener] = []

    def get(self, key: str) -> str | None:
        self._area._check()
        return self._area.data.get(key)

    def set(self, key: str, value: str) -> None:
        self._area._check()
        if self._area.data.get(key) == value:
            return
        self._area.data[key] = value
        self._area._broadcast(self, key, value)

    def remove(self, key: str) -> None:
        self._area._check()
        if key not in self._area.data:
            return
        del self._area.data[key]
        self._area._broadcast(self, key, None)

    def subscribe(self, listener: StorageListener) -> None:
        self._listeners.append(listener)
