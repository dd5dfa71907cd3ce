"""Per-destination mutual exclusion shared by every writer of a run."""

from __future__ import annotations

import asyncio
from pathlib import Path
from threading import Lock
from typing import Dict


class FileMutexRegistry:
    """Lazily create one ``asyncio.Lock`` per destination file."""

    def __init__(self) -> None:
        self._locks: Dict[Path, asyncio.Lock] = {}
        self._lock = Lock()

    @staticmethod
    def _key(destination: Path | str) -> Path:
        return Path(destination).expanduser().resolve()

    def get(self, destination: Path | str) -> asyncio.Lock:
        key = self._key(destination)
        existing = self._locks.get(key)
        if existing is not None:
            return existing
        with self._lock:
            if key not in self._locks:
                self._locks[key] = asyncio.Lock()
            return self._locks[key]

    def __contains__(self, destination: object) -> bool:
        if not isinstance(destination, (str, Path)):
            return False
        return self._key(destination) in self._locks

    def __len__(self) -> int:
        return len(self._locks)


__all__ = ["FileMutexRegistry"]
