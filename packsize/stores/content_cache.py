"""Bounded in-memory cache for file contents."""

from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_CACHE_CAPACITY

_MISSING = object()


class ContentCache:
    """Keeps file bytes keyed by path, evicting the oldest insertions first.

    Paths that do not exist are remembered as ``None`` so repeated lookups for
    optional files (ignore files in every directory) stay cheap.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY) -> None:
        self._capacity = capacity
        self._entries: "OrderedDict[str, Optional[bytes]]" = OrderedDict()
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        """Total bytes currently held."""
        return self._size

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def read(self, path: str | Path) -> Optional[bytes]:
        """Return the bytes at ``path``, loading and caching them on a miss.

        Returns ``None`` when the path does not exist. Other ``OSError`` subclasses
        propagate to the caller.
        """
        key = str(path)
        cached = self._entries.get(key, _MISSING)
        if cached is not _MISSING:
            return cached  # type: ignore[return-value]

        target = Path(key)
        if not target.exists():
            self._entries[key] = None
            return None

        data = target.read_bytes()
        self.store(key, data)
        return data

    def peek(self, path: str | Path) -> Optional[bytes]:
        """Return cached bytes without touching the disk or the cache."""
        value = self._entries.get(str(path))
        return value if isinstance(value, bytes) else None

    def store(self, path: str | Path, data: bytes) -> None:
        key = str(path)
        self._discard(key)
        if len(data) > self._capacity:
            self.clear()
            return
        while self._entries and self._size + len(data) > self._capacity:
            _, evicted = self._entries.popitem(last=False)
            if evicted is not None:
                self._size -= len(evicted)
        self._entries[key] = data
        self._size += len(data)

    def clear(self) -> None:
        self._entries.clear()
        self._size = 0

    def _discard(self, key: str) -> None:
        previous = self._entries.pop(key, None)
        if previous is not None:
            self._size -= len(previous)
