"""
In-process key-value cache with per-entry expiry.

Callers inject a cache instance where they want memoization (the classifier
takes one); nothing in the package holds a module-level cache. NullCache keeps
the same interface and stores nothing, for tests or to switch caching off.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Hashable, Optional

import cachetools

logger = logging.getLogger(__name__)


class TTLCache:
    """
    Thread-safe wrapper around cachetools.TTLCache. Entries older than
    ttl_seconds read as missing; when max_entries is reached the least
    recently used entry is evicted. The server shares one instance across
    its worker threads, so every access goes through a lock.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._entries = cachetools.TTLCache(
            maxsize=max_entries if max_entries is not None else float("inf"),
            ttl=ttl_seconds,
            timer=clock,
        )

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries.expire()
            full = self.max_entries is not None and key not in self._entries and (
                len(self._entries) >= self.max_entries
            )
            self._entries[key] = value
        if full:
            logger.debug("Cache full, evicted least recently used entry")

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            before = len(self._entries)
            self._entries.expire()
            return before - len(self._entries)

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)


class NullCache:
    """Cache that never stores anything."""

    def get(self, key: Hashable) -> Optional[Any]:
        return None

    def set(self, key: Hashable, value: Any) -> None:
        return None

    def delete(self, key: Hashable) -> None:
        return None

    def clear(self) -> None:
        return None

    def purge_expired(self) -> int:
        return 0

    def __len__(self) -> int:
        return 0
