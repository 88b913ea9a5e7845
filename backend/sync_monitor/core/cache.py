# sync_monitor/core/cache.py
"""
In-process key/value cache with per-entry TTL.

Both the log catalog and the status reader receive an instance of this class
instead of touching module-level state, so tests can swap in a fresh cache
(or a controllable clock) per case.

Semantics:
- `get` returns None on a miss; cached values are never None.
- `delete` is immediately visible: a get that follows it always misses.
- Concurrent `set` calls for the same key are last-writer-wins.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple


@dataclass
class CacheEntry:
    """A cached value and the monotonic deadline after which it is stale."""
    value: Any
    expires_at: float


class MemoryCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[Tuple[str, str], CacheEntry] = {}

    def get(self, key: str, namespace: str = "default") -> Optional[Any]:
        with self._lock:
            entry = self._entries.get((namespace, key))
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[(namespace, key)]
                return None
            return entry.value

    def set(self, key: str, value: Any, namespace: str = "default", ttl: float = 0) -> None:
        """
        Store `value` under (namespace, key) for `ttl` seconds.

        A ttl of 0 or less stores nothing, so the next get is a miss.
        """
        if value is None:
            raise ValueError("MemoryCache cannot store None (reserved for misses)")
        with self._lock:
            if ttl <= 0:
                self._entries.pop((namespace, key), None)
                return
            self._entries[(namespace, key)] = CacheEntry(
                value=value,
                expires_at=self._clock() + ttl,
            )

    def delete(self, key: str, namespace: str = "default") -> None:
        with self._lock:
            self._entries.pop((namespace, key), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
