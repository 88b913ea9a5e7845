# sync_monitor/services/sync_status.py
"""
Sync health classification.

The sync process writes a one-line status file such as:

    sync completed: Wed Jan 10 12:00:00 UTC 2024

Only the text before the first colon is classified, so a trailing timestamp
or detail never changes the outcome.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from sync_monitor.core.cache import MemoryCache

logger = logging.getLogger(__name__)

STATUS_CACHE_KEY = "sync_status"

# (substring, label, color), checked in this order
STATUS_RULES: Tuple[Tuple[str, str, str], ...] = (
    ("sync disabled", "Disabled", "red"),
    ("sync error", "Error", "red"),
    ("sync completed", "Completed", "green"),
    ("sync enabled", "Enabled", "green"),
    ("sync running", "Running", "blue"),
)


@dataclass(frozen=True)
class SyncStatus:
    label: str
    color: str
    error: Optional[str] = None

    @property
    def show_badge(self) -> bool:
        """The admin badge is hidden only when sync is explicitly disabled."""
        return self.label.lower() != "disabled"


INITIALIZING = SyncStatus(label="Initializing", color="yellow")


def _error(message: str) -> SyncStatus:
    return SyncStatus(label="Error", color="red", error=message)


def classify_status_line(line: str) -> SyncStatus:
    """Classify a raw status line (case and surrounding whitespace ignored)."""
    prefix = line.strip().lower().split(":", 1)[0]
    for needle, label, color in STATUS_RULES:
        if needle in prefix:
            return SyncStatus(label=label, color=color)
    return INITIALIZING


class SyncStatusReader:
    def __init__(
        self,
        cache: MemoryCache,
        status_file: str = "/home/syncstatus",
        *,
        namespace: str = "sync_monitor",
        ttl: int = 30,
        max_bytes: int = 4096,
    ):
        self._cache = cache
        self._status_file = status_file
        self._namespace = namespace
        self._ttl = ttl
        self._max_bytes = max_bytes

    def get_status(self) -> SyncStatus:
        cached = self._cache.get(STATUS_CACHE_KEY, self._namespace)
        if cached is not None:
            return cached

        status = self._read_status()
        self._cache.set(STATUS_CACHE_KEY, status, self._namespace, self._ttl)
        return status

    def clear_cache(self) -> None:
        self._cache.delete(STATUS_CACHE_KEY, self._namespace)

    def _read_status(self) -> SyncStatus:
        path = self._status_file

        if not os.path.isfile(path):
            return INITIALIZING

        if not os.access(path, os.R_OK):
            logger.warning("Status file not readable: %s", path)
            return _error("Status file not accessible")

        # Oversized status files are treated as corrupt, never parsed
        try:
            size = os.path.getsize(path)
        except OSError:
            size = None
        if size is None or size > self._max_bytes:
            logger.warning("Status file too large or unreadable: %s (size=%s)", path, size)
            return _error("Invalid status file")

        try:
            fh = open(path, "r", encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Unable to open status file %s: %s", path, e)
            return _error("Unable to read status")

        try:
            with fh:
                line = fh.readline()
        except OSError as e:
            logger.warning("Status read error for %s: %s", path, e)
            return _error("Status read error")

        if not line:
            return INITIALIZING

        return classify_status_line(line)
