# sync_monitor/services/log_catalog.py
"""
Log discovery, allow-listing and safe access.

The container keeps logs under two storage roots:
- /homelive: the live copy used while sync is enabled
- /home:     the persistent copy (and where some writers append directly)

For every logical log we try an ordered list of candidate paths and keep the
first one that is a readable regular file. Per-run sync-init logs have
timestamped names, so those kinds glob both roots and take the newest file,
falling back to the legacy fixed symlinks when nothing matches.

The resolved map (the "catalog") is the allow-list: no path outside it is
ever read. It is cached for a short TTL and re-fetched before each access.
"""

from __future__ import annotations

import fnmatch
import glob
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Dict, Iterable, List, Optional, Sequence, Tuple

from sync_monitor.core.cache import MemoryCache
from sync_monitor.services import log_reader

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "whitelisted_logs"

TAIL_MIN_LINES = 1
TAIL_MAX_LINES = 1000


class ReadFailure(str, Enum):
    NOT_FOUND = "not_found"
    UNREADABLE = "unreadable"
    TOO_LARGE = "too_large"
    IO_ERROR = "io_error"


# Display strings used by the tail view
FAILURE_MESSAGES: Dict[ReadFailure, str] = {
    ReadFailure.NOT_FOUND: "Access denied: Invalid log file.",
    ReadFailure.UNREADABLE: "Log not readable or does not exist.",
    ReadFailure.TOO_LARGE: "Log file too large.",
    ReadFailure.IO_ERROR: "Error reading log file.",
}


class LogAccessError(Exception):
    """Raised when a log cannot be served; `kind` says why."""

    def __init__(self, kind: ReadFailure, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(detail or FAILURE_MESSAGES[kind])


@dataclass(frozen=True)
class LogEntry:
    """A resolved, currently valid log source."""
    key: str
    label: str
    path: str


@dataclass(frozen=True)
class LogKind:
    """
    Static description of one logical log.

    `paths` are tried in order. When `run_globs` is set, the newest match
    across all patterns wins and `paths` become the fallback. `run_exclude`
    drops glob matches whose file name matches any of its patterns.
    """
    key: str
    label: str
    paths: Tuple[str, ...]
    run_globs: Tuple[str, ...] = ()
    run_exclude: Tuple[str, ...] = ()
    skip_empty: bool = False


@dataclass(frozen=True)
class DownloadTarget:
    key: str
    path: str
    filename: str
    size: int
    handle: BinaryIO


CandidateSpec = Tuple[LogKind, ...]


def default_candidates(live_root: str = "/homelive", home_root: str = "/home") -> CandidateSpec:
    """Build the candidate table for the given storage roots, in display order."""
    live = os.path.join(live_root, "LogFiles")
    home = os.path.join(home_root, "LogFiles")
    # Roots are configurable and may contain glob metacharacters
    live_runs = os.path.join(glob.escape(live), "sync", "runs")
    home_runs = os.path.join(glob.escape(home), "sync", "runs")

    return (
        LogKind(
            key="apache-access",
            label="Apache Access",
            paths=(f"{live}/sync/apache2/access.log", f"{home}/sync/apache2/access.log"),
        ),
        LogKind(
            key="apache-error",
            label="Apache Error",
            paths=(f"{live}/sync/apache2/error.log", f"{home}/sync/apache2/error.log"),
        ),
        LogKind(
            key="php-error",
            label="PHP Error",
            paths=(f"{live}/sync/apache2/php-error.log", f"{home}/sync/apache2/php-error.log"),
        ),
        # An empty placeholder on /homelive must not hide the real cron log on /home
        LogKind(
            key="cron",
            label="Cron",
            paths=(f"{live}/sync/cron.log", f"{home}/sync/cron.log", f"{home}/cron.log"),
            skip_empty=True,
        ),
        LogKind(
            key="sync",
            label="Sync",
            paths=(f"{live}/sync/unison.log", f"{home}/sync/unison.log"),
        ),
        LogKind(
            key="supervisord",
            label="Supervisord",
            paths=(f"{home}/supervisord.log", f"{live}/supervisord.log"),
        ),
        LogKind(
            key="sync-init",
            label="Sync Init",
            paths=(f"{live}/sync-init.log", f"{home}/sync-init.log"),
            run_globs=(f"{home_runs}/sync-init-*.log", f"{live_runs}/sync-init-*.log"),
            run_exclude=("sync-init-error-*",),
        ),
        LogKind(
            key="sync-init-error",
            label="Sync Init (stderr)",
            paths=(f"{live}/sync-init-error.log", f"{home}/sync-init-error.log"),
            run_globs=(
                f"{home_runs}/sync-init-error-*.log",
                f"{live_runs}/sync-init-error-*.log",
            ),
        ),
    )


# ----------------------------
# Filesystem predicates
# ----------------------------
def _is_readable_file(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


def _file_size(path: str) -> Optional[int]:
    try:
        return os.path.getsize(path)
    except OSError:
        return None


def clamp_lines(requested: int) -> int:
    return min(max(int(requested), TAIL_MIN_LINES), TAIL_MAX_LINES)


# ----------------------------
# Resolution
# ----------------------------
def pick_latest(candidates: Iterable[Tuple[str, float]]) -> Optional[str]:
    """
    Return the path with the strictly greatest mtime.

    Ties keep the first one seen, so callers control the tie-break through
    the order of `candidates`. Returns None for an empty input.
    """
    best_path: Optional[str] = None
    best_mtime = 0.0
    for path, mtime in candidates:
        if best_path is None or mtime > best_mtime:
            best_path, best_mtime = path, mtime
    return best_path


def _glob_runs(patterns: Sequence[str], exclude: Sequence[str]) -> List[Tuple[str, float]]:
    """Collect (path, mtime) for readable files matching `patterns`, in pattern order."""
    found: List[Tuple[str, float]] = []
    seen = set()
    for pattern in patterns:
        for match in sorted(glob.glob(pattern)):
            if match in seen:
                continue
            name = os.path.basename(match)
            if any(fnmatch.fnmatch(name, ex) for ex in exclude):
                continue
            if not _is_readable_file(match):
                continue
            try:
                mtime = os.path.getmtime(match)
            except OSError:
                # Vanished between glob and stat
                continue
            seen.add(match)
            found.append((match, mtime))
    return found


def _first_existing(paths: Sequence[str], skip_empty: bool) -> Optional[str]:
    for path in paths:
        if not _is_readable_file(path):
            continue
        if skip_empty and _file_size(path) == 0:
            continue
        return path
    return None


def resolve_kind(kind: LogKind) -> Optional[str]:
    """Resolve one log kind to a concrete path, or None if nothing usable exists."""
    if kind.run_globs:
        latest = pick_latest(_glob_runs(kind.run_globs, kind.run_exclude))
        if latest is not None:
            return latest
        logger.debug("No run logs matched for %s; trying legacy paths", kind.key)
    return _first_existing(kind.paths, kind.skip_empty)


class LogCatalog:
    """
    Discovers which logs exist and serves bounded reads of them.

    Args:
        cache: shared cache collaborator (see `MemoryCache`).
        candidates: ordered candidate table, usually `default_candidates(...)`.
        namespace: cache namespace.
        ttl: catalog cache lifetime in seconds.
        max_display_bytes: larger files are left out of the catalog.
        max_download_bytes: larger files are refused by `open_download`.
    """

    def __init__(
        self,
        cache: MemoryCache,
        candidates: CandidateSpec,
        *,
        namespace: str = "sync_monitor",
        ttl: int = 60,
        max_display_bytes: int = 50 * 1024 * 1024,
        max_download_bytes: int = 10 * 1024 * 1024,
    ):
        self._cache = cache
        self._candidates = candidates
        self._namespace = namespace
        self._ttl = ttl
        self._max_display_bytes = max_display_bytes
        self._max_download_bytes = max_download_bytes

    # -----------------------
    # Catalog
    # -----------------------
    def get_catalog(self) -> Dict[str, LogEntry]:
        cached = self._cache.get(CATALOG_CACHE_KEY, self._namespace)
        if cached is not None:
            return dict(cached)

        catalog = self._build()
        self._cache.set(CATALOG_CACHE_KEY, catalog, self._namespace, self._ttl)
        return dict(catalog)

    def _build(self) -> Dict[str, LogEntry]:
        resolved: Dict[str, LogEntry] = {}
        for kind in self._candidates:
            path = resolve_kind(kind)
            if path is not None:
                resolved[kind.key] = LogEntry(key=kind.key, label=kind.label, path=path)

        # Files can change between discovery and here; re-check before publishing
        catalog: Dict[str, LogEntry] = {}
        for key, entry in resolved.items():
            if not _is_readable_file(entry.path):
                continue
            size = _file_size(entry.path)
            if size is None or size > self._max_display_bytes:
                logger.info("Skipping %s (%s): size %s over display limit", key, entry.path, size)
                continue
            catalog[key] = entry

        logger.debug("Log catalog rebuilt: %s", ", ".join(catalog) or "<empty>")
        return catalog

    def clear_cache(self) -> None:
        self._cache.delete(CATALOG_CACHE_KEY, self._namespace)

    def allowed_paths(self) -> List[str]:
        return [entry.path for entry in self.get_catalog().values()]

    # -----------------------
    # Tail
    # -----------------------
    def read_tail(self, path: str, max_lines: int = 500) -> str:
        """
        Return the last `max_lines` lines (clamped to 1..1000) of a catalog file.

        Raises:
            LogAccessError: NOT_FOUND if `path` is not in the current catalog,
                UNREADABLE if it can't be read, IO_ERROR if reading failed.
        """
        if path not in self.allowed_paths():
            raise LogAccessError(ReadFailure.NOT_FOUND, f"{path!r} is not a catalog log")

        if not os.access(path, os.R_OK):
            raise LogAccessError(ReadFailure.UNREADABLE, f"{path!r} is not readable")

        try:
            return log_reader.read_tail_text(path, clamp_lines(max_lines))
        except OSError as e:
            raise LogAccessError(ReadFailure.IO_ERROR, str(e)) from e

    def tail(self, path: str, max_lines: int = 500) -> str:
        """Like `read_tail`, but failures come back as display strings."""
        try:
            return self.read_tail(path, max_lines)
        except LogAccessError as e:
            if e.kind is ReadFailure.IO_ERROR:
                logger.warning("Log read failed for %s: %s", path, e.detail)
            return FAILURE_MESSAGES[e.kind]

    # -----------------------
    # Download
    # -----------------------
    def open_download(self, key: str) -> DownloadTarget:
        """
        Validate `key` for download against a fresh catalog and open the file.

        The caller owns `DownloadTarget.handle` (`iter_file_chunks` closes it).

        The download limit is stricter than the display limit, so a file that
        can be tailed may still be refused here with TOO_LARGE.
        """
        entry = self.get_catalog().get(key)
        if entry is None:
            raise LogAccessError(ReadFailure.NOT_FOUND, f"unknown log key {key!r}")

        # Opened before any response starts; a log that vanished since the
        # catalog was built fails here, not mid-stream.
        try:
            handle = open(entry.path, "rb")
        except PermissionError as e:
            raise LogAccessError(ReadFailure.UNREADABLE, str(e)) from e
        except OSError as e:
            logger.warning("Download open failed for %s: %s", entry.path, e)
            raise LogAccessError(ReadFailure.IO_ERROR, str(e)) from e

        # Size of what was actually opened, not of whatever the path points at now
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as e:
            handle.close()
            raise LogAccessError(ReadFailure.IO_ERROR, str(e)) from e

        if size > self._max_download_bytes:
            handle.close()
            raise LogAccessError(ReadFailure.TOO_LARGE, f"{entry.path!r} is {size} bytes")

        return DownloadTarget(
            key=key,
            path=entry.path,
            filename=os.path.basename(entry.path),
            size=size,
            handle=handle,
        )
