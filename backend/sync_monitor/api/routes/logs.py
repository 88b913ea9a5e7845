# sync_monitor/api/routes/logs.py
"""
Log catalog, tail and download endpoints.

GET /logs                   -> logs that currently exist (the allow-list)
GET /logs/{key}/tail        -> last N lines (N clamped to 1..1000)
GET /logs/{key}/download    -> raw file, streamed

Every request re-reads the catalog (cached for a minute), so a path is only
ever opened if it is in the current allow-list.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from sync_monitor.api.deps import get_log_catalog, require_admin
from sync_monitor.schemas.logs import LogCatalogResponse, LogItem, TailResponse
from sync_monitor.services.log_catalog import (
    LogAccessError,
    LogCatalog,
    LogEntry,
    ReadFailure,
    clamp_lines,
)
from sync_monitor.services.log_reader import iter_file_chunks

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

# Download failures -> (HTTP status, message)
DOWNLOAD_ERRORS = {
    ReadFailure.NOT_FOUND: (400, "Invalid log file."),
    ReadFailure.UNREADABLE: (404, "Log file not readable."),
    ReadFailure.TOO_LARGE: (413, "File too large for download."),
    ReadFailure.IO_ERROR: (500, "An error occurred during download."),
}


def _iso_z(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None, microsecond=0)
    return dt.isoformat() + "Z"


def to_log_item(entry: LogEntry) -> LogItem:
    """Catalog entry -> API item, with size/mtime looked up now (None if gone)."""
    size: Optional[int] = None
    updated_at: Optional[str] = None
    try:
        st = os.stat(entry.path)
        size = st.st_size
        updated_at = _iso_z(st.st_mtime)
    except OSError:
        pass
    return LogItem(
        key=entry.key,
        label=entry.label,
        path=entry.path,
        size=size,
        updated_at=updated_at,
    )


@router.get("/logs", response_model=LogCatalogResponse)
def list_logs(catalog: LogCatalog = Depends(get_log_catalog)):
    entries = catalog.get_catalog()
    return LogCatalogResponse(
        logs=[to_log_item(e) for e in entries.values()],
        total=len(entries),
    )


@router.get("/logs/{key}/tail", response_model=TailResponse)
def tail_log(
    key: str,
    lines: int = Query(default=500, description="Lines to return (clamped to 1..1000)"),
    catalog: LogCatalog = Depends(get_log_catalog),
):
    entry = catalog.get_catalog().get(key)
    if entry is None:
        raise HTTPException(status_code=404, detail="Unknown log.")

    return TailResponse(
        key=entry.key,
        label=entry.label,
        path=entry.path,
        lines=clamp_lines(lines),
        content=catalog.tail(entry.path, lines),
    )


@router.get("/logs/{key}/download")
def download_log(key: str, catalog: LogCatalog = Depends(get_log_catalog)):
    try:
        target = catalog.open_download(key)
    except LogAccessError as e:
        status_code, message = DOWNLOAD_ERRORS[e.kind]
        logger.info("Download of %r refused (%s): %s", key, e.kind.value, e.detail)
        raise HTTPException(status_code=status_code, detail=message)

    headers = {
        "Content-Disposition": f'attachment; filename="{target.filename}"',
        "Content-Length": str(target.size),
        "Cache-Control": "no-cache, must-revalidate",
        "Expires": "Sat, 26 Jul 1997 05:00:00 GMT",
    }
    return StreamingResponse(
        iter_file_chunks(target.handle, limit=target.size),
        media_type="text/plain; charset=utf-8",
        headers=headers,
    )
