# sync_monitor/api/routes/status.py
"""
GET /status

Sync health badge data (cached for 30 seconds).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sync_monitor.api.deps import get_status_reader, require_admin
from sync_monitor.schemas.status import SyncStatusResponse
from sync_monitor.services.sync_status import SyncStatus, SyncStatusReader

router = APIRouter(dependencies=[Depends(require_admin)])


def to_status_response(status: SyncStatus) -> SyncStatusResponse:
    return SyncStatusResponse(
        label=status.label,
        color=status.color,
        error=status.error,
        show_badge=status.show_badge,
    )


@router.get("/status", response_model=SyncStatusResponse)
def sync_status(reader: SyncStatusReader = Depends(get_status_reader)):
    return to_status_response(reader.get_status())
