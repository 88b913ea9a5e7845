# sync_monitor/api/routes/dashboard.py
"""
GET /dashboard

Everything the logs page renders, in one payload:
- selector options (the current catalog)
- the selected log (requested key, else the first one) and its tail
- the sync status badge

Both caches are cleared first: a page view always reflects the disk, at the
cost of one rescan per render.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from sync_monitor.api.deps import get_log_catalog, get_settings, get_status_reader, require_admin
from sync_monitor.api.routes.logs import to_log_item
from sync_monitor.api.routes.status import to_status_response
from sync_monitor.core.config import Settings
from sync_monitor.schemas.dashboard import DashboardResponse
from sync_monitor.services.log_catalog import LogCatalog
from sync_monitor.services.sync_status import SyncStatusReader

router = APIRouter(dependencies=[Depends(require_admin)])

NO_LOGS_NOTICE = "No valid log files found or access denied."


def _now_iso_z() -> str:
    now = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
    return now.isoformat() + "Z"


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    log: Optional[str] = Query(default=None, description="Key of the log to show"),
    catalog: LogCatalog = Depends(get_log_catalog),
    reader: SyncStatusReader = Depends(get_status_reader),
    app_settings: Settings = Depends(get_settings),
):
    reader.clear_cache()
    catalog.clear_cache()

    entries = catalog.get_catalog()
    status = to_status_response(reader.get_status())

    if not entries:
        return DashboardResponse(
            generated_at=_now_iso_z(),
            status=status,
            notice=NO_LOGS_NOTICE,
        )

    # Unknown or missing key -> first log in display order
    key = log if log in entries else next(iter(entries))
    entry = entries[key]

    return DashboardResponse(
        generated_at=_now_iso_z(),
        logs=[to_log_item(e) for e in entries.values()],
        selected=to_log_item(entry),
        content=catalog.tail(entry.path, app_settings.TAIL_DEFAULT_LINES),
        status=status,
    )
