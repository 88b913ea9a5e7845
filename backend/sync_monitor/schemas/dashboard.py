# sync_monitor/schemas/dashboard.py
"""
Dashboard response schema.

This is everything the logs page needs in one call: the selector options,
the selected log's tail and the sync badge. Keep changes here intentional,
because the UI depends on them.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from sync_monitor.schemas.logs import LogItem
from sync_monitor.schemas.status import SyncStatusResponse


class DashboardResponse(BaseModel):
    generated_at: str = Field(..., description="ISO8601 UTC timestamp when this payload was generated")
    logs: List[LogItem] = Field(default_factory=list, description="Selector options in display order")
    selected: Optional[LogItem] = Field(default=None, description="Log being shown (null if none exist)")
    content: str = Field(default="", description="Tail of the selected log")
    status: SyncStatusResponse = Field(..., description="Current sync status")
    notice: Optional[str] = Field(default=None, description="Message to show instead of a log")
