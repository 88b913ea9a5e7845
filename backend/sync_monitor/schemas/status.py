# sync_monitor/schemas/status.py
"""
Schema for GET /status.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SyncStatusResponse(BaseModel):
    """
    Coarse sync health.

    Example:
      {"label": "Completed", "color": "green", "error": null, "show_badge": true}
    """
    label: str = Field(..., description="Initializing|Disabled|Error|Completed|Enabled|Running")
    color: str = Field(..., description="Badge color: yellow|red|green|blue")
    error: Optional[str] = Field(default=None, description="Why the status file could not be used")
    show_badge: bool = Field(..., description="False when sync is explicitly disabled")
