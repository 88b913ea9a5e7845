# sync_monitor/schemas/logs.py
"""
Schemas for the /logs endpoints.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class LogItem(BaseModel):
    """A single catalog entry."""
    key: str = Field(..., description="Stable log identifier (e.g., apache-error)")
    label: str = Field(..., description="Human-readable log name")
    path: str = Field(..., description="Resolved absolute path on disk")
    size: Optional[int] = Field(default=None, ge=0, description="Current size in bytes")
    updated_at: Optional[str] = Field(default=None, description="ISO8601 UTC mtime of the file")


class LogCatalogResponse(BaseModel):
    """
    Logs that currently exist and may be viewed.

    Example:
    {
      "logs": [{"key": "apache-error", "label": "Apache Error", "path": "...", ...}],
      "total": 1
    }
    """
    logs: List[LogItem] = Field(default_factory=list, description="Catalog entries in display order")
    total: int = Field(..., ge=0, description="Number of catalog entries")


class TailResponse(BaseModel):
    """Last lines of a catalog log."""
    key: str = Field(..., description="Log identifier")
    label: str = Field(..., description="Human-readable log name")
    path: str = Field(..., description="Resolved absolute path")
    lines: int = Field(..., ge=1, le=1000, description="Line limit actually applied")
    content: str = Field(..., description="Tail text, or a short notice if it could not be read")
