# sync_monitor/api/deps.py
"""
FastAPI dependencies shared by the routers.

Services are created once per app in `create_app()` and stored on
`app.state`; these providers hand them to route handlers.
"""

from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sync_monitor.core.config import Settings
from sync_monitor.services.log_catalog import LogCatalog
from sync_monitor.services.sync_status import SyncStatusReader

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_log_catalog(request: Request) -> LogCatalog:
    return request.app.state.log_catalog


def get_status_reader(request: Request) -> SyncStatusReader:
    return request.app.state.status_reader


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    app_settings: Settings = Depends(get_settings),
) -> None:
    """Only operators holding the admin token may see logs or status."""
    expected = app_settings.ADMIN_TOKEN
    if not expected or credentials is None:
        raise HTTPException(status_code=401, detail="Invalid or missing token")
    if not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing token")
