"""Pytest configuration and fixtures"""
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sync_monitor.core.cache import MemoryCache
from sync_monitor.core.config import Settings
from sync_monitor.main import create_app
from sync_monitor.services.log_catalog import LogCatalog, default_candidates
from sync_monitor.services.sync_status import SyncStatusReader

ADMIN_TOKEN = "test-admin-token"


class Roots:
    """The two storage roots, relocated under tmp_path."""

    def __init__(self, base: Path):
        self.live = base / "homelive"
        self.home = base / "home"
        self.live.mkdir(parents=True)
        self.home.mkdir(parents=True)

    def write(self, root: Path, rel: str, content: str = "", mtime: float | None = None) -> str:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return str(path)

    def live_log(self, rel: str, content: str = "", mtime: float | None = None) -> str:
        return self.write(self.live, f"LogFiles/{rel}", content, mtime)

    def home_log(self, rel: str, content: str = "", mtime: float | None = None) -> str:
        return self.write(self.home, f"LogFiles/{rel}", content, mtime)

    def sized(self, root: Path, rel: str, size: int) -> str:
        """Create a sparse file of exactly `size` bytes."""
        path = root / "LogFiles" / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as fh:
            fh.truncate(size)
        return str(path)

    @property
    def status_file(self) -> Path:
        return self.home / "syncstatus"


@pytest.fixture
def roots(tmp_path):
    return Roots(tmp_path)


@pytest.fixture
def make_roots():
    return Roots


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def catalog(roots, cache):
    return LogCatalog(cache, default_candidates(str(roots.live), str(roots.home)))


@pytest.fixture
def status_reader(roots, cache):
    return SyncStatusReader(cache, str(roots.status_file))


@pytest.fixture
def app_settings(roots):
    return Settings(
        ENV="test",
        ADMIN_TOKEN=ADMIN_TOKEN,
        LIVE_ROOT=str(roots.live),
        HOME_ROOT=str(roots.home),
        STATUS_FILE=str(roots.status_file),
    )


@pytest.fixture
def client(app_settings):
    app = create_app(app_settings)
    return TestClient(app, headers={"Authorization": f"Bearer {ADMIN_TOKEN}"})
