import logging

import pytest

from sync_monitor.core.logging import HealthCheckFilter, configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    app = logging.getLogger("sync_monitor")
    access = logging.getLogger("uvicorn.access")
    saved = (list(root.handlers), root.level, app.level, list(access.filters))
    yield
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    app.setLevel(saved[2])
    access.filters[:] = saved[3]


def test_level_applies_to_app_logger(restore_logging):
    app_logger = configure_logging("debug")
    assert app_logger.name == "sync_monitor"
    assert app_logger.level == logging.DEBUG
    assert logging.getLogger().level == logging.WARNING


def test_stricter_level_applies_to_root(restore_logging):
    configure_logging("ERROR")
    assert logging.getLogger().level == logging.ERROR


def test_repeated_calls_do_not_stack(restore_logging):
    configure_logging("INFO")
    configure_logging("INFO")
    assert len(logging.getLogger().handlers) == 1
    access = logging.getLogger("uvicorn.access")
    assert sum(isinstance(f, HealthCheckFilter) for f in access.filters) == 1


def test_health_checks_are_filtered():
    def record(msg):
        return logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, msg, None, None)

    f = HealthCheckFilter()
    assert f.filter(record('127.0.0.1 - "GET /health HTTP/1.1" 200')) is False
    assert f.filter(record('127.0.0.1 - "GET /logs HTTP/1.1" 200')) is True
