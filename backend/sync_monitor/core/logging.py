# sync_monitor/core/logging.py
"""
Logging setup for the monitor.

LOG_LEVEL applies to the `sync_monitor` loggers. Everything else (uvicorn,
starlette, ...) stays at WARNING, or at LOG_LEVEL when that is stricter, so
DEBUG catalog rebuilds don't drown in framework output.
Container health checks hit /health every few seconds; those access lines
are dropped.
"""

from __future__ import annotations

import logging
import sys

APP_LOGGER = "sync_monitor"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for /health."""

    def filter(self, record: logging.LogRecord) -> bool:
        return "/health" not in record.getMessage()


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Install a single stdout handler and set levels.

    Returns the application logger. Safe to call more than once: handlers
    and filters are replaced, not stacked.
    """
    app_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(max(app_level, logging.WARNING))

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(app_level)

    access_logger = logging.getLogger("uvicorn.access")
    for f in [f for f in access_logger.filters if isinstance(f, HealthCheckFilter)]:
        access_logger.removeFilter(f)
    access_logger.addFilter(HealthCheckFilter())

    return app_logger
