"""
Logging setup for the leave ledger

Ledger events (submissions, status transitions, degraded enforcement,
counter conflicts) are plain log lines from the service modules; this only
wires handlers and levels once at startup.
"""
import logging
import sys
from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def setup_logging() -> None:
    """Configure the root logger from settings.LOG_LEVEL (stdout)"""
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, quiet_level))

    logging.getLogger(__name__).info(
        "logging ready: level=%s env=%s", settings.LOG_LEVEL, settings.APP_ENV
    )
