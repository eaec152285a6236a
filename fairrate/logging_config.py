"""Centralized logging configuration for the fairrate backend.

``setup_logging()`` runs once from the application lifespan in ``main.py``.
Modules obtain their own logger with::

    import logging
    LOG = logging.getLogger(__name__)
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from fairrate.timeutils import isoformat_utc

_QUIET_LOGGERS = ("httpcore", "httpx", "uvicorn.access", "pymongo")

TEXT_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the traceback under ``exception``."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": isoformat_utc(datetime.fromtimestamp(record.created, timezone.utc)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure the root logger.

    • **LOG_FORMAT=json** (default): each record is a single JSON line
      suited for log aggregation tools.
    • **LOG_FORMAT=text**: human-friendly format for local development.

    The log level is controlled by ``LOG_LEVEL`` (default: INFO). Arguments
    override the environment.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    if (log_format or os.getenv("LOG_FORMAT", "json")).lower() == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    # Replace handlers so a reload does not duplicate output
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
