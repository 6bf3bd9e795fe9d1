"""Logging setup for applications using forkable.

The library itself only creates module loggers under ``forkable.*``; it never
configures handlers. Call setup_logging() once from the application entry
point to get either JSON lines or human-readable output.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from .config import Settings

# Fields attached via `extra=` by forkable loggers: settlement-guard notices
# (future.py), collaborator I/O (fs.py, http.py) and console outcomes.
EXTRA_FIELDS = ("settlement", "outcome", "label", "path", "method", "url", "status_code")


class JSONFormatter(logging.Formatter):
    """Format records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            # continuations may run on executor or timer threads
            "thread": record.threadName,
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> logging.Handler:
    """Attach a stream handler to ``logger`` (the root logger by default).

    Missing arguments fall back to FORKABLE_LOG_LEVEL / FORKABLE_LOG_FORMAT.
    Returns the installed handler so callers can remove it again.
    """
    if level is None or fmt is None:
        settings = Settings()
        level = level or settings.log_level
        fmt = fmt or settings.log_format
    target = logger if logger is not None else logging.root
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    target.addHandler(handler)
    target.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
