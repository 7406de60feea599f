# hr-dashboard/hr_dashboard/core/logging_config.py
"""
Process-wide logging for the HR dashboard.

Production runs emit one JSON object per line on stdout. Report and sync code
attaches context through ``extra=``; only the keys in ``CONTEXT_FIELDS`` are
copied into the JSON line.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from hr_dashboard.core.config import settings

CONTEXT_FIELDS = ("requester", "dropped", "source")
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "sqlalchemy.engine")
PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> logging.Handler:
    """Install one stdout handler on the root logger; defaults come from settings."""
    level = (level or settings.LOG_LEVEL).upper()
    json_output = settings.LOG_JSON if json_output is None else json_output

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger("hr_dashboard").setLevel(getattr(logging, level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
