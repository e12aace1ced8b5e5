"""
Logging configuration with optional JSON output.
"""
import logging
import sys
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict

SERVICE_NAME = "workhours"
_EXTRA_FIELDS = ("request_id", "path", "status", "duration_ms")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "service": SERVICE_NAME,
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_obj[field] = getattr(record, field)

        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def _json_enabled() -> bool:
    return os.getenv("LOG_JSON", "").lower() in ("true", "1", "yes")


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure root logging on stdout.
    Set LOG_JSON=true in env to switch to JSON lines.
    """
    handler = logging.StreamHandler(sys.stdout)

    if _json_enabled():
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )
