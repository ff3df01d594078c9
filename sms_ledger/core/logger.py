import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from sms_ledger.core.config import settings


class JsonFormatter(logging.Formatter):
    """
    One JSON object per log line.
    Structured fields passed as ``extra={"fields": {...}}`` are merged in.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S,%f%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            payload.update(fields)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def get_logger(name: str = "sms_ledger") -> logging.Logger:
    """
    Returns a JSON-logging logger for the given name.
    Safe to call many times; it will only configure the logger once.
    """
    logger = logging.getLogger(name)

    if getattr(logger, "_configured", False):
        return logger

    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    # We emit JSON ourselves; the root logger would print it twice.
    logger.propagate = False

    logger._configured = True  # type: ignore[attr-defined]

    return logger
