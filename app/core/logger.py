from __future__ import annotations

import json
import logging
import sys
from typing import Any

from app.core.config import settings

# Never serialize credentials passed through ``extra=``
_REDACTED_KEYS = frozenset({"token", "access_token", "refresh_token", "id_token", "client_secret", "password"})
_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

# httpx logs full request URLs at INFO; tokeninfo URLs carry the ID token
_QUIET_LOGGERS = ("httpx", "httpcore")


def _redact(key: str, value: Any) -> Any:
    return "***" if key in _REDACTED_KEYS else value


class JsonFormatter(logging.Formatter):
    """One JSON object per line; non-standard record attributes go under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extra = {
            key: _redact(key, value)
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_ATTRS
        }
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, default=str)


def _build_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    return handler


def init_logging(level: int | None = None) -> None:
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(level or getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root.addHandler(_build_handler())
