"""Audit logging utilities.

Writes structured JSON lines to a dedicated audit log file and standard logger.
Each event describes an authentication-relevant action on the token endpoint
(client/user authentication failures, logins, acting-user stamps).
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

from app.core.config import settings

_logger = logging.getLogger("audit")


def log_audit_event(action: str, user_id: int | None = None, status: str = "success", **metadata: Any) -> None:
    """Record an audit event.

    Parameters:
        action: A machine-readable action key (e.g. 'user.login', 'client.authentication.failed').
        user_id: The subject user's ID (if available).
        status: 'success' | 'failure' | 'denied'.
        **metadata: Additional context fields (client ids, channels, etc.).
    """
    event = {
        "ts": int(time.time()),
        "action": action,
        "user_id": user_id,
        "status": status,
        **metadata,
    }
    line = json.dumps(event, separators=(",", ":"), default=str)
    path = settings.AUDIT_LOG_FILE
    # Append to file (best effort)
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError:
        _logger.debug("Failed to write audit event to file: %s", event)
    # Emit via logger for aggregation
    _logger.info(line)


def log_failure(action: str, user_id: int | None = None, error: str | None = None, **extra: Any) -> None:
    log_audit_event(action, user_id=user_id, status="failure", error=error, **extra)
