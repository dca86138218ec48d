from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime

# Whitelisted ``extra`` keys copied onto each JSON line.
EXTRA_KEYS = (
    "service",
    "run_id",
    "client_id",
    "data_type",
    "tab_name",
    "sheet_id",
    "status_code",
    "error_code",
    "strategy",
    "client_email",
    "rows",
    "cells",
    "notify_message",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key in EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(level: str | None = None) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
