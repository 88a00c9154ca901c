from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .config import Settings

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    One JSON object per log line.

    Fields passed with ``extra={...}`` are merged into the object, so
    ``logger.info("sms.sent", extra={"to": to})`` produces a searchable
    ``"to"`` key instead of being lost in the message text.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Return a JSON-logging logger under the ``sms_bridge`` namespace.

    Safe to call many times; the shared parent logger is configured once.
    """
    root = logging.getLogger("sms_bridge")

    if not getattr(root, "_configured", False):
        root.setLevel(logging.INFO)

        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        # We emit JSON ourselves; keep uvicorn's root handlers out of it.
        root.propagate = False
        root._configured = True  # type: ignore[attr-defined]

    if name == "sms_bridge" or name.startswith("sms_bridge."):
        return logging.getLogger(name)
    return root.getChild(name)


def configure_logging(settings: Settings) -> None:
    """Apply ``settings.log_level`` to every sms_bridge logger."""
    root = get_logger("sms_bridge")
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
