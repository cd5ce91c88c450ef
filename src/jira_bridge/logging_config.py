"""Structured logging configuration for jira-bridge.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the jira_bridge namespace
- Environment variable control (JIRA_BRIDGE_LOG_LEVEL, JIRA_BRIDGE_LOG_FORMAT)
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

__all__ = [
    "HANDLER_NAME",
    "LOGGER_NAME",
    "SENSITIVE_KEYS",
    "StructuredFormatter",
    "TextFormatter",
    "configure_logging",
]

LOGGER_NAME = "jira_bridge"
HANDLER_NAME = "jira_bridge.stream"

# Extras with these names are redacted from log output
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key", "api_token",
    "authorization", "credential", "auth", "bearer",
}

# LogRecord attributes that are not user-supplied extras
_STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON log formatter.

    Outputs one JSON object per record with:
    - timestamp: UTC ISO 8601 with 'Z' suffix
    - level: Log level name
    - logger: Logger name
    - message: Log message (a snake_case event name by convention)
    - context: Extras passed via ``extra={...}``

    Extras whose key is in SENSITIVE_KEYS are replaced with "[REDACTED]" so
    Jira credentials never reach the log stream.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }
        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter, used when JIRA_BRIDGE_LOG_FORMAT=text."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure the jira_bridge logger hierarchy.

    Args:
        level: Log level override. Defaults to JIRA_BRIDGE_LOG_LEVEL or INFO.
        log_format: "json" or "text". Defaults to JIRA_BRIDGE_LOG_FORMAT or json.

    Calling this more than once updates the level and formatter of the
    existing handler instead of stacking handlers.
    """
    if level is None:
        level = os.getenv("JIRA_BRIDGE_LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format is None:
        log_format = os.getenv("JIRA_BRIDGE_LOG_FORMAT", "json")
    if log_format.lower() == "text":
        formatter: logging.Formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Handlers attached by others (e.g. pytest capture) are left untouched
    handler = next((h for h in logger.handlers if h.get_name() == HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        logger.addHandler(handler)
    handler.setFormatter(formatter)

    logger.propagate = False
