"""
Logging setup for the registry console.

Two output shapes share one redaction pass: JSON lines in production and
plain text in development. Rendered messages go through
``sanitize_log_data`` and ``extra`` fields with sensitive-looking names are
replaced, so tokens, emails and key=value secrets reach no handler unmasked.
Every line carries the correlation id of the user action that produced it.
"""

import json
import logging
import logging.config
import re
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from registry_console.core.config import settings
from registry_console.core.security import sanitize_log_data

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord has; anything else arrived through ``extra``
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}
_SENSITIVE_FIELD = re.compile(r"password|secret|key|token|credential|cookie|private|email", re.I)

REDACTED = "[REDACTED]"
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def _extra_fields(record: logging.LogRecord, include_sensitive: bool) -> Dict[str, Any]:
    fields = {}
    for name, value in vars(record).items():
        if name in _STANDARD_ATTRS:
            continue
        fields[name] = value if include_sensitive or not _SENSITIVE_FIELD.search(name) else REDACTED
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, include_sensitive: bool = False):
        super().__init__()
        self.include_sensitive = include_sensitive

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if not self.include_sensitive:
            message = sanitize_log_data(message, max_length=2000)

        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if correlation_id_ctx.get():
            entry["correlation_id"] = correlation_id_ctx.get()
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = _extra_fields(record, self.include_sensitive)
        if extra:
            entry["extra"] = extra
        return json.dumps(entry, default=str)


class SanitizingFormatter(logging.Formatter):
    """Plain text formatter that masks tokens and emails."""

    def format(self, record: logging.LogRecord) -> str:
        return sanitize_log_data(super().format(record), max_length=4000)


def setup_logging(
    log_level: str = "INFO",
    enable_json: bool = True,
    log_file: Optional[str] = None,
    include_sensitive: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        enable_json: JSON lines when set, plain text otherwise
        log_file: Optional file that receives the same records
        include_sensitive: Skip redaction (never in production)
    """
    if enable_json:
        formatter: Dict[str, Any] = {
            "()": StructuredFormatter,
            "include_sensitive": include_sensitive,
        }
    else:
        formatter = {
            "()": SanitizingFormatter,
            "fmt": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        }

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": log_file,
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": handlers,
        "root": {"level": log_level.upper(), "handlers": list(handlers)},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    })


def get_correlation_id() -> str:
    """Correlation id of the current action, created on first use."""
    correlation_id = correlation_id_ctx.get()
    if not correlation_id:
        correlation_id = str(uuid.uuid4())
        correlation_id_ctx.set(correlation_id)
    return correlation_id


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_ctx.set(correlation_id)


def log_security_event(
    event_type: str,
    message: str,
    user_id: Optional[str] = None,
    level: int = logging.INFO,
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log a session event on the ``security.events`` logger.

    Args:
        event_type: login, logout, token_expired, token_decode_failure, ...
        message: Human-readable message; must not contain the raw token
        user_id: Identity claim of the affected session, if known
        level: Logging level for the event
        extra_data: Additional structured fields
    """
    fields: Dict[str, Any] = {"event_type": event_type, "correlation_id": get_correlation_id()}
    if user_id:
        fields["user_id"] = user_id
    fields.update(extra_data or {})

    logging.getLogger("security.events").log(level, message, extra=fields)


def init_application_logging() -> None:
    """Configure logging from settings: plain DEBUG text in dev mode, JSON INFO otherwise."""
    is_dev = settings.DEV_MODE
    log_level = "DEBUG" if is_dev else "INFO"
    setup_logging(log_level=log_level, enable_json=not is_dev)

    logging.getLogger("registry_console.startup").info(
        "Logging initialized",
        extra={"dev_mode": is_dev, "log_level": log_level, "environment": settings.ENVIRONMENT},
    )
