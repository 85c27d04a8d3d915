"""Structured JSON logging bound to WeatherWear sessions and operations.

Every record carries the fields bound by the innermost :func:`operation_context`
(``correlation_id``, ``operation``, ``session_id``, ``city`` ...). Values are
scrubbed in the formatter so that callers can log domain objects freely:

* secrets (passwords, API keys, prompts) are replaced outright,
* account identifiers are replaced by a short stable digest so one user's
  activity can still be followed across records,
* coordinates are rounded to one decimal place (roughly city level).
"""

from __future__ import annotations

import contextlib
import contextvars
import hashlib
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator, Mapping

_LOG_CONTEXT: contextvars.ContextVar[Mapping[str, Any]] = contextvars.ContextVar(
    "weatherwear_log_context", default={}
)

_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}
_SECRET_KEYS = {"password", "confirm_password", "api_key", "key", "x-goog-api-key", "prompt"}
_ACCOUNT_KEYS = {"user_id", "email"}
_COORDINATE_KEYS = {"lat", "lng", "lon"}
_EMAIL_PATTERN = re.compile(r"[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+")
_KEY_PARAM_PATTERN = re.compile(r"(key=)[^&\s]+")
_HANDLER_MARK = "_weatherwear_json"


def _account_digest(value: Any) -> str:
    digest = hashlib.sha256(str(value).strip().lower().encode("utf-8")).hexdigest()
    return f"acct-{digest[:10]}"


def scrub(key: str, value: Any) -> Any:
    """Return a log-safe rendering of ``value`` logged under ``key``."""

    if value is None:
        return None
    if key in _SECRET_KEYS:
        return "[redacted]"
    if key in _ACCOUNT_KEYS:
        return _account_digest(value)
    if key in _COORDINATE_KEYS and isinstance(value, (int, float)):
        return round(float(value), 1)
    if isinstance(value, Mapping):
        return {str(k): scrub(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [scrub(key, item) for item in value]
    if isinstance(value, str):
        return _KEY_PARAM_PATTERN.sub(r"\1[redacted]", _EMAIL_PATTERN.sub("[redacted-email]", value))
    if isinstance(value, (bool, int, float)):
        return value
    return scrub(key, str(value))


class JsonFormatter(logging.Formatter):
    """One JSON object per record: bound context, then record extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", None) or record.getMessage(),
        }
        for key, value in current_log_context().items():
            payload[key] = scrub(key, value)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = scrub(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Install the JSON handler on the root logger, replacing a previous one."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    setattr(handler, _HANDLER_MARK, True)
    root.addHandler(handler)
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO"))


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, installing the JSON handler on first use."""

    if not any(getattr(handler, _HANDLER_MARK, False) for handler in logging.getLogger().handlers):
        configure_logging()
    return logging.getLogger(name)


def current_log_context() -> Dict[str, Any]:
    return dict(_LOG_CONTEXT.get())


def current_correlation_id() -> str:
    """Correlation id of the enclosing operation, or a fresh one."""

    return _LOG_CONTEXT.get().get("correlation_id") or uuid.uuid4().hex


@contextlib.contextmanager
def operation_context(operation: str, **fields: Any) -> Iterator[str]:
    """Bind ``operation`` and domain fields to every record logged inside.

    Nested operations inherit the outer correlation id and session fields;
    ``None`` values are not bound.
    """

    bound = dict(_LOG_CONTEXT.get())
    bound.setdefault("correlation_id", uuid.uuid4().hex)
    bound["operation"] = operation
    bound.update({key: value for key, value in fields.items() if value is not None})
    token = _LOG_CONTEXT.set(bound)
    try:
        yield bound["correlation_id"]
    finally:
        _LOG_CONTEXT.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit ``event`` with structured fields.

    Field names that clash with ``LogRecord`` attributes are prefixed with
    ``field_`` instead of raising.
    """

    exc_info = fields.pop("exc_info", None)
    extra = {"event": event}
    for key, value in fields.items():
        extra[f"field_{key}" if key in _RESERVED_ATTRS else key] = value
    logger.log(level, event, exc_info=exc_info, extra=extra)


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "current_correlation_id",
    "current_log_context",
    "get_logger",
    "log_event",
    "operation_context",
    "scrub",
]
