"""Logging helpers for alpaca-history.

These helpers centralize logger configuration and include a sanitizer that
prevents collisions with reserved :class:`logging.LogRecord` attributes. Any
key in ``extra`` matching a reserved field is automatically prefixed with
``x_`` to keep structured logging safe. Use :func:`get_logger` to obtain a
sanitizing adapter for all modules.
"""

import logging
import sys
import threading
from typing import Any

from .json_formatter import JSONFormatter
from .redact import _ENV_MASK

_RESERVED_LOGRECORD_KEYS = {
    "name",
    "msg",
    "message",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "asctime",
}

_SENSITIVE_EXTRA_KEYS = ("api_key", "secret")


def _sanitize_extra(extra: dict[str, Any] | None) -> dict[str, Any]:
    """Rename reserved ``LogRecord`` keys with ``x_`` prefix."""
    if not extra:
        return {}
    return {k if k not in _RESERVED_LOGRECORD_KEYS else f"x_{k}": v for k, v in extra.items()}


def sanitize_extra(extra: dict[str, Any] | None) -> dict[str, Any]:
    """Sanitize ``extra`` mapping.

    Reserved ``LogRecord`` keys are prefixed with ``x_`` and values of keys
    containing sensitive tokens (``api_key`` or ``secret``) are redacted.
    """
    cleaned = _sanitize_extra(extra)
    out: dict[str, Any] = {}
    for k, v in cleaned.items():
        if any(tok in k.lower() for tok in _SENSITIVE_EXTRA_KEYS):
            out[k] = _ENV_MASK
        else:
            out[k] = v
    return out


class SanitizingLoggerAdapter(logging.LoggerAdapter):
    """Adapter that sanitizes ``extra`` keys to avoid LogRecord collisions."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra")
        if extra is not None:
            kwargs["extra"] = sanitize_extra(extra)
        return (msg, kwargs)


_ROOT_LOGGER_NAME = "alpaca_history"
_loggers: dict[str, SanitizingLoggerAdapter] = {}
_LOGGING_LOCK = threading.RLock()
_LOGGING_CONFIGURED = False


def _coerce_level(level: str | int | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if isinstance(resolved, int):
        return resolved
    raise ValueError(f"Unsupported log level: {level!r}")


def configure_logging(level: str | int | None = None, *, json_logs: bool = False) -> SanitizingLoggerAdapter:
    """Configure the package logger once and return a sanitizing adapter.

    Repeated calls only adjust the level. Handlers are attached to the
    ``alpaca_history`` logger so host applications keep control of the root
    logger.
    """
    global _LOGGING_CONFIGURED
    with _LOGGING_LOCK:
        base = logging.getLogger(_ROOT_LOGGER_NAME)
        base.setLevel(_coerce_level(level))
        if not _LOGGING_CONFIGURED:
            handler = logging.StreamHandler(sys.stderr)
            if json_logs:
                handler.setFormatter(JSONFormatter())
            else:
                handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
            base.addHandler(handler)
            _LOGGING_CONFIGURED = True
    return get_logger(_ROOT_LOGGER_NAME)


def get_logger(name: str) -> SanitizingLoggerAdapter:
    "Return a named logger wrapped with :class:`SanitizingLoggerAdapter`."
    with _LOGGING_LOCK:
        if name not in _loggers:
            _loggers[name] = SanitizingLoggerAdapter(logging.getLogger(name or _ROOT_LOGGER_NAME), {})
        return _loggers[name]


__all__ = [
    "JSONFormatter",
    "SanitizingLoggerAdapter",
    "configure_logging",
    "get_logger",
    "sanitize_extra",
]
