from __future__ import annotations

import json
import logging
import traceback
from datetime import date, datetime
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo


def _mask_secret(value: Any) -> str:
    """Non-throwing redactor for secret-like values."""
    s = "" if value is None else str(value)
    n = len(s)
    if n == 0:
        return ""
    if n <= 4:
        return "***"
    return f"***{s[-4:]}"


_UTC = ZoneInfo("UTC")

_OMIT = {
    "msg", "message", "args", "levelname", "levelno", "name", "created",
    "msecs", "relativeCreated", "asctime", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno",
    "funcName", "thread", "threadName", "processName", "process",
    "taskName",
}

_SENSITIVE_TOKENS = (
    "api_key", "secret_key", "apca_api_key_id", "apca_api_secret_key",
    "password", "bearer", "private", "access_key",
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter with optional extra fields and masking."""

    def __init__(
        self,
        datefmt: str | None = None,
        *,
        extra_fields: dict[str, Any] | None = None,
        mask_keys: list[str] | None = None,
    ) -> None:
        super().__init__(fmt=None, datefmt=datefmt)
        self._extra_fields = extra_fields or {}
        self._mask_keys = {k.lower() for k in (mask_keys or [])}

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        """Render timestamps in UTC with a ``Z`` suffix."""

        dt = datetime.fromtimestamp(record.created, tz=_UTC)
        formatted = dt.isoformat(timespec="milliseconds")
        if formatted.endswith("+00:00"):
            formatted = f"{formatted[:-6]}Z"
        return formatted

    def _json_default(self, obj: Any) -> Any:
        """Fallback serialization for unsupported types."""
        if isinstance(obj, datetime | date):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return str(obj)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }

        for k, v in record.__dict__.items():
            if k in _OMIT:
                continue
            lk = k.lower()
            if lk in self._mask_keys:
                v = "***"
            elif isinstance(v, (str, bytes)) and any(tok in lk for tok in _SENSITIVE_TOKENS):
                v = _mask_secret(v)
            payload[k] = v

        for k, v in self._extra_fields.items():
            payload[k] = "***" if k.lower() in self._mask_keys else v

        if record.exc_info:
            exc_type, exc_value, _exc_tb = record.exc_info
            payload["exc"] = "".join(traceback.format_exception_only(exc_type, exc_value)).strip()
        return json.dumps(payload, default=self._json_default, ensure_ascii=False)


__all__ = ["JSONFormatter"]
