"""Utilities for redacting sensitive information from log payloads."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from copy import deepcopy
import re
from typing import Any

_RE_KEYS = re.compile("(key|secret|token|password)", re.IGNORECASE)
_MASK = "***REDACTED***"
_ENV_MASK = "***"

_SENSITIVE_HEADERS = {"APCA-API-KEY-ID", "APCA-API-SECRET-KEY", "AUTHORIZATION"}


def _redact_inplace(obj: Any) -> Any:
    """Recursively redact matching keys."""

    if isinstance(obj, Mapping):
        for k, v in list(obj.items()):
            # page tokens are opaque cursors, not credentials
            if isinstance(k, str) and _RE_KEYS.search(k) and k.lower() != "page_token":
                obj[k] = _MASK
            else:
                obj[k] = _redact_inplace(v)
        return obj
    if isinstance(obj, list):
        for i, v in enumerate(obj):
            obj[i] = _redact_inplace(v)
        return obj
    return obj


def redact(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return a redacted copy of *payload*."""

    dup: MutableMapping[str, Any] = deepcopy(payload)
    return _redact_inplace(dup)


def redact_headers(headers: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of HTTP *headers* with Alpaca credentials masked."""

    return {k: (_ENV_MASK if k.upper() in _SENSITIVE_HEADERS and v else v) for k, v in headers.items()}


__all__ = ["redact", "redact_headers"]
