from __future__ import annotations
from json import JSONDecodeError

import requests
from alpaca.common.exceptions import APIError

RequestException = requests.exceptions.RequestException
COMMON_EXC = (TypeError, ValueError, KeyError, JSONDecodeError, RequestException, TimeoutError)


class UnimplementedRequestError(NotImplementedError):
    """Raised when a provider request shape has no restricted-window rule."""


class RestrictedWindowError(ValueError):
    """Raised when the delayed-data window leaves no time range to query."""


class UnsupportedSymbolError(ValueError):
    """Raised when a symbol cannot be expressed in Alpaca's notation."""


def api_error_message(exc: BaseException) -> str:
    """Return the provider's message for ``exc``.

    ``APIError.message`` decodes the JSON body returned by Alpaca; non-JSON
    bodies or bodies without a ``message`` field fall back to ``str(exc)``.
    """

    try:
        message = getattr(exc, "message")
    except (ValueError, KeyError, TypeError, AttributeError):
        return str(exc)
    return str(message) if message is not None else str(exc)


__all__ = [
    "APIError",
    "COMMON_EXC",
    "RequestException",
    "RestrictedWindowError",
    "UnimplementedRequestError",
    "UnsupportedSymbolError",
    "api_error_message",
]
