"""Advisory messages surfaced to the hosting application.

The history provider never raises for unsupported requests or subscription
restrictions; it notifies a :class:`MessageSink` instead.  The default sink
writes the message to the package logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from alpaca_history.logging import get_logger

_log = get_logger(__name__)


class MessageSeverity(Enum):
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


_LEVELS = {
    MessageSeverity.INFORMATION: logging.INFO,
    MessageSeverity.WARNING: logging.WARNING,
    MessageSeverity.ERROR: logging.ERROR,
}


@dataclass(frozen=True, slots=True)
class BrokerageMessage:
    severity: MessageSeverity
    code: str
    text: str


class MessageSink(Protocol):
    def notify(self, severity: MessageSeverity, code: str, text: str) -> None: ...


class LoggingMessageSink:
    """Sink that logs each message with its code as structured extra."""

    def notify(self, severity: MessageSeverity, code: str, text: str) -> None:
        _log.log(_LEVELS[severity], text, extra={"code": code, "severity": severity.value})


class RecordingMessageSink:
    """Sink that keeps messages in memory, optionally forwarding them."""

    def __init__(self, forward: MessageSink | None = None) -> None:
        self.messages: list[BrokerageMessage] = []
        self._forward = forward

    def notify(self, severity: MessageSeverity, code: str, text: str) -> None:
        self.messages.append(BrokerageMessage(severity, code, text))
        if self._forward is not None:
            self._forward.notify(severity, code, text)

    def codes(self) -> list[str]:
        return [m.code for m in self.messages]


__all__ = [
    "BrokerageMessage",
    "LoggingMessageSink",
    "MessageSeverity",
    "MessageSink",
    "RecordingMessageSink",
]
