"""Historical market data from Alpaca for equities, options and crypto."""

from .data.models import BaseData, HistoryRequest, QuoteBar, Tick, TradeBar
from .history import AlpacaHistoryProvider
from .market import AlwaysOpenHours, AssetClass, ExchangeHours, OptionRight, Symbol, SymbolMapper, hours_for
from .messages import LoggingMessageSink, MessageSeverity, RecordingMessageSink
from .timeframe import Resolution, TickType

__version__ = "0.1.0"

__all__ = [
    "AlpacaHistoryProvider",
    "AlwaysOpenHours",
    "AssetClass",
    "BaseData",
    "ExchangeHours",
    "HistoryRequest",
    "LoggingMessageSink",
    "MessageSeverity",
    "OptionRight",
    "QuoteBar",
    "RecordingMessageSink",
    "Resolution",
    "Symbol",
    "SymbolMapper",
    "Tick",
    "TickType",
    "TradeBar",
    "hours_for",
]
