from .client import AlpacaHistoricalClient, Page
from .models import BaseData, Bar, HistoryRequest, QuoteBar, Tick, TradeBar
from .pagination import DataRestriction, RestrictionState, narrow_restricted_window, paginate

__all__ = [
    "AlpacaHistoricalClient",
    "Bar",
    "BaseData",
    "DataRestriction",
    "HistoryRequest",
    "Page",
    "QuoteBar",
    "RestrictionState",
    "Tick",
    "TradeBar",
    "narrow_restricted_window",
    "paginate",
]
