from .hours import AlwaysOpenHours, ExchangeHours, TradingHours, hours_for
from .symbols import AssetClass, OptionRight, Symbol, SymbolMapper, to_alpaca_symbol

__all__ = [
    "AlwaysOpenHours",
    "AssetClass",
    "ExchangeHours",
    "OptionRight",
    "Symbol",
    "SymbolMapper",
    "TradingHours",
    "hours_for",
    "to_alpaca_symbol",
]
