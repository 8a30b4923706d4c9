"""Platform-neutral symbols and their Alpaca notation.

Equities map to upper-case tickers (with a few share-class overrides),
options to OCC contract symbols (``AAPL240621C00100000``) and crypto pairs to
slash notation (``BTC/USD``).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from alpaca_history.exc import UnsupportedSymbolError


class AssetClass(Enum):
    """Asset class of a symbol."""
    EQUITY = "equity"
    OPTION = "option"
    CRYPTO = "crypto"
    FOREX = "forex"
    FUTURE = "future"
    INDEX = "index"
    CFD = "cfd"


class OptionRight(Enum):
    CALL = "C"
    PUT = "P"


@dataclass(frozen=True, slots=True)
class Symbol:
    """Instrument identifier independent of any broker's notation."""

    ticker: str
    asset_class: AssetClass
    market: str = "usa"
    underlying: str | None = None
    expiry: date | None = None
    right: OptionRight | None = None
    strike: Decimal | None = None

    @classmethod
    def equity(cls, ticker: str, market: str = "usa") -> Symbol:
        return cls(ticker.strip().upper(), AssetClass.EQUITY, market)

    @classmethod
    def crypto(cls, ticker: str, market: str = "alpaca") -> Symbol:
        return cls(ticker.strip().upper().replace("/", ""), AssetClass.CRYPTO, market)

    @classmethod
    def option(
        cls,
        underlying: str,
        right: OptionRight,
        strike: Decimal | float | str,
        expiry: date,
        market: str = "usa",
    ) -> Symbol:
        underlying = underlying.strip().upper()
        strike = Decimal(str(strike))
        ticker = f"{underlying} {expiry:%y%m%d}{right.value}{format(strike.normalize(), 'f')}"
        return cls(ticker, AssetClass.OPTION, market, underlying, expiry, right, strike)

    def __str__(self) -> str:
        return self.ticker


_ALPACA_OVERRIDES = {"BRK-B": "BRK.B", "BRK-A": "BRK.A", "BF-B": "BF.B"}
_ALPACA_REVERSE = {v: k for k, v in _ALPACA_OVERRIDES.items()}
_CRYPTO_QUOTES = ("USDT", "USDC", "USD", "BTC")
_OCC_RE = re.compile(r"^(?P<root>[A-Z][A-Z0-9.]{0,5})(?P<expiry>\d{6})(?P<right>[CP])(?P<strike>\d{8})$")


def to_alpaca_symbol(symbol: str) -> str:
    """Return an equity ticker normalized for Alpaca REST calls."""
    s = symbol.strip().upper()
    return _ALPACA_OVERRIDES.get(s, s)


class SymbolMapper:
    """Convert :class:`Symbol` objects to and from Alpaca identifiers."""

    supported = frozenset({AssetClass.EQUITY, AssetClass.OPTION, AssetClass.CRYPTO})

    def get_brokerage_symbol(self, symbol: Symbol) -> str:
        if symbol.asset_class is AssetClass.EQUITY:
            return to_alpaca_symbol(symbol.ticker)
        if symbol.asset_class is AssetClass.OPTION:
            return self._occ_symbol(symbol)
        if symbol.asset_class is AssetClass.CRYPTO:
            return self._crypto_pair(symbol.ticker)
        raise UnsupportedSymbolError(f"Asset class '{symbol.asset_class.value}' is not supported by Alpaca")

    def get_symbol(self, brokerage_symbol: str, asset_class: AssetClass) -> Symbol:
        """Return the :class:`Symbol` for an Alpaca identifier."""
        raw = brokerage_symbol.strip().upper()
        if asset_class is AssetClass.EQUITY:
            return Symbol.equity(_ALPACA_REVERSE.get(raw, raw))
        if asset_class is AssetClass.CRYPTO:
            return Symbol.crypto(raw)
        if asset_class is AssetClass.OPTION:
            m = _OCC_RE.match(raw)
            if not m:
                raise UnsupportedSymbolError(f"Not an OCC option symbol: {brokerage_symbol!r}")
            expiry = datetime.strptime(m["expiry"], "%y%m%d").date()
            strike = Decimal(m["strike"]) / 1000
            root = _ALPACA_REVERSE.get(m["root"], m["root"])
            return Symbol.option(root, OptionRight(m["right"]), strike, expiry)
        raise UnsupportedSymbolError(f"Asset class '{asset_class.value}' is not supported by Alpaca")

    @staticmethod
    def _occ_symbol(symbol: Symbol) -> str:
        if symbol.underlying is None or symbol.expiry is None or symbol.right is None or symbol.strike is None:
            raise UnsupportedSymbolError(f"Option symbol '{symbol}' is missing contract details")
        strike = int((Decimal(symbol.strike) * 1000).to_integral_value())
        return f"{to_alpaca_symbol(symbol.underlying)}{symbol.expiry:%y%m%d}{symbol.right.value}{strike:08d}"

    @staticmethod
    def _crypto_pair(ticker: str) -> str:
        if "/" in ticker:
            return ticker.upper()
        for quote in _CRYPTO_QUOTES:
            if ticker.endswith(quote) and len(ticker) > len(quote):
                return f"{ticker[: -len(quote)]}/{quote}"
        raise UnsupportedSymbolError(f"Cannot split crypto pair '{ticker}'")


__all__ = ["AssetClass", "OptionRight", "Symbol", "SymbolMapper", "to_alpaca_symbol"]
