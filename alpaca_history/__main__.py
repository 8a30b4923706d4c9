"""Command line entry point: ``python -m alpaca_history``."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from alpaca_history.config import Settings
from alpaca_history.data.client import AlpacaHistoricalClient
from alpaca_history.data.models import HistoryRequest
from alpaca_history.exc import COMMON_EXC, APIError, UnsupportedSymbolError, api_error_message
from alpaca_history.frames import records_to_frame
from alpaca_history.history import AlpacaHistoryProvider
from alpaca_history.logging import configure_logging, get_logger
from alpaca_history.market.hours import hours_for
from alpaca_history.market.symbols import AssetClass, Symbol, SymbolMapper
from alpaca_history.messages import LoggingMessageSink, RecordingMessageSink
from alpaca_history.timeframe import Resolution, TickType
from alpaca_history.timeutils import ensure_utc_datetime

logger = get_logger(__name__)

__all__ = ["build_parser", "build_symbol", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alpaca_history",
        description="Download historical Alpaca market data as CSV",
    )
    parser.add_argument("symbol", help="Ticker, OCC option symbol or crypto pair (BTC/USD)")
    parser.add_argument(
        "--asset-class",
        choices=[a.value for a in AssetClass],
        default=AssetClass.EQUITY.value,
    )
    parser.add_argument("--tick-type", choices=[t.value for t in TickType], default=TickType.TRADE.value)
    parser.add_argument("--resolution", choices=[r.value for r in Resolution], default=Resolution.MINUTE.value)
    parser.add_argument("--start", required=True, help="ISO-8601 start (UTC when no offset is given)")
    parser.add_argument("--end", required=True, help="ISO-8601 end (UTC when no offset is given)")
    parser.add_argument("--extended", action="store_true", help="Include pre and post market sessions")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument("--output", "-o", default=None, help="CSV path; stdout when omitted")
    return parser


def build_symbol(raw: str, asset_class: AssetClass, mapper: SymbolMapper | None = None) -> Symbol:
    """Return the :class:`Symbol` for a command line identifier."""
    mapper = mapper or SymbolMapper()
    if asset_class in mapper.supported:
        return mapper.get_symbol(raw, asset_class)
    return Symbol(raw.strip().upper(), asset_class)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"invalid configuration: {exc}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level, json_logs=args.json_logs)

    asset_class = AssetClass(args.asset_class)
    try:
        symbol = build_symbol(args.symbol, asset_class)
        request = HistoryRequest(
            symbol=symbol,
            resolution=Resolution.parse(args.resolution),
            tick_type=TickType.parse(args.tick_type),
            start_utc=ensure_utc_datetime(args.start),
            end_utc=ensure_utc_datetime(args.end),
            exchange_hours=hours_for(asset_class, settings.market_calendar),
            include_extended_market_hours=args.extended,
        )
    except (UnsupportedSymbolError, ValueError) as exc:
        logger.error("HISTORY_CLI_BAD_REQUEST", extra={"detail": str(exc)})
        return 2

    sink = RecordingMessageSink(forward=LoggingMessageSink())
    provider = AlpacaHistoryProvider(AlpacaHistoricalClient(settings), message_sink=sink, settings=settings)
    try:
        records = provider.get_history(request)
        if records is None:
            logger.warning("HISTORY_CLI_NO_DATA", extra={"symbol": str(symbol), "codes": sink.codes()})
            return 1
        frame = records_to_frame(records)
    except APIError as exc:
        logger.error("HISTORY_CLI_PROVIDER_ERROR", extra={"detail": api_error_message(exc)})
        return 2
    except COMMON_EXC as exc:
        logger.error("HISTORY_CLI_FAILED", extra={"cause": exc.__class__.__name__, "detail": str(exc)}, exc_info=True)
        return 2

    if args.output:
        frame.to_csv(args.output)
    else:
        frame.to_csv(sys.stdout)
    logger.info("HISTORY_CLI_DONE", extra={"symbol": str(symbol), "rows": len(frame), "warnings": sink.codes()})
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
