from __future__ import annotations

import logging

import pandas as pd
import pytest

import alpaca_history.__main__ as cli
import alpaca_history.logging as pkg_logging
from alpaca_history.market.symbols import AssetClass, Symbol

BARS = [
    {"t": "2024-06-17T13:30:00Z", "o": 66000, "h": 66010, "l": 65990, "c": 66005, "v": 1.5},
    {"t": "2024-06-17T13:31:00Z", "o": 66005, "h": 66020, "l": 66000, "c": 66015, "v": 0.5},
]

WINDOW = ["--start", "2024-06-17T13:30:00Z", "--end", "2024-06-17T14:00:00Z"]


@pytest.fixture(autouse=True)
def _restore_package_logger(monkeypatch):
    base = logging.getLogger("alpaca_history")
    handlers, level = list(base.handlers), base.level
    monkeypatch.setattr(pkg_logging, "_LOGGING_CONFIGURED", False)
    yield
    base.handlers[:] = handlers
    base.setLevel(level)


@pytest.fixture
def install_client(monkeypatch, fake_client_cls):
    def _install(**scripts):
        client = fake_client_cls(**scripts)
        monkeypatch.setattr(cli, "AlpacaHistoricalClient", lambda settings: client)
        return client

    return _install


def test_crypto_bars_to_csv(install_client, page, tmp_path):
    client = install_client(bars=[page("BTC/USD", BARS)])
    out = tmp_path / "btc.csv"

    rc = cli.main(["BTC/USD", "--asset-class", "crypto", "--resolution", "minute", *WINDOW, "--output", str(out)])

    assert rc == 0
    df = pd.read_csv(out, index_col="time")
    assert df["close"].tolist() == [66005.0, 66015.0]
    assert (df["symbol"] == "BTCUSD").all()
    assert client.requests[0].symbol == "BTC/USD"


def test_unsupported_asset_class_exits_one(install_client):
    client = install_client()

    rc = cli.main(["EURUSD", "--asset-class", "forex", *WINDOW])

    assert rc == 1
    assert client.calls == []


@pytest.mark.parametrize(
    "argv",
    [
        ["AAPL", "--asset-class", "option", *WINDOW],
        ["AAPL", "--start", "not-a-date", "--end", "2024-06-17T14:00:00Z"],
    ],
)
def test_bad_requests_exit_two(install_client, argv):
    install_client()

    assert cli.main(argv) == 2


def test_provider_error_exits_two(install_client, provider_error):
    install_client(bars=[provider_error("forbidden.")])

    rc = cli.main(["BTC/USD", "--asset-class", "crypto", *WINDOW])

    assert rc == 2


def test_build_symbol():
    assert cli.build_symbol("brk.b", AssetClass.EQUITY) == Symbol.equity("BRK-B")
    assert cli.build_symbol("eurusd", AssetClass.FOREX) == Symbol("EURUSD", AssetClass.FOREX)
