"""Shared fixtures for the sizing core tests (fakes live in ``tests.fakes``)."""

from __future__ import annotations

import pytest

from cryptodeck.sizing import BalanceAndPriceContext, OrderSizingController, OrderSubmissionGateway

from .fakes import TOKEN, FakeClock, FakeSink, FakeSource, holding, ticker


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source():
    return FakeSource(
        holdings=[
            holding("USDT", "1000", price="1", avg="1"),
            holding("BTC", "0.5", price="50000", avg="40000"),
            holding("DOGE", "500", price="0.2", avg="0.25"),
        ],
        tickers=[
            ticker("BTCUSDT", "50000", "2.5"),
            ticker("ETHUSDT", "2500", "-1.2"),
            ticker("DOGEUSDT", "0.2", "7.1"),
            ticker("ZEROUSDT", "0"),
        ],
    )


@pytest.fixture
def context(source, clock):
    ctx = BalanceAndPriceContext(source, quote_asset="USDT", clock=clock)
    ctx.refresh(TOKEN)
    ctx.refresh_prices()
    return ctx


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def controller(sink):
    return OrderSizingController(OrderSubmissionGateway(sink))
