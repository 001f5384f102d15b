"""Tests for the balance/price context and its snapshot swapping."""

from decimal import Decimal

import pytest

from cryptodeck.services.api import ApiError
from cryptodeck.sizing import BalanceAndPriceContext

from .fakes import TOKEN, FakeSource, holding, ticker


class TestReads:
    def test_price_from_feed(self, context):
        assert context.current_price("btcusdt") == Decimal("50000")

    def test_price_falls_back_to_holding(self, source, clock):
        source.tickers = []
        ctx = BalanceAndPriceContext(source, quote_asset="USDT", clock=clock)
        ctx.refresh(TOKEN)

        assert ctx.current_price("DOGEUSDT") == Decimal("0.2")

    def test_non_positive_or_missing_price_is_not_available(self, context):
        assert context.current_price("ZEROUSDT") is None
        assert context.current_price("NOPEUSDT") is None

    def test_free_balance(self, context):
        assert context.free_balance("USDT") == Decimal("1000")
        assert context.free_balance("btc") == Decimal("0.5")
        assert context.free_balance("ETH") == 0

    def test_empty_before_first_refresh(self, source, clock):
        ctx = BalanceAndPriceContext(source, quote_asset="USDT", clock=clock)
        assert ctx.holdings == ()
        assert ctx.tickers == ()
        assert ctx.current_price("BTCUSDT") is None


class TestRefresh:
    def test_refresh_returns_and_replaces_holdings(self, context, source):
        source.holdings = [holding("USDT", "10", price="1")]
        before = context.snapshot

        holdings = context.refresh(TOKEN)

        assert holdings == context.holdings
        assert [h.asset for h in holdings] == ["USDT"]
        assert context.snapshot is not before
        # the old snapshot object is left untouched
        assert len(before.holdings) == 3
        # prices are carried over from the previous snapshot
        assert context.tickers == before.tickers

    def test_failed_refresh_keeps_snapshot(self, context, source):
        before = context.snapshot
        source.error = ApiError("Failed to fetch portfolio", 500)

        with pytest.raises(ApiError):
            context.refresh(TOKEN)
        with pytest.raises(ApiError):
            context.refresh_prices()
        assert context.snapshot is before

    def test_token_is_passed_to_source(self, context, source):
        context.refresh("other-token")
        assert source.fetch_calls[-1] == "other-token"

    def test_listeners_get_the_new_snapshot(self, context, source):
        seen = []
        context.subscribe(seen.append)
        context.subscribe(seen.append)  # duplicates are ignored
        source.tickers = [ticker("BTCUSDT", "1")]

        context.refresh_prices()

        assert seen == [context.snapshot]
        context.unsubscribe(seen.append)
        context.refresh_prices()
        assert len(seen) == 1


class TestRefreshIfStale:
    def test_first_call_fetches_everything(self, clock):
        source = FakeSource(tickers=[ticker("BTCUSDT", "1")])
        ctx = BalanceAndPriceContext(source, quote_asset="USDT", clock=clock)

        assert ctx.refresh_if_stale(TOKEN, price_max_age=20, portfolio_max_age=60)
        assert source.price_calls == 1
        assert source.fetch_calls == [TOKEN]

    def test_two_clocks(self, clock):
        source = FakeSource()
        ctx = BalanceAndPriceContext(source, quote_asset="USDT", clock=clock)
        ctx.refresh_if_stale(TOKEN, price_max_age=20, portfolio_max_age=60)

        clock.now += 10
        assert not ctx.refresh_if_stale(TOKEN, price_max_age=20, portfolio_max_age=60)

        clock.now += 10
        assert ctx.refresh_if_stale(TOKEN, price_max_age=20, portfolio_max_age=60)
        assert source.price_calls == 2
        assert len(source.fetch_calls) == 1

        clock.now += 40
        ctx.refresh_if_stale(TOKEN, price_max_age=20, portfolio_max_age=60)
        assert source.price_calls == 3
        assert len(source.fetch_calls) == 2

    def test_portfolio_skipped_without_token(self, clock):
        source = FakeSource()
        ctx = BalanceAndPriceContext(source, quote_asset="USDT", clock=clock)

        ctx.refresh_if_stale(None, price_max_age=20, portfolio_max_age=60)

        assert source.price_calls == 1
        assert source.fetch_calls == []
