"""Tests for the REST wrapper – HTTP is replaced by canned ``requests.Response`` objects."""

import json
from decimal import Decimal
from unittest.mock import patch

import pytest
import requests

from cryptodeck.services import api
from cryptodeck.services.api import ApiError, RestOrderSink, RestPortfolioSource


def _response(status: int, body) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r._content = (body if isinstance(body, str) else json.dumps(body)).encode()
    r.encoding = "utf-8"
    return r


@pytest.fixture
def http():
    with patch.object(api.requests, "request") as mock_request:
        yield mock_request


class TestReads:
    def test_prices_are_decoded_as_decimals(self, http):
        http.return_value = _response(
            200, '{"prices": [{"symbol": "btcusdt", "price": 50000.12, "percent_change_24h": -1.5}]}'
        )

        [t] = api.get_prices()

        assert t.symbol == "BTCUSDT"
        assert t.price == Decimal("50000.12")
        assert t.percent_change_24h == Decimal("-1.5")
        method, url = http.call_args.args
        assert method == "GET"
        assert url.endswith("/crypto-prices")
        assert http.call_args.kwargs["headers"] == {}

    def test_bare_list_payload_is_accepted(self, http):
        http.return_value = _response(200, '[{"symbol": "ETHUSDT", "price": 2500.5}]')
        assert api.get_prices()[0].price == Decimal("2500.5")

    def test_portfolio_sends_bearer_token(self, http):
        http.return_value = _response(
            200,
            '{"portfolio": [{"asset": "BTC", "free": 0.1, "locked": 0.05, "total": 0.15,'
            ' "avg_buy_price": 40000, "current_price": 50000, "pnl": 1500, "pnl_percent": 25}]}',
        )

        [h] = api.get_portfolio("tok")

        assert http.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}
        assert h.total == Decimal("0.15")
        assert h.value == Decimal("7500.00")

    def test_transactions_frame(self, http):
        http.return_value = _response(200, {"transactions": [{"symbol": "BTCUSDT", "side": "BUY"}]})
        df = api.get_transactions("tok")
        assert df["symbol"].tolist() == ["BTCUSDT"]

    def test_unknown_shape_raises(self, http):
        http.return_value = _response(200, {"unexpected": True})
        with pytest.raises(ApiError, match="prices"):
            api.get_prices()


class TestOrders:
    def test_market_buy_payload(self, http):
        http.return_value = _response(200, {"orderId": 7})

        assert api.place_buy_order("tok", "BTCUSDT", Decimal("0.015000")) == {"orderId": 7}

        method, url = http.call_args.args
        assert method == "POST"
        assert url.endswith("/order/buy")
        assert http.call_args.kwargs["json"] == {
            "symbol": "BTCUSDT",
            "quantity": "0.015000",
            "order_type": "MARKET",
        }

    def test_limit_sell_payload(self, http):
        http.return_value = _response(200, {"orderId": 8})

        api.place_sell_order("tok", "ETHUSDT", Decimal("1.5"), Decimal("2600.10"))

        assert http.call_args.args[1].endswith("/order/sell")
        assert http.call_args.kwargs["json"] == {
            "symbol": "ETHUSDT",
            "quantity": "1.5",
            "order_type": "LIMIT",
            "price": "2600.10",
        }

    def test_backend_message_is_kept(self, http):
        http.return_value = _response(400, {"message": "Insufficient balance"})

        with pytest.raises(ApiError) as info:
            api.place_buy_order("tok", "BTCUSDT", Decimal("1"))

        assert str(info.value) == "Insufficient balance"
        assert info.value.status_code == 400
        assert info.value.detail == {"message": "Insufficient balance"}

    def test_fallback_message_without_body(self, http):
        http.return_value = _response(502, "")

        with pytest.raises(ApiError, match="Failed to place sell order") as info:
            api.place_sell_order("tok", "BTCUSDT", Decimal("1"))
        assert info.value.status_code == 502

    def test_connection_error_is_wrapped(self, http):
        http.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ApiError, match="Failed to fetch crypto prices") as info:
            api.get_prices()
        assert isinstance(info.value.__cause__, requests.ConnectionError)

    def test_adapters_delegate(self, http):
        http.return_value = _response(200, {"orderId": 9})
        RestOrderSink().place_sell("tok", "DOGEUSDT", Decimal("247"))
        assert http.call_args.kwargs["json"]["quantity"] == "247"

        http.return_value = _response(200, {"prices": []})
        assert RestPortfolioSource().fetch_prices() == []


class TestAuthAndChat:
    def test_login_returns_token(self, http):
        http.return_value = _response(200, {"user": {"token": "jwt"}})

        assert api.login("a@b.c", "pw") == "jwt"
        assert http.call_args.kwargs["json"] == {"email": "a@b.c", "password": "pw"}

    def test_login_without_token_fails(self, http):
        http.return_value = _response(200, {"user": {}})
        with pytest.raises(ApiError, match="no token"):
            api.login("a@b.c", "pw")

    def test_register_payload(self, http):
        http.return_value = _response(201, {"ok": True})

        api.register("Ada", "Lovelace", "ada@example.com", "pw")

        assert http.call_args.kwargs["json"] == {
            "name": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "password": "pw",
        }

    def test_chat_returns_reply(self, http):
        http.return_value = _response(200, {"response": "BTC looks bullish"})

        assert api.chat("tok", "what about btc?") == "BTC looks bullish"
        assert http.call_args.kwargs["json"] == {"input": "what about btc?"}

    def test_chat_error_uses_backend_error_field(self, http):
        http.return_value = _response(500, {"error": "model offline"})
        with pytest.raises(ApiError, match="model offline"):
            api.chat(None, "hi")
