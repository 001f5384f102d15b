"""Tests for the order submission gateway."""

from decimal import Decimal

import pytest

from cryptodeck.services.api import ApiError
from cryptodeck.services.model import OrderKind, OrderRequest, Side
from cryptodeck.sizing import OrderSubmissionGateway, SubmissionError

from .fakes import TOKEN, FakeSink


def _request(side=Side.BUY, **kwargs):
    return OrderRequest(symbol="ETHUSDT", quantity=Decimal("0.25"), side=side, **kwargs)


def test_buy_is_dispatched_to_place_buy():
    sink = FakeSink()
    ack = OrderSubmissionGateway(sink).submit(_request(), TOKEN)

    assert sink.calls == [("BUY", TOKEN, "ETHUSDT", Decimal("0.25"), None)]
    assert ack.side is Side.BUY
    assert ack.payload["status"] == "FILLED"


def test_sell_limit_is_dispatched_with_price():
    sink = FakeSink()
    request = _request(Side.SELL, kind=OrderKind.LIMIT, limit_price=Decimal("2600"))

    OrderSubmissionGateway(sink).submit(request, TOKEN)

    assert sink.calls == [("SELL", TOKEN, "ETHUSDT", Decimal("0.25"), Decimal("2600"))]


def test_failure_is_reported_verbatim_without_retry():
    detail = {"message": "Account has insufficient balance for requested action."}
    sink = FakeSink(error=ApiError(detail["message"], 400, detail))

    with pytest.raises(SubmissionError) as info:
        OrderSubmissionGateway(sink).submit(_request(), TOKEN)

    assert str(info.value) == detail["message"]
    assert info.value.detail == detail
    assert isinstance(info.value.__cause__, ApiError)
    assert len(sink.calls) == 1


def test_unexpected_sink_errors_are_wrapped_too():
    sink = FakeSink(error=ConnectionError())

    with pytest.raises(SubmissionError, match="ConnectionError"):
        OrderSubmissionGateway(sink).submit(_request(), TOKEN)


class TestOrderRequest:
    def test_quantity_must_be_positive(self):
        with pytest.raises(ValueError):
            OrderRequest(symbol="ETHUSDT", quantity=Decimal("0"), side=Side.BUY)

    def test_limit_requires_price(self):
        with pytest.raises(ValueError):
            _request(kind=OrderKind.LIMIT)
