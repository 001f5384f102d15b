"""gateway.py

One order request in, one acknowledgement (or one error) out.

The gateway never retries and never interprets the back-end's response
beyond success/failure – the payload is handed back untouched in
:class:`~cryptodeck.services.model.Ack`.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional, Protocol

from cryptodeck.services.model import Ack, OrderRequest, Side

from .errors import SubmissionError

log = logging.getLogger(__name__)


class OrderSink(Protocol):
    def place_buy(
        self, auth_token: str, symbol: str, quantity: Decimal, limit_price: Optional[Decimal] = None
    ) -> Any: ...

    def place_sell(
        self, auth_token: str, symbol: str, quantity: Decimal, limit_price: Optional[Decimal] = None
    ) -> Any: ...


class OrderSubmissionGateway:
    def __init__(self, sink: OrderSink):
        self._sink = sink

    def submit(self, request: OrderRequest, auth_token: str) -> Ack:
        """Place *request* once.

        Raises
        ------
        SubmissionError
            Whatever the sink raised, with its message and ``detail`` kept.
        """
        place = self._sink.place_buy if request.side is Side.BUY else self._sink.place_sell
        try:
            payload = place(auth_token, request.symbol, request.quantity, request.limit_price)
        except Exception as exc:  # noqa: BLE001 – any sink failure is a submission failure
            log.warning("%s %s rejected: %s", request.side.value, request.symbol, exc)
            raise SubmissionError(str(exc) or type(exc).__name__, detail=getattr(exc, "detail", None)) from exc
        log.info("%s %s qty=%s accepted", request.side.value, request.symbol, request.quantity)
        return Ack(symbol=request.symbol, side=request.side, payload=payload)
