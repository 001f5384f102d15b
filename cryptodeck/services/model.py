"""model.py

Pydantic **domain models** shared by the sizing core, the REST client and
the Streamlit pages.

The read-side models (``Ticker``, ``HoldingSnapshot``) mirror the JSON
payloads served by the assistant backend; the write-side models
(``OrderRequest``, ``Ack``) are what the order gateway exchanges with it.
Every amount is a :class:`~decimal.Decimal` so quantities never pass through
a binary float on their way to the exchange.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

# Third-party
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ZERO = Decimal("0")

# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class Side(str, Enum):
    """Order direction – fixed for the lifetime of a sizing session."""

    BUY = "BUY"
    SELL = "SELL"


class OrderKind(str, Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"


# -----------------------------------------------------------------------------
# Market data & portfolio models (read side)
# -----------------------------------------------------------------------------

class Ticker(BaseModel):
    """Single row of the `/crypto-prices` feed."""

    model_config = ConfigDict(frozen=True)

    symbol: str                                  # e.g. "BTCUSDT"
    price: Decimal                               # last price in quote asset
    percent_change_24h: Decimal = ZERO

    @field_validator("symbol")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


class HoldingSnapshot(BaseModel):
    """One asset row of `/order/portfolio`.

    A refresh replaces the whole list; rows are never patched in place,
    hence ``frozen``.
    """

    model_config = ConfigDict(frozen=True)

    asset: str                     # e.g. "BTC" (no quote suffix)
    free: Decimal = ZERO           # immediately available amount
    locked: Decimal = ZERO         # frozen on open orders
    total: Decimal = ZERO          # free + locked (server side)
    avg_buy_price: Decimal = ZERO
    current_price: Decimal = ZERO  # last price in quote asset
    pnl: Decimal = ZERO            # unrealised P&L in quote asset
    pnl_percent: Decimal = ZERO

    @model_validator(mode="before")
    @classmethod
    def _derive_total(cls, data: Any) -> Any:
        # Some backends omit `total` – derive it from free + locked
        if isinstance(data, dict) and data.get("total") is None and "free" in data:
            data = {**data, "total": Decimal(str(data["free"])) + Decimal(str(data.get("locked") or 0))}
        return data

    @field_validator("asset")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def value(self) -> Decimal:
        """Market value in **quote asset**."""
        return self.total * self.current_price

    @property
    def cost(self) -> Decimal:
        return self.avg_buy_price * self.total


class PortfolioTotals(BaseModel):
    """Portfolio-level figures derived from a holdings snapshot."""

    model_config = ConfigDict(frozen=True)

    total_value: Decimal
    total_cost: Decimal
    total_profit: Decimal
    profit_percent: Decimal


# -----------------------------------------------------------------------------
# Order models (write side)
# -----------------------------------------------------------------------------

class OrderRequest(BaseModel):
    """What the gateway sends – built at confirm time, never persisted."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    quantity: Decimal = Field(gt=0)
    side: Side
    kind: OrderKind = OrderKind.MARKET
    limit_price: Optional[Decimal] = None

    @model_validator(mode="after")
    def _limit_needs_price(self) -> "OrderRequest":
        if self.kind is OrderKind.LIMIT and self.limit_price is None:
            raise ValueError("LIMIT orders require a limit_price")
        if self.limit_price is not None and self.limit_price <= 0:
            raise ValueError("limit_price must be positive")
        return self


class Ack(BaseModel):
    """Backend acknowledgement; ``payload`` is kept opaque."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    side: Side
    payload: Any = None


# -----------------------------------------------------------------------------
# Sizing session (mutable dialog state)
# -----------------------------------------------------------------------------

class SizingSession(BaseModel):
    """State of one open buy/sell dialog.

    Only :class:`~cryptodeck.sizing.controller.OrderSizingController`
    mutates it; pages read it to render the dialog.
    """

    symbol: str
    side: Side
    raw_quantity_text: str = ""     # exactly what the user sees / typed
    quantity: Decimal = ZERO        # committed quantity in base asset
    notional: Decimal = ZERO        # quantity × price in quote asset
    ceiling: Decimal = ZERO         # max quantity for the current balance
    price: Decimal = ZERO           # last usable price seen by the session
    custom_price: Optional[Decimal] = None
    slider_value: Optional[Decimal] = None  # last intermediate slider event

    @property
    def order_kind(self) -> OrderKind:
        return OrderKind.LIMIT if self.custom_price is not None else OrderKind.MARKET
