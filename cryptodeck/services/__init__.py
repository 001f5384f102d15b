"""Public service API."""
from .api import (
    ApiError,
    RestOrderSink,
    RestPortfolioSource,
    get_portfolio,
    get_prices,
    login,
)
from .model import Ack, HoldingSnapshot, OrderKind, OrderRequest, Side, SizingSession, Ticker

__all__ = [
    "ApiError",
    "RestOrderSink",
    "RestPortfolioSource",
    "get_portfolio",
    "get_prices",
    "login",
    "Ack",
    "HoldingSnapshot",
    "OrderKind",
    "OrderRequest",
    "Side",
    "SizingSession",
    "Ticker",
]
