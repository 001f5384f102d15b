"""Order-sizing core: step sizes, balance/price context, the sizing state
machine, order submission and portfolio totals."""
from .context import BalanceAndPriceContext, MarketSnapshot, PortfolioSource
from .controller import OrderSizingController, SessionState, parse_amount
from .errors import (
    InvalidQuantity,
    SessionClosed,
    SizingError,
    SubmissionError,
    Unauthenticated,
    UnpricedSymbol,
)
from .gateway import OrderSink, OrderSubmissionGateway
from .portfolio import holdings_frame, summarize
from .step_size import StepSizeResolver, display_places, floor_to_step, format_quantity

__all__ = [
    "BalanceAndPriceContext",
    "MarketSnapshot",
    "PortfolioSource",
    "OrderSizingController",
    "SessionState",
    "parse_amount",
    "InvalidQuantity",
    "SessionClosed",
    "SizingError",
    "SubmissionError",
    "Unauthenticated",
    "UnpricedSymbol",
    "OrderSink",
    "OrderSubmissionGateway",
    "holdings_frame",
    "summarize",
    "StepSizeResolver",
    "display_places",
    "floor_to_step",
    "format_quantity",
]
