"""portfolio.py

Portfolio-level figures derived from a holdings snapshot.

Pure functions – called again on every snapshot change rather than kept in
sync incrementally.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import pandas as pd

from cryptodeck.services.model import HoldingSnapshot, PortfolioTotals

ZERO = Decimal("0")
HUNDRED = Decimal("100")

FRAME_COLUMNS = [
    "asset",
    "free",
    "locked",
    "total",
    "avg_buy_price",
    "current_price",
    "value",
    "pnl",
    "pnl_percent",
    "share",
]


def summarize(holdings: Iterable[HoldingSnapshot]) -> PortfolioTotals:
    """Total value, cost basis and P&L of *holdings*.

    ``profit_percent`` is relative to the cost basis and is 0 when nothing
    was bought (e.g. a deposit-only account).
    """
    holdings = list(holdings)
    total_value = sum((h.total * h.current_price for h in holdings), ZERO)
    total_cost = sum((h.avg_buy_price * h.total for h in holdings), ZERO)
    total_profit = total_value - total_cost
    profit_percent = total_profit / total_cost * HUNDRED if total_cost else ZERO
    return PortfolioTotals(
        total_value=total_value,
        total_cost=total_cost,
        total_profit=total_profit,
        profit_percent=profit_percent,
    )


def holdings_frame(holdings: Iterable[HoldingSnapshot]) -> pd.DataFrame:
    """Table for the portfolio page, biggest position first.

    Amounts are converted to ``float`` here – this frame is for display and
    plotting only, never for order sizing.
    """
    rows = [
        {
            "asset": h.asset,
            "free": float(h.free),
            "locked": float(h.locked),
            "total": float(h.total),
            "avg_buy_price": float(h.avg_buy_price),
            "current_price": float(h.current_price),
            "value": float(h.value),
            "pnl": float(h.pnl),
            "pnl_percent": float(h.pnl_percent),
        }
        for h in holdings
    ]
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    df = pd.DataFrame(rows)
    total_value = df["value"].sum()
    # Portfolio share (0‑1) keeps it numeric for later math / formatting.
    df["share"] = df["value"] / total_value if total_value else 0.0
    return df.sort_values("value", ascending=False).reset_index(drop=True)[FRAME_COLUMNS]
