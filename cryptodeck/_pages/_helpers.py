"""_helpers.py

Utility helpers shared by multiple Streamlit pages.

The module groups three kinds of helpers:

1. **Per-user objects** – the auth token, the balance/price context and the
   sizing controller live in ``st.session_state`` so every page of one
   browser session shares them (and nothing leaks between users).
2. **Formatting helpers** – e.g. `_format_significant_float` for prices and
   `fmt_cash` for cash amounts.
3. **Market helpers** – `split_movers` picks top gainers / losers for the
   dashboard.
"""

from __future__ import annotations

# Standard library ------------------------------------------------------------
import logging
import math
import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable
from zoneinfo import ZoneInfo

# Third-party -----------------------------------------------------------------
import pandas as pd
import streamlit as st

# Project ---------------------------------------------------------------------
from cryptodeck.services.api import ApiError, RestOrderSink, RestPortfolioSource
from cryptodeck.services.model import Ticker
from cryptodeck.sizing import BalanceAndPriceContext, OrderSizingController, OrderSubmissionGateway

log = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# 0) Per-user state kept in st.session_state
# -----------------------------------------------------------------------------
TOKEN_KEY = "auth_token"
CONTEXT_KEY = "market_context"
CONTROLLER_KEY = "sizing_controller"
FLASH_KEY = "flash"


def auth_token() -> str | None:
    """Bearer token of the logged-in user (``None`` when logged out)."""
    return st.session_state.get(TOKEN_KEY)


def set_auth_token(token: str | None) -> None:
    if token:
        st.session_state[TOKEN_KEY] = token
        return
    # Logged out: holdings and any open dialog belonged to the previous user
    for key in (TOKEN_KEY, CONTEXT_KEY, CONTROLLER_KEY):
        st.session_state.pop(key, None)


def get_context() -> BalanceAndPriceContext:
    if CONTEXT_KEY not in st.session_state:
        st.session_state[CONTEXT_KEY] = BalanceAndPriceContext(RestPortfolioSource())
    return st.session_state[CONTEXT_KEY]


def get_controller() -> OrderSizingController:
    if CONTROLLER_KEY not in st.session_state:
        gateway = OrderSubmissionGateway(RestOrderSink())
        st.session_state[CONTROLLER_KEY] = OrderSizingController(gateway)
    return st.session_state[CONTROLLER_KEY]


def refresh_market_data(force: bool = False) -> None:
    """Refresh prices / portfolio when due (or now if *force*); alerts on failure."""
    context = get_context()
    token = auth_token()
    try:
        if force:
            context.refresh_prices()
            if token:
                context.refresh(token)
        else:
            context.refresh_if_stale(token)
    except ApiError as exc:
        log.warning("Market data refresh failed: %s", exc)
        st.error(f"Failed to refresh market data: {exc}")


def flash(kind: str, message: str) -> None:
    """Queue a message for the next rerun (``kind`` = success / error / info)."""
    st.session_state[FLASH_KEY] = (kind, message)


def show_flash() -> None:
    kind, message = st.session_state.pop(FLASH_KEY, (None, None))
    if kind:
        getattr(st, kind)(message)


# -----------------------------------------------------------------------------
# 1) Formatting helpers
# -----------------------------------------------------------------------------

LOCAL_TZ_str = os.getenv("LOCAL_TZ", "UTC")  # e.g. "Europe/Berlin"
LOCAL_TZ = ZoneInfo(LOCAL_TZ_str)
TS_FMT = "%d/%m %H:%M:%S"  # Timestamp format for human-readable dates
ZERO_DISPLAY = "--"  # Default display for zero values

fmt_percent = lambda v: f"{v:+.2f}%"  # noqa: E731
fmt_side_marker = lambda side: {"BUY": "↗ BUY", "SELL": "↘ SELL"}[str(side).upper()]  # noqa: E731


def convert_to_local_time(ts: datetime, fmt: str = TS_FMT) -> str:
    """Format a datetime in the user's local time zone (naive = UTC)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(LOCAL_TZ).strftime(fmt)


def _format_significant_float(value: float | Decimal | int | None, unity: str | None = None) -> str:
    """
    Format a number into a human-readable string with dynamic precision.

    - For absolute values >= 1: thousands separator and 2 decimal places.
      Example:  1234.6565  → "1,234.66"
    - For absolute values < 1: keeps leading zeros and shows the first 2
      significant digits.
      Example:  0.006565   → "0.0066"
    - Zero / missing values render as ``ZERO_DISPLAY``.

    Args:
        value: The number to format.
        unity: Optional unit/currency suffix (e.g., "USDT").
    """
    if value is None or pd.isna(value) or value == 0:
        return ZERO_DISPLAY

    value = float(value)
    is_negative = value < 0
    abs_value = abs(value)

    if abs_value >= 1:
        formatted = f"{abs_value:,.2f}"
    else:
        # floor(log10(abs_value)) is the exponent of the leading sig‑digit.
        exp = math.floor(math.log10(abs_value))
        decimals = 2 - exp - 1
        formatted = f"{round(abs_value, decimals):.{decimals}f}"

    if is_negative:
        formatted = "-" + formatted
    if unity:
        formatted += f" {unity}"
    return formatted


def fmt_cash(value: float | Decimal, cash_asset: str) -> str:
    """Signed-aware cash amount with 2 decimals (``-1,234.50 USDT``)."""
    return f"{float(value):,.2f} {cash_asset}"


# -----------------------------------------------------------------------------
# 2) Market helpers
# -----------------------------------------------------------------------------

def split_movers(tickers: Iterable[Ticker], n: int = 6) -> tuple[list[Ticker], list[Ticker]]:
    """Return ``(top_gainers, top_losers)`` by 24h change.

    Gainers are sorted best first, losers worst first. With fewer than
    ``2 * n`` tickers the two lists overlap.
    """
    ranked = sorted(tickers, key=lambda t: t.percent_change_24h, reverse=True)
    if n <= 0:
        return [], []
    return ranked[:n], list(reversed(ranked[-n:]))


def tickers_frame(tickers: Iterable[Ticker]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "symbol": t.symbol,
                "price": float(t.price),
                "change": float(t.percent_change_24h),
            }
            for t in tickers
        ],
        columns=["symbol", "price", "change"],
    )
