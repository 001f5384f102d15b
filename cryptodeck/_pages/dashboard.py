"""dashboard.py

Live ticker board: top gainers and losers of the last 24h. Data comes from
the shared context, which the entry-point refreshes on the price clock.
"""

from __future__ import annotations

import streamlit as st

from cryptodeck.config import settings
from ._helpers import get_context, split_movers, tickers_frame

N_MOVERS = 6


def _movers_table(title: str, tickers) -> None:
    st.subheader(title)
    df = tickers_frame(tickers)
    st.dataframe(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            "symbol": st.column_config.TextColumn("Symbol"),
            "price": st.column_config.NumberColumn(f"Price ({settings()['QUOTE_ASSET']})", format="%.4f"),
            "change": st.column_config.NumberColumn("24h", format="%+.2f%%"),
        },
    )


def render() -> None:
    st.title("Market")
    tickers = get_context().tickers
    if not tickers:
        st.info("No prices available yet.")
        return

    gainers, losers = split_movers(tickers, N_MOVERS)
    left, right = st.columns(2)
    with left:
        _movers_table("▲ Top gainers", gainers)
    with right:
        _movers_table("▼ Top losers", losers)
