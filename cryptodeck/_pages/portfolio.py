"""portfolio.py

Streamlit page that visualises the **current portfolio** returned by the
trading back-end.

Main features
-------------
* Headline metrics: total value, cost basis and profit/loss.
* Interactive **donut-pie chart** grouping assets below 1 % into a single
  *Other* slice so the legend stays readable.
* Sortable table with per-asset P&L, and the transaction history below it.
"""

# Standard library -------------------------------------------------------------
from __future__ import annotations

# Third‑party ------------------------------------------------------------------
import plotly.express as px
import streamlit as st

# First‑party / project --------------------------------------------------------
from cryptodeck.config import settings
from cryptodeck.services.api import ApiError, get_transactions
from cryptodeck.sizing import holdings_frame, summarize
from ._helpers import (
    _format_significant_float,
    auth_token,
    fmt_cash,
    fmt_percent,
    get_context,
    refresh_market_data,
)

LIM_MIN_SHARE = 0.01  # slices below 1 % go to "Other"

# -----------------------------------------------------------------------------
# Page renderer
# -----------------------------------------------------------------------------

def render() -> None:  # noqa: D401 – imperative mood is fine
    """Entry‑point for Streamlit – draw the **Portfolio** page.

    Workflow
    --------
    1. Read the holdings from the shared context (refreshed by the
       entry-point on the portfolio clock; a button forces a refresh).
    2. Show value / cost / P&L computed by ``summarize``.
    3. Plot a donut chart, collapsing slices < 1 % into **Other**.
    4. Render the holdings table and the transaction history.
    """
    st.title("Portfolio")
    token = auth_token()
    if not token:
        st.info("Log in to see your portfolio.")
        return

    if st.button("↻ Refresh"):
        refresh_market_data(force=True)

    quote = settings()["QUOTE_ASSET"]
    holdings = get_context().holdings
    if not holdings:
        st.info("No assets found.")
        return

    # ------------------------------------------------------------------
    # 1) Headline metrics
    # ------------------------------------------------------------------
    totals = summarize(holdings)
    col_value, col_cost, col_pnl = st.columns(3)
    col_value.metric("Total value", fmt_cash(totals.total_value, quote))
    col_cost.metric("Cost basis", fmt_cash(totals.total_cost, quote))
    label = "📈 Profit" if totals.total_profit >= 0 else "📉 Loss"
    col_pnl.metric(label, fmt_cash(totals.total_profit, quote), fmt_percent(totals.profit_percent))

    # ------------------------------------------------------------------
    # 2) Donut pie chart (group assets < 1 % into "Other")
    # ------------------------------------------------------------------
    df = holdings_frame(holdings)
    major = df[df["share"] >= LIM_MIN_SHARE]
    other = df.loc[df["share"] < LIM_MIN_SHARE, "value"].sum()

    pie_df = major[["asset", "value"]].reset_index(drop=True)
    if other > 0:
        # Append the "Other" slice as a synthetic row
        pie_df.loc[len(pie_df)] = {"asset": "Other", "value": other}

    if pie_df["value"].sum() > 0:
        fig = px.pie(pie_df, names="asset", values="value", hole=0.4)
        fig.update_layout(autosize=True, height=500, margin=dict(t=40, b=40, l=40, r=40))
        st.plotly_chart(fig, use_container_width=True)

    # ------------------------------------------------------------------
    # 3) Pretty table below the chart
    # ------------------------------------------------------------------
    fmt_amt = lambda x: _format_significant_float(x)  # noqa: E731
    fmt_val = lambda x: _format_significant_float(x, quote)  # noqa: E731

    df_disp = df.copy()
    for col in ("free", "locked", "total"):
        df_disp[col] = df[col].map(fmt_amt)
    for col in ("avg_buy_price", "current_price", "value", "pnl"):
        df_disp[col] = df[col].map(fmt_val)
    df_disp["pnl_percent"] = df["pnl_percent"].map(lambda x: f"{x:+.2f}%")
    df_disp["share"] = df["share"].map(lambda x: f"{x*100:,.2f}%")

    # Dynamic height: ~35 px per row, but cap at 800 px for usability.
    height_calc = min(35 * (1 + len(df_disp)) + 5, 800)
    st.dataframe(
        df_disp,
        hide_index=True,
        use_container_width=True,
        height=height_calc,
        column_config={
            "asset": st.column_config.TextColumn("Asset"),
            "free": st.column_config.TextColumn("Free"),
            "locked": st.column_config.TextColumn("In orders"),
            "total": st.column_config.TextColumn("Total"),
            "avg_buy_price": st.column_config.TextColumn("Avg buy"),
            "current_price": st.column_config.TextColumn(f"Price ({quote})"),
            "value": st.column_config.TextColumn(f"Value ({quote})"),
            "pnl": st.column_config.TextColumn("PnL"),
            "pnl_percent": st.column_config.TextColumn("PnL (%)"),
            "share": st.column_config.TextColumn("Share (%)"),
        },
    )

    # ------------------------------------------------------------------
    # 4) Transaction history
    # ------------------------------------------------------------------
    with st.expander("Transactions", expanded=False):
        try:
            tx = get_transactions(token)
        except ApiError as exc:
            st.error(f"Failed to fetch transactions: {exc}")
        else:
            if tx.empty:
                st.info("No transactions yet.")
            else:
                st.dataframe(tx, hide_index=True, use_container_width=True)
