"""trade.py

Manual buy/sell page.

The dialog is a thin view over :class:`~cryptodeck.sizing.OrderSizingController`:
widget callbacks forward slider releases, typed amounts and the optional
limit price to the controller, and the widgets are re-seeded from the
session after each change. Streamlit only reports a slider value on
release, which is exactly the commit event the controller expects.
"""

from __future__ import annotations

import streamlit as st

from cryptodeck.config import settings
from cryptodeck.services.model import Side
from cryptodeck.sizing import InvalidQuantity, SizingError, UnpricedSymbol
from cryptodeck.sizing.symbols import pair_symbol
from ._helpers import (
    _format_significant_float,
    auth_token,
    flash,
    fmt_side_marker,
    get_context,
    get_controller,
    refresh_market_data,
    show_flash,
)

QTY_KEY = "trade_qty_text"
SLIDER_KEY = "trade_qty_slider"
PRICE_KEY = "trade_limit_price"

# -----------------------------------------------------------------------------
# Widget callbacks
# -----------------------------------------------------------------------------

def _open(symbol: str, side: Side) -> None:
    try:
        session = get_controller().open(symbol, side, get_context())
    except UnpricedSymbol as exc:
        flash("error", str(exc))
        return
    st.session_state[QTY_KEY] = session.raw_quantity_text
    st.session_state[SLIDER_KEY] = float(session.quantity)
    st.session_state[PRICE_KEY] = ""


def _on_slider() -> None:
    controller = get_controller()
    session = controller.session
    if session is None:
        return
    controller.commit_slider(session, st.session_state[SLIDER_KEY])
    st.session_state[QTY_KEY] = session.raw_quantity_text


def _on_text() -> None:
    controller = get_controller()
    if controller.session is not None:
        controller.set_from_text(controller.session, st.session_state[QTY_KEY])


def _on_price() -> None:
    controller = get_controller()
    if controller.session is not None:
        controller.set_custom_price(controller.session, st.session_state[PRICE_KEY])


def _confirm() -> None:
    controller = get_controller()
    session = controller.session
    if session is None:
        return
    label = session.side.value.title()
    token = auth_token()
    try:
        ack = controller.submit(session, token)
    except InvalidQuantity as exc:
        # Dialog stays open so the user can fix the amount
        flash("error", str(exc))
        return
    except SizingError as exc:
        flash("error", f"{label} failed: {exc}")
    else:
        flash("success", f"{label} order placed for {ack.symbol}")
    # Whatever happened, only a re-fetch tells us the true balances
    if token:
        refresh_market_data(force=True)


def _cancel() -> None:
    controller = get_controller()
    if controller.session is not None:
        controller.cancel(controller.session)


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------

def _symbols() -> list[str]:
    context = get_context()
    quote = context.quote_asset
    symbols = {t.symbol for t in context.tickers}
    symbols.update(pair_symbol(h.asset, quote) for h in context.holdings if h.asset != quote)
    return sorted(symbols)


def _render_dialog() -> None:
    controller = get_controller()
    session = controller.session
    quote = get_context().quote_asset
    step = controller.step_size(session)

    with st.container(border=True):
        st.subheader(f"{fmt_side_marker(session.side.value)} {session.symbol}")
        st.caption(
            f"Price {_format_significant_float(session.price, quote)} · "
            f"max {_format_significant_float(session.ceiling)} · step {step}"
        )
        st.markdown(f"**Amount:** {session.raw_quantity_text} ({session.notional:,.2f} {quote})")

        ceiling = float(session.ceiling)
        if ceiling > 0:
            # Keep the widget value inside the (possibly refreshed) range
            current = st.session_state.get(SLIDER_KEY, 0.0)
            st.session_state[SLIDER_KEY] = min(max(float(current), 0.0), ceiling)
            st.slider(
                "Amount",
                min_value=0.0,
                max_value=ceiling,
                step=float(step),
                format="%.6f",
                key=SLIDER_KEY,
                on_change=_on_slider,
            )
        else:
            st.info("No free balance available for this side.")

        st.text_input("Enter amount", key=QTY_KEY, on_change=_on_text)
        st.text_input(
            "Custom price (optional)",
            key=PRICE_KEY,
            on_change=_on_price,
            placeholder="Market order when empty",
        )

        col_ok, col_cancel = st.columns(2)
        col_ok.button("Confirm", type="primary", on_click=_confirm, use_container_width=True)
        col_cancel.button("Cancel", on_click=_cancel, use_container_width=True)


def render() -> None:
    st.title("📈 Trade Crypto")
    show_flash()

    if not auth_token():
        st.info("Log in to place orders.")

    symbols = _symbols()
    if not symbols:
        st.info("No prices available yet.")
        return

    default = f"BTC{settings()['QUOTE_ASSET']}"
    symbol = st.selectbox(
        "Symbol",
        symbols,
        index=symbols.index(default) if default in symbols else 0,
        key="trade_symbol",
    )
    col_buy, col_sell = st.columns(2)
    col_buy.button("Buy", on_click=_open, args=(symbol, Side.BUY), use_container_width=True)
    col_sell.button("Sell", on_click=_open, args=(symbol, Side.SELL), use_container_width=True)

    if get_controller().session is not None:
        _render_dialog()
