"""main.py

Streamlit **entry-point** for the cryptodeck client.

Responsibilities
----------------
* Define global page layout and configure logging once per process.
* Implement the sidebar navigation and the login / logout controls.
* Trigger an **auto-refresh** on the price clock; each rerun refreshes
  prices and, on the slower portfolio clock, holdings – an open trade
  dialog picks up the new ceiling without losing the typed amount.

Run with ``streamlit run cryptodeck/main.py``.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Third-party imports
# -----------------------------------------------------------------------------
from datetime import datetime, timezone

import streamlit as st
from streamlit_autorefresh import st_autorefresh

# -----------------------------------------------------------------------------
# 0) Global page configuration – must run before any other Streamlit call
# -----------------------------------------------------------------------------
st.set_page_config(
    page_icon=":chart_with_upwards_trend:",
    layout="wide",
    initial_sidebar_state="expanded",
)

# -----------------------------------------------------------------------------
# Local imports (after Streamlit initialisation)
# -----------------------------------------------------------------------------
from cryptodeck.config import settings
from cryptodeck.log import configure_logging
from cryptodeck._pages import LOGIN_PAGE, NEEDS_LOGIN, registry
from cryptodeck._pages._helpers import (
    TS_FMT,
    auth_token,
    convert_to_local_time,
    refresh_market_data,
    set_auth_token,
)


@st.cache_resource
def _init_logging() -> bool:
    configure_logging(settings()["LOG_LEVEL"])
    return True


_init_logging()

# -----------------------------------------------------------------------------
# 1) Sidebar – navigation radio & session controls
# -----------------------------------------------------------------------------
st.sidebar.title(settings()["APP_TITLE"])

pages = list(registry) if auth_token() else [*registry, "Login"]
page = st.sidebar.radio("Navigate", pages, key="sidebar_page")

if auth_token():
    if st.sidebar.button("Logout"):
        set_auth_token(None)
        st.rerun()

# -----------------------------------------------------------------------------
# 2) Auto-refresh – keeps prices (and the open dialog's ceiling) live
# -----------------------------------------------------------------------------
st_autorefresh(interval=settings()["PRICE_REFRESH_SECONDS"] * 1000, key="refresh")
refresh_market_data()

# -----------------------------------------------------------------------------
# 3) Routing logic
# -----------------------------------------------------------------------------
if page == "Login" or (page in NEEDS_LOGIN and not auth_token()):
    LOGIN_PAGE()
else:
    registry[page]()

st.sidebar.markdown("---")
local_time = convert_to_local_time(datetime.now(timezone.utc), TS_FMT)
st.sidebar.metric(label="🕒 Last refresh:", value=local_time)
