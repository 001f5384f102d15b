"""Registry of Streamlit pages so main.py can route dynamically."""
from typing import Callable

from . import assistant, dashboard, login, portfolio, trade

Page = Callable[[], None]

registry: dict[str, Page] = {
    "Market": dashboard.render,
    "Portfolio": portfolio.render,
    "Trade": trade.render,
    "Assistant": assistant.render,
}

# Pages that make no sense without a token fall back to this one
LOGIN_PAGE: Page = login.render
NEEDS_LOGIN = {"Portfolio"}

__all__ = ["registry", "LOGIN_PAGE", "NEEDS_LOGIN"]
