"""api.py

Thin synchronous REST wrapper around the trading-assistant back-end.

* Centralises **base-URL**, **timeout** and **bearer-token** handling so
  pages and the sizing core never build requests themselves.
* Decodes every JSON body with ``parse_float=Decimal`` and sends amounts as
  decimal strings – quantities must not be rounded through a binary float
  on their way to the exchange.
* Normalises transport failures into a single :class:`ApiError` that keeps
  the back-end's own message when it sends one.

The token is always an explicit argument; this module keeps no session.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library & 3rd-party imports
# -----------------------------------------------------------------------------
import logging
from decimal import Decimal
from typing import Any, Optional

import pandas as pd
import requests

# Project settings helper – returns a dict of env-based config values
from cryptodeck.config import settings
from cryptodeck.services.model import HoldingSnapshot, Ticker

log = logging.getLogger(__name__)


class ApiError(Exception):
    """Back-end call failed (HTTP status, connection or payload problem).

    ``detail`` carries the back-end's error body verbatim (or ``None``) so
    callers can surface it unchanged.
    """

    def __init__(self, message: str, status_code: int | None = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


# -----------------------------------------------------------------------------
# Internal convenience helpers (prefixed with underscore)
# -----------------------------------------------------------------------------

def _headers(token: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def _error_detail(r: requests.Response) -> Any:
    """Best-effort extraction of the error body (JSON first, then text)."""
    try:
        return r.json()
    except ValueError:
        return r.text or None


def _error_message(detail: Any, fallback: str) -> str:
    # Mirrors the back-end contract: `{"message": ...}` or `{"error": ...}`
    if isinstance(detail, dict):
        for key in ("message", "error", "msg"):
            if isinstance(detail.get(key), str) and detail[key]:
                return detail[key]
    if isinstance(detail, str) and detail:
        return detail
    return fallback


def _request(
    method: str,
    path: str,
    *,
    token: str | None = None,
    payload: dict | None = None,
    fallback: str = "Request failed",
) -> Any:
    """Perform a request to *API_URL + path* and return the decoded JSON.

    Raises
    ------
    ApiError
        On connection errors, non-2xx responses and undecodable bodies.
    """
    url = f"{settings()['API_URL']}{path}"
    try:
        r = requests.request(
            method,
            url,
            headers=_headers(token),
            json=payload,
            timeout=settings()["REQUEST_TIMEOUT"],
        )
    except requests.RequestException as exc:
        log.warning("%s %s failed: %s", method, path, exc)
        raise ApiError(fallback) from exc

    if not r.ok:
        detail = _error_detail(r)
        log.warning("%s %s -> HTTP %s", method, path, r.status_code)
        raise ApiError(_error_message(detail, fallback), status_code=r.status_code, detail=detail)

    try:
        return r.json(parse_float=Decimal)
    except ValueError as exc:
        raise ApiError(f"{fallback}: response is not JSON", status_code=r.status_code) from exc


def _extract_rows(raw: Any, key: str) -> list[dict]:
    """Accept both ``{key: [...]}`` and a bare list payload."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict) and isinstance(raw.get(key), list):
        return raw[key]
    raise ApiError(f"Unrecognised payload shape: expected a list under '{key}'", detail=raw)


def _order_payload(symbol: str, quantity: Decimal, limit_price: Optional[Decimal]) -> dict:
    payload = {
        "symbol": symbol,
        "quantity": str(quantity),
        "order_type": "LIMIT" if limit_price is not None else "MARKET",
    }
    if limit_price is not None:
        payload["price"] = str(limit_price)
    return payload


# -----------------------------------------------------------------------------
# Public API helpers – authentication & assistant
# -----------------------------------------------------------------------------

def register(name: str, last_name: str, email: str, password: str) -> dict:
    """Create an account; returns the back-end's JSON as-is."""
    return _request(
        "POST",
        "/auth/register",
        payload={"name": name, "lastName": last_name, "email": email, "password": password},
        fallback="Registration failed!",
    )


def login(email: str, password: str) -> str:
    """Return the bearer token issued for *email*."""
    data = _request(
        "POST",
        "/auth/login",
        payload={"email": email, "password": password},
        fallback="Login failed!",
    )
    try:
        return data["user"]["token"]
    except (KeyError, TypeError) as exc:
        raise ApiError("Login failed: no token in response", detail=data) from exc


def chat(token: str | None, text: str) -> str:
    """Send one message to the market assistant and return its reply text."""
    data = _request("POST", "/chat", token=token, payload={"input": text}, fallback="Chat request failed!")
    if isinstance(data, dict) and "response" in data:
        return str(data["response"])
    raise ApiError("Chat request failed: no response field", detail=data)


# -----------------------------------------------------------------------------
# Public API helpers – market data & portfolio
# -----------------------------------------------------------------------------

def get_prices() -> list[Ticker]:
    """Fetch `/crypto-prices` as a list of :class:`Ticker`."""
    raw = _request("GET", "/crypto-prices", fallback="Failed to fetch crypto prices")
    return [Ticker.model_validate(row) for row in _extract_rows(raw, "prices")]


def get_portfolio(token: str) -> list[HoldingSnapshot]:
    """Fetch `/order/portfolio` (holdings with P&L) for the token owner."""
    raw = _request("GET", "/order/portfolio", token=token, fallback="Failed to fetch portfolio")
    return [HoldingSnapshot.model_validate(row) for row in _extract_rows(raw, "portfolio")]


def get_transactions(token: str) -> pd.DataFrame:
    """Return the user's past transactions as a DataFrame (possibly empty)."""
    raw = _request("GET", "/order/transactions", token=token, fallback="Failed to fetch transactions")
    return pd.DataFrame(_extract_rows(raw, "transactions"))


# -----------------------------------------------------------------------------
# Public API helpers – orders
# -----------------------------------------------------------------------------

def place_buy_order(
    token: str, symbol: str, quantity: Decimal, limit_price: Optional[Decimal] = None
) -> Any:
    log.info("Placing buy order: %s qty=%s limit=%s", symbol, quantity, limit_price)
    return _request(
        "POST",
        "/order/buy",
        token=token,
        payload=_order_payload(symbol, quantity, limit_price),
        fallback="Failed to place buy order",
    )


def place_sell_order(
    token: str, symbol: str, quantity: Decimal, limit_price: Optional[Decimal] = None
) -> Any:
    log.info("Placing sell order: %s qty=%s limit=%s", symbol, quantity, limit_price)
    return _request(
        "POST",
        "/order/sell",
        token=token,
        payload=_order_payload(symbol, quantity, limit_price),
        fallback="Failed to place sell order",
    )


# -----------------------------------------------------------------------------
# Adapters used by the sizing core (PortfolioSource / OrderSink)
# -----------------------------------------------------------------------------

class RestPortfolioSource:
    """``PortfolioSource`` backed by the REST helpers above."""

    def fetch(self, auth_token: str) -> list[HoldingSnapshot]:
        return get_portfolio(auth_token)

    def fetch_prices(self) -> list[Ticker]:
        return get_prices()


class RestOrderSink:
    """``OrderSink`` backed by the REST helpers above."""

    def place_buy(self, auth_token, symbol, quantity, limit_price=None):
        return place_buy_order(auth_token, symbol, quantity, limit_price)

    def place_sell(self, auth_token, symbol, quantity, limit_price=None):
        return place_sell_order(auth_token, symbol, quantity, limit_price)
