"""context.py

Read-only view of balances and prices used by the sizing controller.

The context owns an immutable :class:`MarketSnapshot`. Both refresh paths
(portfolio on a slow clock, prices on a fast one) build a *new* snapshot
from the previous one and swap it in under a lock, so a reader that grabs
``context.snapshot`` once always sees a complete, consistent pair of
holdings and prices. Listeners are notified after each swap; the controller
uses this to recompute ceiling and notional of an open session.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, Iterable, Optional, Protocol

from cryptodeck.config import settings
from cryptodeck.services.model import HoldingSnapshot, Ticker

from .symbols import base_asset, normalize_symbol

log = logging.getLogger(__name__)

ZERO = Decimal("0")


class PortfolioSource(Protocol):
    """Where holdings and prices come from (REST in production)."""

    def fetch(self, auth_token: str) -> Iterable[HoldingSnapshot]: ...

    def fetch_prices(self) -> Iterable[Ticker]: ...


@dataclass(frozen=True)
class MarketSnapshot:
    """Holdings + prices replaced as one unit."""

    holdings: tuple[HoldingSnapshot, ...] = ()
    tickers: tuple[Ticker, ...] = ()
    holdings_as_of: Optional[float] = None   # clock() at last portfolio refresh
    prices_as_of: Optional[float] = None     # clock() at last price refresh

    def holding(self, asset: str) -> Optional[HoldingSnapshot]:
        asset = asset.upper()
        return next((h for h in self.holdings if h.asset == asset), None)

    def price_of(self, symbol: str, quote: str) -> Optional[Decimal]:
        """Feed price first, then the holding's own price; ``None`` if unusable."""
        symbol = normalize_symbol(symbol)
        price = next((t.price for t in self.tickers if t.symbol == symbol), None)
        if price is None:
            held = self.holding(base_asset(symbol, quote))
            price = held.current_price if held is not None else None
        if price is None or price <= 0:
            return None
        return price

    def free_of(self, asset: str) -> Decimal:
        held = self.holding(asset)
        return held.free if held is not None else ZERO


Listener = Callable[[MarketSnapshot], None]


class BalanceAndPriceContext:
    """Single-writer / multi-reader holder of the current :class:`MarketSnapshot`."""

    def __init__(
        self,
        source: PortfolioSource,
        quote_asset: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._source = source
        self.quote_asset = (quote_asset or settings()["QUOTE_ASSET"]).upper()
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot = MarketSnapshot()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> MarketSnapshot:
        return self._snapshot

    @property
    def holdings(self) -> tuple[HoldingSnapshot, ...]:
        return self._snapshot.holdings

    @property
    def tickers(self) -> tuple[Ticker, ...]:
        return self._snapshot.tickers

    def current_price(self, symbol: str) -> Optional[Decimal]:
        return self._snapshot.price_of(symbol, self.quote_asset)

    def free_balance(self, asset: str) -> Decimal:
        return self._snapshot.free_of(asset)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def refresh(self, auth_token: str) -> tuple[HoldingSnapshot, ...]:
        """Re-fetch the portfolio and swap it in; errors leave the snapshot as is."""
        holdings = tuple(self._source.fetch(auth_token))
        now = self._clock()
        self._swap(lambda old: replace(old, holdings=holdings, holdings_as_of=now))
        log.debug("Portfolio refreshed: %d holdings", len(holdings))
        return holdings

    def refresh_prices(self) -> tuple[Ticker, ...]:
        tickers = tuple(self._source.fetch_prices())
        now = self._clock()
        self._swap(lambda old: replace(old, tickers=tickers, prices_as_of=now))
        log.debug("Prices refreshed: %d tickers", len(tickers))
        return tickers

    def refresh_if_stale(
        self,
        auth_token: str | None,
        price_max_age: float | None = None,
        portfolio_max_age: float | None = None,
    ) -> bool:
        """Run whichever refresh is due; returns ``True`` if anything was fetched.

        The portfolio is skipped while there is no token.
        """
        price_max_age = settings()["PRICE_REFRESH_SECONDS"] if price_max_age is None else price_max_age
        portfolio_max_age = settings()["REFRESH_SECONDS"] if portfolio_max_age is None else portfolio_max_age
        now = self._clock()
        snap = self._snapshot
        refreshed = False
        if snap.prices_as_of is None or now - snap.prices_as_of >= price_max_age:
            self.refresh_prices()
            refreshed = True
        if auth_token and (snap.holdings_as_of is None or now - snap.holdings_as_of >= portfolio_max_age):
            self.refresh(auth_token)
            refreshed = True
        return refreshed

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _swap(self, build: Callable[[MarketSnapshot], MarketSnapshot]) -> None:
        with self._lock:
            new = build(self._snapshot)
            self._snapshot = new
        for listener in list(self._listeners):
            listener(new)
