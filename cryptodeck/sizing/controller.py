"""controller.py

Order-sizing state machine behind the buy/sell dialog.

Lifecycle
---------
``CLOSED → OPEN → SUBMITTING → CLOSED``. There is no error state: every
failure is raised to the caller and, except for ``InvalidQuantity``, leaves
the controller ``CLOSED``. The user re-opens a dialog to try again.

Quantity rules
--------------
* **open** seeds the quantity at 25 % of the ceiling, floored onto the
  step grid.
* **slider** events are recorded but only a *release*
  (:meth:`OrderSizingController.commit_slider`) changes the quantity: the
  value is clamped to ``[0, ceiling]`` and floored onto the step grid.
* **text** entry is stored verbatim and applied as typed: no clamping,
  no re-quantizing, unparsable text counts as zero. Exceeding the balance is
  left for the back-end to reject.
* ``notional`` is always ``quantity × price`` and is recomputed whenever the
  context publishes a new snapshot; the quantity itself is never touched by
  a refresh.
"""

from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

from cryptodeck.services.model import Ack, OrderRequest, Side, SizingSession

from .context import BalanceAndPriceContext, MarketSnapshot
from .errors import InvalidQuantity, SessionClosed, SizingError, Unauthenticated, UnpricedSymbol
from .gateway import OrderSubmissionGateway
from .step_size import StepSizeResolver, floor_to_step, format_quantity
from .symbols import base_asset, normalize_symbol

log = logging.getLogger(__name__)

ZERO = Decimal("0")
SEED_FRACTION = Decimal("0.25")
SEED_PLACES = Decimal("0.000001")
# Typed amounts beyond this magnitude are treated as unparsable
MAX_AMOUNT = Decimal("1e15")

Number = Union[Decimal, float, int, str]


class SessionState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    SUBMITTING = "SUBMITTING"


def parse_amount(raw_text: Optional[str]) -> Optional[Decimal]:
    """Strict decimal parse; ``None`` for empty, malformed, non-finite or
    out-of-range input (magnitude above ``MAX_AMOUNT``)."""
    text = (raw_text or "").strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite() or value.copy_abs() > MAX_AMOUNT:
        return None
    return value


def _to_decimal(value: Number) -> Decimal:
    # str() first: Decimal(0.1) would carry the float's binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


class OrderSizingController:
    """Holds at most one :class:`SizingSession` and drives it to an order."""

    def __init__(self, gateway: OrderSubmissionGateway, step_sizes: StepSizeResolver | None = None):
        self._gateway = gateway
        self.step_sizes = step_sizes or StepSizeResolver()
        self._state = SessionState.CLOSED
        self._session: Optional[SizingSession] = None
        self._context: Optional[BalanceAndPriceContext] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[SizingSession]:
        return self._session

    def step_size(self, session: SizingSession) -> Decimal:
        return self.step_sizes.resolve(session.symbol)

    # ------------------------------------------------------------------
    # Open / close
    # ------------------------------------------------------------------
    def open(self, symbol: str, side: Side | str, context: BalanceAndPriceContext) -> SizingSession:
        """Open a dialog for *symbol* / *side* against *context*.

        Raises
        ------
        UnpricedSymbol
            The context has no positive price for *symbol*; nothing is opened
            and an already open session is kept.
        """
        symbol = normalize_symbol(symbol)
        side = Side(side)
        if self._state is SessionState.SUBMITTING:
            raise SizingError("An order is already being submitted")

        snap = context.snapshot
        price = snap.price_of(symbol, context.quote_asset)
        if price is None:
            raise UnpricedSymbol(symbol)

        if self._session is not None:
            log.debug("Discarding open %s session for %s", self._session.side.value, self._session.symbol)
            self._release()

        ceiling = self._ceiling(symbol, side, price, snap, context.quote_asset)
        step = self.step_sizes.resolve(symbol)
        seed = floor_to_step((ceiling * SEED_FRACTION).quantize(SEED_PLACES, rounding=ROUND_DOWN), step)
        session = SizingSession(
            symbol=symbol,
            side=side,
            raw_quantity_text=f"{seed.quantize(SEED_PLACES):f}",
            quantity=seed,
            notional=seed * price,
            ceiling=ceiling,
            price=price,
        )
        self._session = session
        self._context = context
        self._state = SessionState.OPEN
        context.subscribe(self._on_snapshot)
        log.info("Opened %s %s: price=%s ceiling=%s", side.value, symbol, price, ceiling)
        return session

    def cancel(self, session: SizingSession) -> None:
        """Discard *session*; cancelling a stale session is a no-op."""
        if session is self._session:
            self._release()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def set_from_slider(self, session: SizingSession, value: Number) -> None:
        """Record an intermediate slider position (quantity unchanged)."""
        self._require_open(session)
        session.slider_value = _to_decimal(value)

    def commit_slider(self, session: SizingSession, value: Number) -> Decimal:
        """Slider released at *value*: clamp, floor onto the grid, return quantity."""
        self._require_open(session)
        value = min(max(_to_decimal(value), ZERO), session.ceiling)
        step = self.step_size(session)
        quantity = floor_to_step(value, step)
        session.slider_value = value
        session.quantity = quantity
        session.raw_quantity_text = format_quantity(quantity, step)
        session.notional = quantity * session.price
        return quantity

    def set_from_text(self, session: SizingSession, raw_text: str) -> None:
        self._require_open(session)
        parsed = parse_amount(raw_text)
        quantity = parsed if parsed is not None else ZERO
        notional = quantity * session.price
        session.raw_quantity_text = raw_text
        session.quantity = quantity
        session.notional = notional

    def set_custom_price(self, session: SizingSession, raw_text: Optional[str]) -> None:
        """Limit price override; anything but a positive number clears it."""
        self._require_open(session)
        parsed = parse_amount(raw_text)
        session.custom_price = parsed if parsed is not None and parsed > 0 else None

    # ------------------------------------------------------------------
    # Confirm / submit
    # ------------------------------------------------------------------
    def confirm(self, session: SizingSession, auth_token: Optional[str]) -> OrderRequest:
        """Validate *session* and build the order request.

        The committed quantity goes out as-is: text-entered amounts are not
        forced onto the step grid and the ceiling is not re-checked.

        Raises
        ------
        InvalidQuantity
            Quantity is not positive; the session stays open for correction.
        Unauthenticated
            No token; the session is closed.
        """
        self._require_open(session)
        if session.quantity <= 0:
            raise InvalidQuantity(session.raw_quantity_text)
        if not auth_token:
            self._release()
            raise Unauthenticated()
        return OrderRequest(
            symbol=session.symbol,
            quantity=session.quantity,
            side=session.side,
            kind=session.order_kind,
            limit_price=session.custom_price,
        )

    def submit(self, session: SizingSession, auth_token: Optional[str]) -> Ack:
        """Confirm, close the session, then place the order exactly once.

        The session is discarded *before* the network call so a second
        confirm on it raises :class:`SessionClosed` instead of double
        submitting. Whatever the outcome, the controller ends ``CLOSED``;
        refreshing the context afterwards is the caller's job.
        """
        request = self.confirm(session, auth_token)
        self._release()
        self._state = SessionState.SUBMITTING
        try:
            return self._gateway.submit(request, auth_token)
        finally:
            self._state = SessionState.CLOSED

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _ceiling(symbol: str, side: Side, price: Decimal, snap: MarketSnapshot, quote: str) -> Decimal:
        if side is Side.BUY:
            free = snap.free_of(quote)
            return max(free, ZERO) / price
        return max(snap.free_of(base_asset(symbol, quote)), ZERO)

    def _on_snapshot(self, snap: MarketSnapshot) -> None:
        session, context = self._session, self._context
        if session is None or context is None:
            return
        price = snap.price_of(session.symbol, context.quote_asset)
        if price is None:
            log.warning("No usable price for %s after refresh; keeping %s", session.symbol, session.price)
            return
        session.price = price
        session.ceiling = self._ceiling(session.symbol, session.side, price, snap, context.quote_asset)
        session.notional = session.quantity * price

    def _require_open(self, session: SizingSession) -> None:
        if self._state is not SessionState.OPEN or session is not self._session:
            raise SessionClosed(f"{session.side.value} {session.symbol} dialog is no longer open")

    def _release(self) -> None:
        if self._context is not None:
            self._context.unsubscribe(self._on_snapshot)
        self._session = None
        self._context = None
        self._state = SessionState.CLOSED
