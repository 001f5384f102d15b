"""step_size.py

Minimum tradable increment per symbol.

The table is static configuration, deliberately conservative – it is not
read from the exchange's ``LOT_SIZE`` filters. A deployment that needs
other symbols passes ``overrides`` (or a different ``default``) instead of
editing the table.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_FLOOR, Decimal
from typing import Mapping, Optional

from .symbols import normalize_symbol

DEFAULT_STEP_SIZE = Decimal("0.0001")

STEP_SIZES: dict[str, Decimal] = {
    "BTCUSDT": Decimal("0.000001"),
    "ETHUSDT": Decimal("0.0001"),
    "BNBUSDT": Decimal("0.01"),
    "SOLUSDT": Decimal("0.01"),
    "XRPUSDT": Decimal("0.1"),
    "ADAUSDT": Decimal("1"),
    "AVAXUSDT": Decimal("0.01"),
    "DOGEUSDT": Decimal("1"),
    "DOTUSDT": Decimal("0.01"),
    "LINKUSDT": Decimal("0.01"),
}

# Steps below this threshold are displayed with 3 decimals, others with 2
FINE_STEP_THRESHOLD = Decimal("0.01")


def display_places(step: Decimal) -> int:
    """Decimal places used to *display* a slider-committed quantity.

    Keyed off the step's magnitude only (3 below 0.01, else 2) – not off the
    step's own precision, so BTC's 0.000001 step still shows 3 places.
    """
    return 3 if step < FINE_STEP_THRESHOLD else 2


def floor_to_step(value: Decimal, step: Decimal) -> Decimal:
    """Largest multiple of *step* that is ``<= value``."""
    return (value / step).to_integral_value(rounding=ROUND_FLOOR) * step


def format_quantity(quantity: Decimal, step: Decimal) -> str:
    """Display text for a committed quantity, truncated so it never reads
    higher than what is submitted."""
    places = display_places(step)
    return f"{quantity.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN):f}"


class StepSizeResolver:
    """Total, side-effect free ``symbol -> step size`` lookup."""

    def __init__(
        self,
        overrides: Optional[Mapping[str, Decimal]] = None,
        default: Decimal = DEFAULT_STEP_SIZE,
    ):
        table = dict(STEP_SIZES)
        for symbol, step in (overrides or {}).items():
            table[normalize_symbol(symbol)] = Decimal(str(step))
        if default <= 0 or any(step <= 0 for step in table.values()):
            raise ValueError("step sizes must be positive")
        self._table = table
        self.default = Decimal(str(default))

    def resolve(self, symbol: str) -> Decimal:
        return self._table.get(normalize_symbol(symbol), self.default)

    def quantize(self, symbol: str, value: Decimal) -> Decimal:
        """Floor *value* onto the symbol's step grid."""
        return floor_to_step(value, self.resolve(symbol))

    def is_on_grid(self, symbol: str, value: Decimal) -> bool:
        return value % self.resolve(symbol) == 0
