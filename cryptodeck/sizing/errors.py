"""errors.py

Failure modes of a sizing session. Every one of them is terminal for the
current attempt and is raised to the caller – pages turn them into alerts.
"""

from __future__ import annotations

from typing import Any


class SizingError(Exception):
    """Base class for everything the sizing core raises."""


class UnpricedSymbol(SizingError):
    """No usable (positive) price for the symbol – the session does not open."""

    def __init__(self, symbol: str):
        super().__init__(f"No usable price for {symbol}")
        self.symbol = symbol


class InvalidQuantity(SizingError):
    """Quantity is zero, negative or unparsable at confirm time."""

    def __init__(self, raw_text: str):
        super().__init__(f"Invalid amount {raw_text!r}: please enter a positive number")
        self.raw_text = raw_text


class Unauthenticated(SizingError):
    def __init__(self) -> None:
        super().__init__("Missing token: log in before placing orders")


class SubmissionError(SizingError):
    """The order endpoint rejected the order or could not be reached.

    ``detail`` is the back-end's error body, untouched.
    """

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.detail = detail


class SessionClosed(SizingError):
    """Operation on a session that was cancelled, submitted or replaced."""
