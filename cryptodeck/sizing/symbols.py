"""Pair-symbol helpers (``BTCUSDT`` ↔ ``BTC`` + ``USDT``)."""

from __future__ import annotations


def normalize_symbol(symbol: str) -> str:
    """Upper-case and strip *symbol*; empty symbols are rejected."""
    norm = (symbol or "").strip().upper()
    if not norm:
        raise ValueError("symbol must be non-empty")
    return norm


def base_asset(symbol: str, quote: str) -> str:
    """Return the base asset of a concatenated pair symbol.

    >>> base_asset("btcusdt", "USDT")
    'BTC'
    >>> base_asset("ETH", "USDT")
    'ETH'
    """
    norm = normalize_symbol(symbol)
    quote = quote.upper()
    if norm.endswith(quote) and len(norm) > len(quote):
        return norm[: -len(quote)]
    return norm


def pair_symbol(asset: str, quote: str) -> str:
    return f"{normalize_symbol(asset)}{quote.upper()}"
