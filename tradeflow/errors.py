"""Errors raised by order book operations."""

from __future__ import annotations

from decimal import Decimal


class OrderBookError(Exception):
    """Base class for order book errors; carries the price level involved."""

    def __init__(self, price: Decimal, message: str) -> None:
        super().__init__(message)
        self.price = price


class InsufficientSize(OrderBookError):
    """A cancellation asked for more than the level holds."""

    def __init__(self, price: Decimal) -> None:
        super().__init__(price, f"insufficient size at price level {price}")


class PriceLevelNotFound(OrderBookError):
    """A cancellation named a price level that is not in the book."""

    def __init__(self, price: Decimal) -> None:
        super().__init__(price, f"price level {price} not found")