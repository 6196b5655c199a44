"""One side of an order book, kept sorted with the best price last."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tradeflow.errors import InsufficientSize, PriceLevelNotFound
from tradeflow.types import Direction


@dataclass(frozen=True)
class PriceSize:
    """A quantity at a price."""

    price: Decimal
    size: Decimal


class BookSide:
    """Price levels for bids or asks, ordered from worst to best price.

    Bids run from lowest to highest, asks from highest to lowest, so the best
    level is always at the end and searches start there.
    """

    def __init__(self, direction: Direction) -> None:
        self.direction = Direction(direction)
        self._levels: list[PriceSize] = []

    def _improves(self, price: Decimal, other: Decimal) -> bool:
        if self.direction is Direction.BID:
            return price > other
        return price < other

    def best(self) -> PriceSize | None:
        """The best level, or None when the side is empty."""
        return self._levels[-1] if self._levels else None

    def levels(self) -> tuple[PriceSize, ...]:
        """All levels from worst to best."""
        return tuple(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def __repr__(self) -> str:
        return f"BookSide({self.direction.name}, {self._levels!r})"

    def insert(self, price: Decimal, size: Decimal) -> None:
        """Add size at price, merging into an existing level."""
        if size <= 0:
            raise ValueError(f"size to insert must be positive, got {size}")
        for index, level in reversed(list(enumerate(self._levels))):
            if level.price == price:
                self._levels[index] = PriceSize(level.price, level.size + size)
                return
            if self._improves(price, level.price):
                self._levels.insert(index + 1, PriceSize(price, size))
                return
        self._levels.insert(0, PriceSize(price, size))

    def cancel(self, price: Decimal, size: Decimal) -> PriceSize:
        """Remove -size from the level at price; size must be negative.

        Returns the applied change. Raises InsufficientSize or PriceLevelNotFound.
        """
        if size >= 0:
            raise ValueError(f"cancellation size must be negative, got {size}")
        for index, level in reversed(list(enumerate(self._levels))):
            if level.price == price:
                if level.size < -size:
                    raise InsufficientSize(price)
                remaining = level.size + size
                if remaining == 0:
                    del self._levels[index]
                else:
                    self._levels[index] = PriceSize(level.price, remaining)
                return PriceSize(price, size)
            if self._improves(price, level.price):
                break
        raise PriceLevelNotFound(price)

    def match(self, price: Decimal, size: Decimal) -> tuple[list[PriceSize], Decimal]:
        """Fill an incoming opposite order against this side, best level first.

        Trades happen at the resting level's price. Returns the executed fills
        and the size left over.
        """
        executed: list[PriceSize] = []
        remaining = size
        while remaining > 0 and self._levels:
            level = self._levels[-1]
            if self._improves(price, level.price):
                break
            if level.size <= remaining:
                executed.append(level)
                remaining -= level.size
                self._levels.pop()
            else:
                executed.append(PriceSize(level.price, remaining))
                self._levels[-1] = PriceSize(level.price, level.size - remaining)
                remaining = Decimal(0)
        return executed, remaining