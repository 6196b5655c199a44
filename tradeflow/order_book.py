"""Order book for a single symbol: matching, placement and cancellation."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from tradeflow.book_side import BookSide, PriceSize
from tradeflow.messages import MarketUpdate
from tradeflow.types import Direction


@dataclass
class OrderBookUpdate:
    """What one update did to the book.

    ``executed`` lists the fills, each at the resting order's price.
    ``placed`` is the size added to (or, for a cancellation, removed from)
    the book at the update's price, or None when nothing rested.
    """

    executed: list[PriceSize] = field(default_factory=list)
    placed: PriceSize | None = None


class OrderBook:
    """Bids and asks for one symbol, each kept with its best level last."""

    def __init__(self) -> None:
        self._bids = BookSide(Direction.BID)
        self._asks = BookSide(Direction.ASK)

    def __repr__(self) -> str:
        return f"OrderBook(bids={list(self._bids.levels())!r}, asks={list(self._asks.levels())!r})"

    def best_bid(self) -> PriceSize | None:
        """The highest bid, or None."""
        return self._bids.best()

    def best_ask(self) -> PriceSize | None:
        """The lowest ask, or None."""
        return self._asks.best()

    def bids(self) -> tuple[PriceSize, ...]:
        """Bid levels from lowest to highest price."""
        return self._bids.levels()

    def asks(self) -> tuple[PriceSize, ...]:
        """Ask levels from highest to lowest price."""
        return self._asks.levels()

    def insert_bid(self, price: Decimal, size: Decimal) -> None:
        """Rest a bid without matching, merging into an existing level."""
        self._bids.insert(price, size)

    def insert_ask(self, price: Decimal, size: Decimal) -> None:
        """Rest an ask without matching, merging into an existing level."""
        self._asks.insert(price, size)

    def _sides(self, direction: Direction) -> tuple[BookSide, BookSide]:
        if direction is Direction.BID:
            return self._bids, self._asks
        return self._asks, self._bids

    def update(self, update: MarketUpdate) -> OrderBookUpdate:
        """Apply an update: zero does nothing, negative cancels, positive matches then rests.

        Raises InsufficientSize or PriceLevelNotFound for a failed cancellation.
        """
        if update.size == 0:
            return OrderBookUpdate()
        own, opposite = self._sides(update.direction)
        if update.size < 0:
            return OrderBookUpdate(placed=own.cancel(update.price, update.size))

        executed, remaining = opposite.match(update.price, update.size)
        placed = None
        if remaining > 0:
            own.insert(update.price, remaining)
            placed = PriceSize(update.price, remaining)
        return OrderBookUpdate(executed=executed, placed=placed)