"""A set of order books keyed by symbol, fed by market update requests."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import timedelta

from tradeflow.errors import OrderBookError
from tradeflow.messages import MarketUpdateRequest
from tradeflow.order_book import OrderBook, OrderBookUpdate

logger = logging.getLogger(__name__)


class Market:
    """Holds one order book per symbol and periodically logs a snapshot."""

    def __init__(
        self,
        snapshot_log_interval: float | timedelta | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(snapshot_log_interval, timedelta):
            snapshot_log_interval = snapshot_log_interval.total_seconds()
        self.order_books: dict[str, OrderBook] = {}
        self.snapshot_log_interval = snapshot_log_interval
        self._clock = clock
        self._last_snapshot_time = clock()

    def __repr__(self) -> str:
        return f"Market({self.order_books!r})"

    def update_order_book(self, request: MarketUpdateRequest) -> OrderBookUpdate | None:
        """Apply a request to its symbol's book, creating the book if needed.

        Failed cancellations are logged, not raised; the result is then None.
        """
        logger.debug("Updating order book: %r", request)
        book = self.order_books.setdefault(request.symbol, OrderBook())
        result: OrderBookUpdate | None
        try:
            result = book.update(request.update)
        except OrderBookError as exc:
            logger.error("Error updating order book: %r", exc)
            result = None
        else:
            logger.debug("Order book updated: %r", result)

        if self.snapshot_log_interval is not None:
            now = self._clock()
            if now - self._last_snapshot_time > self.snapshot_log_interval:
                self._last_snapshot_time = now
                logger.info("Order book snapshot:\n%r", self.order_books)
        return result