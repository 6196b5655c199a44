import logging
from datetime import timedelta
from decimal import Decimal as D

from tradeflow.book_side import PriceSize
from tradeflow.market import Market
from tradeflow.messages import MarketUpdate, MarketUpdateRequest
from tradeflow.types import Direction


def request(symbol, price, size, direction, timestamp_ms=1):
    return MarketUpdateRequest(symbol, timestamp_ms, MarketUpdate(D(price), D(size), direction))


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now


def test_books_are_created_per_symbol():
    market = Market()
    market.update_order_book(request("BTCUSDT", 12000, 1, Direction.BID))
    market.update_order_book(request("ETHUSDT", 3000, 2, Direction.ASK))
    assert set(market.order_books) == {"BTCUSDT", "ETHUSDT"}
    assert market.order_books["BTCUSDT"].best_bid() == PriceSize(D(12000), D(1))
    assert market.order_books["ETHUSDT"].best_ask() == PriceSize(D(3000), D(2))


def test_updates_match_within_a_symbol():
    market = Market()
    market.update_order_book(request("SOLUSDT", 170, 5, Direction.ASK))
    result = market.update_order_book(request("SOLUSDT", 171, 5, Direction.BID))
    assert result.executed == [PriceSize(D(170), D(5))]
    assert result.placed is None
    book = market.order_books["SOLUSDT"]
    assert book.bids() == ()
    assert book.asks() == ()


def test_symbols_do_not_interact():
    market = Market()
    market.update_order_book(request("BTCUSDT", 100, 5, Direction.ASK))
    result = market.update_order_book(request("ETHUSDT", 100, 5, Direction.BID))
    assert result.executed == []
    assert market.order_books["BTCUSDT"].asks() == (PriceSize(D(100), D(5)),)


def test_failed_cancel_is_logged_not_raised(caplog):
    market = Market()
    with caplog.at_level(logging.ERROR, logger="tradeflow.market"):
        result = market.update_order_book(request("BTCUSDT", 100, -3, Direction.BID))
    assert result is None
    assert "BTCUSDT" in market.order_books
    assert any("Error updating order book" in r.getMessage() for r in caplog.records)


def test_snapshot_logged_after_interval(caplog):
    clock = FakeClock()
    market = Market(snapshot_log_interval=10, clock=clock)
    with caplog.at_level(logging.INFO, logger="tradeflow.market"):
        clock.now = 5
        market.update_order_book(request("BTCUSDT", 100, 1, Direction.BID))
        before = [r for r in caplog.records if "Order book snapshot" in r.getMessage()]
        assert before == []

        clock.now = 11
        market.update_order_book(request("BTCUSDT", 101, 1, Direction.BID))
        clock.now = 15
        market.update_order_book(request("BTCUSDT", 102, 1, Direction.BID))
    snapshots = [r for r in caplog.records if "Order book snapshot" in r.getMessage()]
    assert len(snapshots) == 1
    assert "BTCUSDT" in snapshots[0].getMessage()


def test_no_snapshot_without_interval(caplog):
    clock = FakeClock()
    market = Market(clock=clock)
    with caplog.at_level(logging.INFO, logger="tradeflow.market"):
        clock.now = 1000
        market.update_order_book(request("BTCUSDT", 100, 1, Direction.BID))
    assert not any("Order book snapshot" in r.getMessage() for r in caplog.records)


def test_timedelta_interval_is_accepted(caplog):
    clock = FakeClock()
    market = Market(snapshot_log_interval=timedelta(seconds=10), clock=clock)
    assert market.snapshot_log_interval == 10
    with caplog.at_level(logging.INFO, logger="tradeflow.market"):
        clock.now = 10
        market.update_order_book(request("BTCUSDT", 100, 1, Direction.BID))
        clock.now = 10.5
        market.update_order_book(request("BTCUSDT", 100, 1, Direction.BID))
    snapshots = [r for r in caplog.records if "Order book snapshot" in r.getMessage()]
    assert len(snapshots) == 1