# tradeflow

A small trading back end. Market updates arrive over a ZeroMQ PULL socket,
pass through an in-process ring buffer, and are applied to one order book per
symbol. A recorder can also write every update to a local SQLite store for
later inspection.

## Pieces

- `tradeflow.order_book.OrderBook`: a price-level order book. Positive sizes
  match against the opposite side at the resting price, and whatever is left
  over is placed in the book. A zero size does nothing. Negative sizes cancel
  size at an existing level. Cancelling more than a level holds raises
  `tradeflow.errors.InsufficientSize`. Cancelling at a price that has no level
  raises `tradeflow.errors.PriceLevelNotFound`. Both derive from
  `tradeflow.errors.OrderBookError` and carry the `price` involved.
- `tradeflow.book_side.BookSide`: one side of a book, kept with its best level
  last, holding `tradeflow.book_side.PriceSize` levels.
- `tradeflow.market.Market`: keeps one `OrderBook` per symbol.
  `update_order_book` logs failed cancellations instead of raising them and
  then returns `None`. If given a snapshot interval, it logs every book at
  that interval.
- `tradeflow.messages.MarketUpdateRequest`: a fixed 80-byte little-endian wire
  record (`to_bytes` / `from_bytes`) holding an ASCII symbol of up to 32
  characters, a millisecond timestamp and a `MarketUpdate` (price, size,
  `tradeflow.types.Direction`). Prices and sizes are `decimal.Decimal` values
  with a 96-bit mantissa and up to 28 decimal places.
- `tradeflow.ring_buffer.RingBuffer`: a single-producer, multi-consumer ring
  buffer. The capacity is raised to at least 2 and rounded up to a power of
  two. When the writer laps a reader, the oldest messages are overwritten, and
  the subscriber (`tradeflow.slots.Subscriber`) reports how many it lost.
- `tradeflow.storage.UpdateStore`: records keyed by 64-bit ids in a
  `market_update.db` SQLite file inside a directory, read back in id order.
- `tradeflow.utils.IDGenerator`: builds 64-bit record ids from a 48-bit
  millisecond timestamp and a 16-bit counter. `tradeflow.utils.init_log` sets
  up non-blocking logging to stderr or to a daily rotated file.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Using the order book

```python
from decimal import Decimal

from tradeflow.messages import MarketUpdate
from tradeflow.order_book import OrderBook
from tradeflow.types import Direction

book = OrderBook()
book.insert_ask(Decimal("105"), Decimal("5"))
book.insert_ask(Decimal("100"), Decimal("2"))

result = book.update(MarketUpdate(Decimal("108"), Decimal("8"), Direction.BID))
# result.executed: 2 at 100, then 5 at 105
# result.placed:   1 at 108, now resting on the bid side
```

## Using the ring buffer

```python
from tradeflow.ring_buffer import RingBuffer

buffer = RingBuffer(1000)          # capacity becomes 1024
publisher, subscriber = buffer.split()
second = subscriber.clone()        # an independent reader

publisher.write(42)
message, lost = subscriber.read()  # (42, 0)
```

`read()` returns `None` when nothing new is waiting. `read_spinning()` and
iterating over a subscriber wait until a message arrives.

## Commands

Start the engine. It binds a PULL socket and applies every update it receives
until interrupted with Ctrl-C:

```
tradeflow-engine --zmq-address tcp://127.0.0.1:5555 --buffer-size 1000
```

Options:

- `--log-dir DIR`: write logs to `trading_engine.log` in that directory,
  rotated daily, instead of to the console.
- `--snapshot-log true|false`: log a snapshot of every order book every 10
  seconds (default `true`).
- `--db-path DIR`: also record every update to a store in that directory, in
  batches of 1000.

Feed the engine with random updates for BTCUSDT, ETHUSDT and SOLUSDT. About
5% of them are cancellations:

```
tradeflow-mock --zmq-address tcp://127.0.0.1:5555 --interval-ms 100
```

Print the recorded updates in id order (the default path is `./rocksdb`):

```
tradeflow-db-reader --db-path DIR
```

The log level comes from the `TRADEFLOW_LOG` environment variable, for example
`TRADEFLOW_LOG=debug` or `TRADEFLOW_LOG=tradeflow.market=info`, and defaults
to `info`.

## What it does not do

The engine keeps its order books in memory only. It offers no query interface
and publishes no trades; the books are visible only through the snapshot log.