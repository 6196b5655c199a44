"""Execution engine: receives market updates over ZeroMQ, maintains order books
and optionally records every update to storage."""

from __future__ import annotations

import argparse
import logging
import threading
import time
from pathlib import Path

import zmq

from tradeflow.market import Market
from tradeflow.messages import MarketUpdateRequest
from tradeflow.ring_buffer import Publisher, RingBuffer
from tradeflow.slots import Subscriber
from tradeflow.storage import UpdateStore
from tradeflow.utils import IDGenerator, init_log

logger = logging.getLogger(__name__)

DEFAULT_ZMQ_ADDRESS = "tcp://127.0.0.1:5555"
DEFAULT_BUFFER_SIZE = 1000
SNAPSHOT_INTERVAL_SECONDS = 10.0
BATCH_SIZE = 1000
LOST_REPORT_EVERY = 100
ERROR_LOG_INTERVAL_SECONDS = 5.0
_POLL_TIMEOUT_MS = 100


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {text!r}")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse the engine's command line."""
    parser = argparse.ArgumentParser(prog="tradeflow-engine")
    parser.add_argument("-z", "--zmq-address", default=DEFAULT_ZMQ_ADDRESS)
    parser.add_argument("-b", "--buffer-size", type=int, default=DEFAULT_BUFFER_SIZE)
    parser.add_argument(
        "-l",
        "--log-dir",
        type=Path,
        default=None,
        help="if not provided, the log is printed to the console",
    )
    parser.add_argument("-s", "--snapshot-log", type=_parse_bool, default=True)
    parser.add_argument("-d", "--db-path", type=Path, default=None)
    return parser.parse_args(argv)


def _note_lost(total: int, lost: int, what: str) -> int:
    if lost > 0:
        total += lost
        if total % LOST_REPORT_EVERY == 0:
            logger.error("%s lost %d messages", what, total)
    return total


def run_order_book_consumer(
    subscriber: Subscriber, market: Market, stop_event: threading.Event
) -> int:
    """Apply updates from the ring to the market until stopped and drained.

    Returns the number of messages lost to overwriting.
    """
    lost_count = 0
    while True:
        result = subscriber.read()
        if result is None:
            if stop_event.is_set():
                return lost_count
            time.sleep(0)
            continue
        request, lost = result
        logger.debug("Received market update from ring buffer: %r", request)
        lost_count = _note_lost(lost_count, lost, "Order book update")
        market.update_order_book(request)


def run_recorder(
    subscriber: Subscriber,
    store: UpdateStore,
    stop_event: threading.Event,
    batch_size: int = BATCH_SIZE,
) -> int:
    """Record updates from the ring to the store in batches until stopped and drained.

    Returns the number of messages lost to overwriting.
    """
    if batch_size < 1:
        raise ValueError(f"batch size must be at least 1, got {batch_size}")
    id_generator = IDGenerator()
    batch: list[tuple[int, MarketUpdateRequest]] = []
    lost_count = 0
    while True:
        result = subscriber.read()
        if result is None:
            if stop_event.is_set():
                break
            time.sleep(0)
            continue
        request, lost = result
        lost_count = _note_lost(lost_count, lost, "Database record")
        batch.append((id_generator.generate(request.timestamp_ms), request))
        if len(batch) >= batch_size:
            store.put_batch(batch)
            batch = []
    if batch:
        store.put_batch(batch)
    return lost_count


def _receive(socket, publisher: Publisher, stop_event: threading.Event) -> None:
    last_error = time.monotonic() - 100
    while not stop_event.is_set():
        try:
            if not socket.poll(_POLL_TIMEOUT_MS):
                continue
            data = socket.recv()
        except zmq.ZMQError as exc:
            logger.error("Receiving market update failed: %s", exc)
            return
        try:
            request = MarketUpdateRequest.from_bytes(data)
        except ValueError as exc:
            if time.monotonic() - last_error > ERROR_LOG_INTERVAL_SECONDS:
                logger.error("Error parsing market update: %r", exc)
                last_error = time.monotonic()
            continue
        publisher.write(request)


def main(argv=None) -> int:
    """Run the engine until interrupted."""
    args = parse_args(argv)
    with init_log(args.log_dir):
        logger.info("Starting trading service")
        logger.info("Trading service listening on %s", args.zmq_address)
        interval = SNAPSHOT_INTERVAL_SECONDS if args.snapshot_log else None

        ring = RingBuffer(args.buffer_size)
        publisher, subscriber = ring.split()
        recorder_subscriber = subscriber.clone()
        stop_event = threading.Event()

        context = zmq.Context()
        socket = context.socket(zmq.PULL)
        socket.bind(args.zmq_address)
        store = UpdateStore(args.db_path) if args.db_path is not None else None

        threads = [
            threading.Thread(
                target=_receive, args=(socket, publisher, stop_event), name="receiver"
            ),
            threading.Thread(
                target=run_order_book_consumer,
                args=(subscriber, Market(interval), stop_event),
                name="order-book",
            ),
        ]
        if store is not None:
            threads.append(
                threading.Thread(
                    target=run_recorder,
                    args=(recorder_subscriber, store, stop_event),
                    name="recorder",
                )
            )
        for thread in threads:
            thread.start()
        try:
            while any(thread.is_alive() for thread in threads):
                for thread in threads:
                    thread.join(timeout=0.5)
        except KeyboardInterrupt:
            logger.info("Stopping trading service")
        finally:
            stop_event.set()
            for thread in threads:
                thread.join()
            socket.close(linger=0)
            context.term()
            if store is not None:
                store.close()
    return 0