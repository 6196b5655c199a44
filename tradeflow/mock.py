"""Generates random market updates and pushes them to the engine over ZeroMQ."""

from __future__ import annotations

import argparse
import math
import random
import time
from dataclasses import dataclass
from decimal import Decimal

import zmq

from tradeflow.messages import MarketUpdate, MarketUpdateRequest
from tradeflow.types import Direction

DEFAULT_ZMQ_ADDRESS = "tcp://127.0.0.1:5555"
DEFAULT_INTERVAL_MS = 100
MAX_PRICE_STEPS = 2000
MIN_PRICE = Decimal("0.01")
CANCEL_PROBABILITY = 0.05


@dataclass(frozen=True)
class MockConfig:
    """Parameters of the random walk for one symbol."""

    symbol: str
    price: Decimal
    price_step: Decimal
    size_step: Decimal


CONFIGS: tuple[MockConfig, ...] = (
    MockConfig("BTCUSDT", Decimal("12000"), Decimal("1"), Decimal("0.00001")),
    MockConfig("ETHUSDT", Decimal("3000"), Decimal("0.1"), Decimal("0.001")),
    MockConfig("SOLUSDT", Decimal("170"), Decimal("0.01"), Decimal("0.01")),
)


def normal_random(mean: float, std_dev: float, rng: random.Random) -> float:
    """A normally distributed sample via the Box-Muller transform."""
    u1 = 1.0 - rng.random()
    u2 = rng.random()
    z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return mean + std_dev * z0


def generate_price_offset(price_step: Decimal, rng: random.Random) -> Decimal:
    """A whole number of price steps, normally distributed within ±2000 steps."""
    steps = normal_random(0.0, MAX_PRICE_STEPS / 3.0, rng)
    steps = max(-MAX_PRICE_STEPS, min(MAX_PRICE_STEPS, steps))
    return price_step * Decimal(int(steps))


def generate_size(size_step: Decimal, rng: random.Random) -> Decimal:
    """Between 1 and 100 size steps."""
    return size_step * Decimal(rng.randint(1, 100))


def generate_request(
    config: MockConfig, rng: random.Random, timestamp_ms: int
) -> MarketUpdateRequest:
    """A random update for config's symbol; about 5% are cancellations."""
    price = config.price + generate_price_offset(config.price_step, rng)
    if price <= 0:
        price = MIN_PRICE
    size = generate_size(config.size_step, rng)
    if rng.random() < CANCEL_PROBABILITY:
        size = -size
    direction = Direction.BID if rng.random() < 0.5 else Direction.ASK
    return MarketUpdateRequest(
        config.symbol, timestamp_ms, MarketUpdate(price, size, direction)
    )


def main(argv=None) -> int:
    """Send random updates for every configured symbol until interrupted."""
    parser = argparse.ArgumentParser(prog="tradeflow-mock")
    parser.add_argument("-z", "--zmq-address", default=DEFAULT_ZMQ_ADDRESS)
    parser.add_argument("-i", "--interval-ms", type=int, default=DEFAULT_INTERVAL_MS)
    args = parser.parse_args(argv)

    context = zmq.Context()
    socket = context.socket(zmq.PUSH)
    socket.connect(args.zmq_address)
    print(f"Connected to trading service on {args.zmq_address}")
    rng = random.Random()
    try:
        while True:
            for config in CONFIGS:
                request = generate_request(config, rng, time.time_ns() // 1_000_000)
                print(f"Sending market update: {request!r}")
                socket.send(request.to_bytes())
            time.sleep(args.interval_ms / 1000)
    except KeyboardInterrupt:
        return 0
    finally:
        socket.close(linger=0)
        context.term()