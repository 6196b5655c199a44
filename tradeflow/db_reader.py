"""Print the market update requests recorded in a store."""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Iterator
from pathlib import Path

from tradeflow.messages import MarketUpdateRequest
from tradeflow.storage import UpdateStore

DEFAULT_DB_PATH = "./rocksdb"
_READ_DELAY_SECONDS = 0.001


def read_requests(db_path) -> Iterator[MarketUpdateRequest]:
    """Yield the stored requests in id order, reporting unparsable ones on stderr."""
    with UpdateStore(db_path) as store:
        for _key, value in store.iter_records():
            try:
                yield MarketUpdateRequest.from_bytes(value)
            except ValueError as exc:
                print(f"Error parsing market update: {exc!r}", file=sys.stderr)


def main(argv=None) -> int:
    """Print every recorded request, one per line."""
    parser = argparse.ArgumentParser(prog="tradeflow-db-reader")
    parser.add_argument("-d", "--db-path", type=Path, default=Path(DEFAULT_DB_PATH))
    args = parser.parse_args(argv)
    for request in read_requests(args.db_path):
        print(repr(request))
        time.sleep(_READ_DELAY_SECONDS)
    return 0