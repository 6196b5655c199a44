import copy
import threading

import pytest

from tradeflow.slots import Slot, Subscriber


def make_ring(capacity):
    return [Slot() for _ in range(capacity)]


class _Writer:
    def __init__(self, slots):
        self.slots = slots
        self.idx = 0

    def write(self, msg):
        self.slots[self.idx].write(msg)
        self.idx = (self.idx + 1) % len(self.slots)


def test_slot_write_leaves_even_version_and_message():
    slot = Slot()
    slot.write("hello")
    assert slot.version == 2
    assert slot.msg == "hello"
    slot.write("world")
    assert slot.version == 4
    assert slot.msg == "world"


def test_slot_write_during_write_raises():
    slot = Slot()
    slot.version = 1
    with pytest.raises(RuntimeError):
        slot.write("x")


@pytest.mark.parametrize("capacity", [0, 1, 3, 5, 1000])
def test_subscriber_rejects_bad_capacity(capacity):
    with pytest.raises(ValueError):
        Subscriber(make_ring(capacity))


def test_empty_read_returns_none():
    subscriber = Subscriber(make_ring(4))
    assert subscriber.read() is None


def test_basic_write_read():
    slots = make_ring(4)
    subscriber = Subscriber(slots)
    _Writer(slots).write(42)
    assert subscriber.read() == (42, 0)
    assert subscriber.read() is None


def test_multiple_writes_reads_in_order():
    slots = make_ring(4)
    subscriber = Subscriber(slots)
    writer = _Writer(slots)
    for i in range(3):
        writer.write(i)
    results = [subscriber.read() for _ in range(3)]
    assert results == [(0, 0), (1, 0), (2, 0)]
    assert subscriber.read() is None


def test_wraparound_without_loss():
    slots = make_ring(2)
    subscriber = Subscriber(slots)
    writer = _Writer(slots)
    writer.write(1)
    writer.write(2)
    assert subscriber.read() == (1, 0)
    writer.write(3)
    assert subscriber.read() == (2, 0)
    assert subscriber.read() == (3, 0)
    assert subscriber.read() is None


def test_message_loss_detection():
    slots = make_ring(2)
    subscriber = Subscriber(slots)
    writer = _Writer(slots)
    writer.write(1)
    writer.write(2)
    assert subscriber.read() == (1, 0)
    for i in range(3, 10):
        writer.write(i)
    assert subscriber.read() == (8, 6)


def test_received_plus_lost_accounts_for_every_write():
    slots = make_ring(8)
    subscriber = Subscriber(slots)
    writer = _Writer(slots)
    total = 100
    for i in range(total):
        writer.write(i)
    received = 0
    lost_total = 0
    last = None
    while (result := subscriber.read()) is not None:
        msg, lost = result
        received += 1
        lost_total += lost
        last = msg
    assert last == total - 1
    assert received + lost_total == total


def test_clone_reads_independently():
    slots = make_ring(4)
    subscriber = Subscriber(slots)
    twin = subscriber.clone()
    _Writer(slots).write(42)
    assert subscriber.read() == (42, 0)
    assert twin.read() == (42, 0)
    assert subscriber.read() is None
    assert twin.read() is None


def test_clone_keeps_position():
    slots = make_ring(4)
    writer = _Writer(slots)
    subscriber = Subscriber(slots)
    writer.write("a")
    writer.write("b")
    assert subscriber.read() == ("a", 0)
    twin = copy.copy(subscriber)
    assert twin.read() == ("b", 0)
    assert subscriber.read() == ("b", 0)


def test_reads_objects_of_any_type():
    slots = make_ring(2)
    subscriber = Subscriber(slots)
    record = {"id": 1, "data": "test"}
    _Writer(slots).write(record)
    msg, lost = subscriber.read()
    assert msg == record
    assert lost == 0


def test_iteration_yields_in_order():
    slots = make_ring(8)
    subscriber = Subscriber(slots)
    writer = _Writer(slots)
    for i in range(5):
        writer.write(i)
    seen = []
    for msg, lost in subscriber:
        assert lost == 0
        seen.append(msg)
        if msg == 4:
            break
    assert seen == [0, 1, 2, 3, 4]


def test_read_spinning_waits_for_writer_thread():
    slots = make_ring(4)
    subscriber = Subscriber(slots)
    writer = _Writer(slots)
    timer = threading.Timer(0.05, writer.write, args=("late",))
    timer.start()
    try:
        assert subscriber.read_spinning() == ("late", 0)
    finally:
        timer.join()


def test_concurrent_writer_never_yields_gaps():
    slots = make_ring(16)
    subscriber = Subscriber(slots)
    writer = _Writer(slots)
    total = 2000

    def produce():
        for i in range(total):
            writer.write(i)

    thread = threading.Thread(target=produce)
    thread.start()
    accounted = 0
    previous = -1
    while accounted < total:
        msg, lost = subscriber.read_spinning()
        accounted += 1 + lost
        assert msg > previous
        previous = msg
    thread.join()
    assert accounted == total
    assert previous == total - 1