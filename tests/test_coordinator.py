import threading
import time
from dataclasses import dataclass

import pytest

from ariachain.coordinator import AriaCoordinator, TransactionQueue, Workload


@dataclass
class Tx:
    epoch: int
    transaction_id: int


class FixedAdapter:
    def __init__(self, min_tx, max_tx):
        self.min_tx_per_workload = min_tx
        self.max_tx_per_workload = max_tx
        self.reported = []

    def set_last_epoch_tx_count(self, epoch, count):
        self.reported.append((epoch, count))


def make_txs(epoch, count, start=0):
    return [Tx(epoch, start + i) for i in range(count)]


def test_queue_empty_initially():
    q = TransactionQueue()
    assert q.empty() is True


def test_queue_front_does_not_remove():
    q = TransactionQueue()
    a, b = Tx(1, 1), Tx(1, 2)
    q.push(a)
    q.push(b)
    assert q.front() is a
    assert q.front() is a
    assert q.pop() is a
    assert q.pop() is b
    assert q.empty() is True


def test_queue_push_bulk_keeps_order():
    q = TransactionQueue()
    txs = make_txs(1, 4)
    q.push_bulk(txs)
    assert [q.pop() for _ in txs] == txs


def test_queue_empty_then_pop_returns_peeked():
    q = TransactionQueue()
    tx = Tx(1, 7)
    q.push(tx)
    assert q.empty() is False
    assert q.pop() is tx


def test_queue_front_waits_for_producer():
    q = TransactionQueue()
    tx = Tx(3, 9)

    def produce():
        time.sleep(0.05)
        q.push(tx)

    thread = threading.Thread(target=produce)
    thread.start()
    assert q.front() is tx
    thread.join()


def test_workload_length():
    workload = Workload(epoch=1, transactions=make_txs(1, 3))
    assert len(workload) == 3
    assert workload.aggregation_workload is False


def test_add_empty_batch_returns_zero():
    adapter = FixedAdapter(1, 10)
    coord = AriaCoordinator(1, adapter)
    assert coord.add_transaction([]) == 0
    assert adapter.reported == []


def test_add_reports_count_to_adapter():
    adapter = FixedAdapter(1, 10)
    coord = AriaCoordinator(1, adapter)
    assert coord.add_transaction(make_txs(1, 4)) == 4
    assert adapter.reported == [(1, 4)]


def test_add_with_skipped_epoch_raises_with_default_adapter():
    coord = AriaCoordinator(1)
    with pytest.raises(ValueError):
        coord.add_transaction(make_txs(3, 2))


def test_workload_collects_current_epoch_only():
    coord = AriaCoordinator(1)
    first = make_txs(1, 3)
    coord.add_transaction(first)
    coord.add_transaction(make_txs(2, 1, start=100))
    workload = coord.create_workload()
    assert workload.epoch == 1
    assert workload.transactions == first
    assert coord.create_workload() is None


def test_workloads_respect_max_size():
    adapter = FixedAdapter(1, 2)
    coord = AriaCoordinator(1, adapter)
    txs = make_txs(1, 5)
    coord.add_transaction(txs)
    coord.add_transaction(make_txs(2, 1, start=50))
    workloads = list(coord.epoch_workloads())
    assert all(len(w) <= adapter.max_tx_per_workload for w in workloads)
    assert [t for w in workloads for t in w.transactions] == txs
    assert all(w.epoch == 1 for w in workloads)


def test_future_epoch_front_gives_no_workload():
    coord = AriaCoordinator(1, FixedAdapter(1, 10))
    coord.add_transaction(make_txs(2, 2))
    assert coord.create_workload() is None
    assert list(coord.epoch_workloads()) == []


def test_finish_epoch_signals_and_advances():
    coord = AriaCoordinator(5, FixedAdapter(1, 10))
    seen = []
    coord.epoch_transaction_finish_signal = seen.append
    assert coord.finish_epoch() == 5
    assert seen == [5]
    assert coord.current_epoch == 6


def test_epochs_processed_in_sequence():
    adapter = FixedAdapter(1, 10)
    coord = AriaCoordinator(1, adapter)
    e1 = make_txs(1, 2)
    e2 = make_txs(2, 3, start=10)
    coord.add_transaction(e1)
    coord.add_transaction(e2)
    coord.add_transaction(make_txs(3, 1, start=20))
    got1 = [t for w in coord.epoch_workloads() for t in w.transactions]
    coord.finish_epoch()
    got2 = [t for w in coord.epoch_workloads() for t in w.transactions]
    assert got1 == e1
    assert got2 == e2


def test_stop_marks_finished():
    coord = AriaCoordinator(1, FixedAdapter(1, 10))
    assert coord.finished is False
    coord.stop()
    assert coord.finished is True