"""Epoch-based coordination: batching queued transactions into workloads."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Iterator, Protocol, TypeVar

from ariachain.workload_size_adapter import WorkloadSizeAdapter


class _HasEpoch(Protocol):
    epoch: int


T = TypeVar("T", bound=_HasEpoch)


class _SizeAdapter(Protocol):
    @property
    def min_tx_per_workload(self) -> int: ...

    @property
    def max_tx_per_workload(self) -> int: ...

    def set_last_epoch_tx_count(self, epoch: int, count: int) -> None: ...


@dataclass
class Workload(Generic[T]):
    """A batch of transactions of one epoch, handed to a single worker."""

    epoch: int
    transactions: list[T] = field(default_factory=list)
    aggregation_workload: bool = False

    def __len__(self) -> int:
        return len(self.transactions)


class TransactionQueue(Generic[T]):
    """A queue with a blocking peek, for one producer and one consumer."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[T] = queue.SimpleQueue()
        self._front: T | None = None

    def front(self) -> T:
        """Return the oldest transaction without removing it, waiting for one."""
        if self._front is None:
            self._front = self._queue.get()
        return self._front

    def push(self, transaction: T) -> None:
        self._queue.put(transaction)

    def push_bulk(self, transactions: Iterable[T]) -> None:
        for transaction in transactions:
            self._queue.put(transaction)

    def pop(self) -> T:
        """Remove and return the oldest transaction, waiting for one."""
        if self._front is not None:
            value, self._front = self._front, None
            return value
        return self._queue.get()

    def empty(self) -> bool:
        """Whether no transaction is available right now."""
        if self._front is not None:
            return False
        try:
            self._front = self._queue.get_nowait()
        except queue.Empty:
            return True
        return False


class AriaCoordinator(Generic[T]):
    """Groups the transactions of the current epoch into workloads.

    Transactions are added in epoch order. Workloads are cut from the
    queue for the current epoch until a transaction of a later epoch
    shows up at the front; the epoch is then finished and the coordinator
    moves on to the next one.
    """

    def __init__(self, startup_epoch: int, size_adapter: _SizeAdapter | None = None) -> None:
        self._current_epoch = startup_epoch
        self._finished = False
        self._size_adapter: _SizeAdapter = (
            size_adapter if size_adapter is not None else WorkloadSizeAdapter()
        )
        self._queue: TransactionQueue[T] = TransactionQueue()
        self.epoch_transaction_finish_signal: Callable[[int], None] | None = None

    @property
    def current_epoch(self) -> int:
        return self._current_epoch

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def size_adapter(self) -> _SizeAdapter:
        return self._size_adapter

    def stop(self) -> None:
        """Ask the coordinator to stop after the current epoch."""
        self._finished = True

    def add_transaction(self, transactions: Iterable[T]) -> int:
        """Queue a batch of transactions of one epoch; return how many were added."""
        batch = list(transactions)
        if not batch:
            return 0
        self._size_adapter.set_last_epoch_tx_count(batch[0].epoch, len(batch))
        self._queue.push_bulk(batch)
        return len(batch)

    def create_workload(self) -> Workload[T] | None:
        """Cut the next workload of the current epoch.

        Returns None once the front of the queue belongs to a later epoch;
        waits while the queue is empty.
        """
        transaction = self._queue.front()
        if transaction.epoch > self._current_epoch:
            return None
        workload: Workload[T] = Workload(epoch=transaction.epoch)
        adapter = self._size_adapter
        while True:
            workload.transactions.append(transaction)
            self._queue.pop()
            transaction = self._queue.front()
            size = len(workload.transactions)
            if not (
                (size <= adapter.min_tx_per_workload or not self._queue.empty())
                and transaction.epoch <= self._current_epoch
                and size < adapter.max_tx_per_workload
            ):
                break
        return workload

    def epoch_workloads(self) -> Iterator[Workload[T]]:
        """Yield workloads until every transaction of the current epoch is assigned."""
        while (workload := self.create_workload()) is not None:
            yield workload

    def finish_epoch(self) -> int:
        """Announce the current epoch as done and advance; return the finished epoch."""
        epoch = self._current_epoch
        if self.epoch_transaction_finish_signal is not None:
            self.epoch_transaction_finish_signal(epoch)
        self._current_epoch = epoch + 1
        return epoch