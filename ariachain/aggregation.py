"""Aggregating transaction results across the servers of one cluster.

Each server runs only the transactions whose id maps to it. The results
of those are broadcast to the other servers, and the results received
from them are merged into the transactions this server only listens to.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Protocol, TypeVar

from ariachain.coordinator import AriaCoordinator, Workload, _SizeAdapter


class _AggregatedTransaction(Protocol):
    epoch: int
    transaction_id: int
    result: Any
    rw_set: Any


T = TypeVar("T", bound=_AggregatedTransaction)


def local_id_from_ips(local_ip: str, cluster_ips: Iterable[str]) -> int:
    """Return this server's position in the cluster.

    The position is the number of cluster addresses that sort before the
    local one, so every server derives the same order.
    """
    return sum(1 for ip in cluster_ips if ip < local_ip)


@dataclass
class ExchangeNode:
    """The outcome of one transaction as sent to the other servers."""

    tid: int
    result: Any
    rwset: Any


@dataclass
class AggregationExchange:
    """All transaction outcomes of one server for one epoch."""

    epoch: int
    nodes: list[ExchangeNode] = field(default_factory=list)


class AggregationBroadcaster(Generic[T]):
    """Tracks which transactions are run here and which are merged from peers."""

    def __init__(self, local_id: int, total_server_count: int) -> None:
        if total_server_count <= 0:
            raise ValueError("total_server_count must be positive")
        if not 0 <= local_id < total_server_count:
            raise ValueError("local_id must lie in [0, total_server_count)")
        self._local_id = local_id
        self._total_server_count = total_server_count
        self._broadcast_epoch = 0
        self._listen: dict[int, dict[int, T]] = {}
        self._broadcast: dict[int, dict[int, T]] = {}
        # Called with (transaction_id, rw_set) for every merged transaction.
        self.buffer_updates: Callable[[int, Any], None] | None = None

    @property
    def local_id(self) -> int:
        return self._local_id

    @property
    def total_server_count(self) -> int:
        return self._total_server_count

    @property
    def broadcast_epoch(self) -> int:
        return self._broadcast_epoch

    def is_local_transaction(self, transaction_id: int) -> bool:
        """Whether this server is the one that executes the transaction."""
        return transaction_id % self._total_server_count == self._local_id

    def _add(self, table: dict[int, dict[int, T]], transaction: T) -> bool:
        if transaction.epoch <= self._broadcast_epoch:
            raise ValueError(
                f"epoch {transaction.epoch} has already been broadcast"
            )
        epoch_table = table.setdefault(transaction.epoch, {})
        if transaction.transaction_id in epoch_table:
            raise ValueError(
                f"transaction {transaction.transaction_id} is already registered"
            )
        epoch_table[transaction.transaction_id] = transaction
        return True

    def add_broadcast_transaction(self, transaction: T) -> bool:
        """Register a transaction executed by this server."""
        return self._add(self._broadcast, transaction)

    def add_listen_transaction(self, transaction: T) -> bool:
        """Register a transaction whose outcome comes from another server."""
        return self._add(self._listen, transaction)

    def collect_broadcast(self, epoch: int) -> AggregationExchange | None:
        """Build the exchange to send for ``epoch``.

        Returns None when the epoch has already been broadcast.
        """
        if epoch < self._broadcast_epoch:
            raise ValueError(
                f"epoch {epoch} is older than the broadcast epoch {self._broadcast_epoch}"
            )
        if epoch == self._broadcast_epoch:
            return None
        self._broadcast_epoch = epoch
        transactions = self._broadcast.pop(epoch, {})
        return AggregationExchange(
            epoch=epoch,
            nodes=[
                ExchangeNode(tid=tid, result=tx.result, rwset=tx.rw_set)
                for tid, tx in sorted(transactions.items())
            ],
        )

    def apply_exchange(self, exchange: AggregationExchange) -> list[T]:
        """Merge a peer's exchange into the listened transactions; return them."""
        if exchange.epoch != self._broadcast_epoch:
            raise ValueError(
                f"exchange for epoch {exchange.epoch} does not match "
                f"the broadcast epoch {self._broadcast_epoch}"
            )
        current = self._listen.get(exchange.epoch, {})
        updated: list[T] = []
        for node in exchange.nodes:
            if node.tid not in current:
                raise KeyError(node.tid)
            transaction = current[node.tid]
            transaction.result = node.result
            transaction.rw_set = node.rwset
            if self.buffer_updates is not None:
                self.buffer_updates(transaction.transaction_id, transaction.rw_set)
            updated.append(transaction)
        return updated

    def finish_epoch(self, epoch: int) -> int:
        """Forget the listened transactions of ``epoch``; return how many there were."""
        return len(self._listen.pop(epoch, {}))


class AggregationCoordinator(AriaCoordinator[T]):
    """Coordinator that runs local transactions and queues the rest for merging.

    Once the local transactions of the current epoch are assigned, the
    transactions merged from peers are handed out as aggregation workloads.
    """

    def __init__(
        self,
        startup_epoch: int,
        broadcaster: AggregationBroadcaster[T],
        size_adapter: _SizeAdapter | None = None,
    ) -> None:
        super().__init__(startup_epoch, size_adapter)
        self._broadcaster = broadcaster
        self._aggregation_queue: deque[T] = deque()
        set_count = getattr(self.size_adapter, "set_aggregate_server_count", None)
        if set_count is not None:
            set_count(broadcaster.total_server_count)

    @property
    def broadcaster(self) -> AggregationBroadcaster[T]:
        return self._broadcaster

    def create_workload(self) -> Workload[T] | None:
        """Cut the next workload of local transactions, or an aggregation workload."""
        transaction = self._queue.front()
        if transaction.epoch > self.current_epoch:
            return self.create_aggregation_workload()
        workload: Workload[T] = Workload(epoch=transaction.epoch)
        adapter = self.size_adapter
        while True:
            if self._broadcaster.is_local_transaction(transaction.transaction_id):
                self._broadcaster.add_broadcast_transaction(transaction)
                workload.transactions.append(transaction)
            else:
                self._broadcaster.add_listen_transaction(transaction)
                self._aggregation_queue.append(transaction)
            self._queue.pop()
            transaction = self._queue.front()
            size = len(workload.transactions)
            if not (
                (size <= adapter.min_tx_per_workload or not self._queue.empty())
                and transaction.epoch <= self.current_epoch
                and size < adapter.max_tx_per_workload
            ):
                break
        if not workload.transactions:
            return self.create_aggregation_workload()
        return workload

    def create_aggregation_workload(self) -> Workload[T] | None:
        """Hand out queued transactions from peers; None when none are left."""
        limit = self.size_adapter.max_tx_per_workload
        batch: list[T] = []
        while self._aggregation_queue and len(batch) < limit:
            batch.append(self._aggregation_queue.popleft())
        if not batch:
            return None
        return Workload(epoch=batch[0].epoch, transactions=batch, aggregation_workload=True)