"""Adapts the number of transactions per workload to recent epoch sizes."""

from __future__ import annotations

import os


class WorkloadSizeAdapter:
    """Keeps the transaction counts of recent epochs and derives workload bounds.

    Counts are reported by a single producer. When a new epoch starts, the
    average of the cached non-empty epochs is used to recompute the minimum
    and maximum number of transactions assigned to one workload.
    """

    CACHE_SIZE = 5
    INITIAL_EPOCH_COUNT = 3000
    # The most transactions assigned to a worker.
    RECOMMEND_MAX_TX = 1000
    # The fewest transactions assigned to a worker.
    RECOMMEND_MIN_TX = 500
    # The most transactions the coordinator buffers.
    RECOMMEND_MAX_BUFFER = 5000
    # Minimum transaction count per workload.
    MIN_TX_THRESHOLD = 5

    def __init__(self, aggregate_server_count: int = 1, core_count: int | None = None) -> None:
        if aggregate_server_count <= 0:
            raise ValueError("aggregate_server_count must be positive")
        if core_count is None:
            # Half of the processors are left for block generation.
            core_count = (os.cpu_count() or 1) // 2 + 1
        if core_count <= 0:
            raise ValueError("core_count must be positive")
        self._aggregate_server_count = aggregate_server_count
        self._core_count = core_count
        # Start from 1, not 0, to stay consistent with the first epoch.
        self._cache_epoch = 1
        self._cache_counts = [self.INITIAL_EPOCH_COUNT] * self.CACHE_SIZE
        self._min_tx = self.RECOMMEND_MIN_TX
        self._max_tx = self.RECOMMEND_MAX_TX

    def set_aggregate_server_count(self, count: int) -> None:
        if count <= 0:
            raise ValueError("count must be positive")
        self._aggregate_server_count = count

    def set_last_epoch_tx_count(self, epoch: int, count: int) -> None:
        """Record ``count`` transactions for ``epoch``.

        Epochs must be reported in order; skipping one raises ValueError.
        """
        slot = epoch % self.CACHE_SIZE
        if epoch == self._cache_epoch:
            self._cache_counts[slot] += count
            return
        if epoch != self._cache_epoch + 1:
            raise ValueError(
                f"epoch {epoch} does not follow the cached epoch {self._cache_epoch}"
            )
        self._calculate_best_workload_size()
        self._cache_epoch = epoch
        self._cache_counts[slot] = count

    @property
    def min_tx_per_workload(self) -> int:
        return self._min_tx

    @property
    def max_tx_per_workload(self) -> int:
        return self._max_tx

    @property
    def max_buffer_size(self) -> int:
        return self.RECOMMEND_MAX_BUFFER

    def _calculate_best_workload_size(self) -> None:
        non_empty = [count for count in self._cache_counts if count != 0]
        if not non_empty:
            return
        average = sum(non_empty) / len(non_empty)
        servers_cores = self._aggregate_server_count * self._core_count
        min_factor = average / (servers_cores * self.RECOMMEND_MAX_TX) + 1
        max_factor = average / (servers_cores * self.RECOMMEND_MIN_TX) + 1
        min_tmp = average / (self._core_count * max_factor)
        max_tmp = average / (self._core_count * min_factor)
        min_tmp = max(min_tmp, float(self.MIN_TX_THRESHOLD))
        self._min_tx = int(min_tmp)
        self._max_tx = int(min_tmp if max_tmp < min_tmp else max_tmp)