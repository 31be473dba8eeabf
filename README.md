# ariachain

Building blocks for an epoch-based transaction pipeline. Transactions arrive
tagged with an epoch and are cut into workloads, one epoch at a time. When
servers share the work, each server runs only the transactions it owns and
merges the outcomes that its peers send it.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `ariachain.lru_cache`: `LRUCache` is a least-recently-used cache. It may
  grow to `max_size + elasticity` entries (`max_allowed_size`). When it
  reaches that size it is pruned back to `max_size` by dropping the least
  recently used entries. A `max_size` of 0 means no limit. Lookups with
  `cache[key]` raise `KeyNotFound` (a `KeyError`) for a missing key.
  `get(key, default)` returns the default instead. Iteration and `items()`
  go from most to least recently used. If you pass a lock such as
  `threading.Lock()`, every operation holds it.
- `ariachain.mvcc_hash_map`: `MVCCHashMap` maps each key to a list of
  string-versioned values, newest first. Keys are spread over buckets, each
  with its own lock. It provides:
  - `insert_key_version`, `get_key_version`, `get_key_version_prev` (the
    newest value whose version is below the given one),
    `contains_key_version`, `remove_key_version` and `version_count`;
  - `vacuum_key_versions`, which drops the oldest versions up to a given one;
  - `vacuum_key_keep_latest`.
- `ariachain.orm`: the `ORMFieldType`, `NumFilter` and `StrFilter` enums,
  field classes `ORMField`, `CharField` (with `max_length`) and `IntField`,
  and `ORMTable`, an ordered list of fields. `get_field(index)` returns
  `None` when the index is out of range.
- `ariachain.workload_size_adapter`: `WorkloadSizeAdapter` records
  per-epoch transaction counts with `set_last_epoch_tx_count`. Epochs must be
  reported in order; skipping one raises `ValueError`. When an epoch starts,
  the adapter recomputes `min_tx_per_workload` and `max_tx_per_workload` from
  the average of the recent non-empty epochs, the number of servers and the
  number of cores.
- `ariachain.net_topology`: `NetTopologyManager` maps node ids to IP
  addresses. An unknown node resolves to an empty string.
- `ariachain.batch_divider`: `divide_transaction_batch(transactions,
  divide_count)` splits a batch by `transaction_id & (divide_count - 1)`.
  `divide_count` is meant to be a power of two.
- `ariachain.coordinator`:
  - `Workload` is a dataclass holding `epoch`, `transactions` and
    `aggregation_workload`.
  - `TransactionQueue` is a single-producer, single-consumer queue with a
    blocking `front()`.
  - `AriaCoordinator` cuts the current epoch's transactions into workloads.
    Use `create_workload()` or the `epoch_workloads()` generator, then call
    `finish_epoch()` to move to the next epoch. `finish_epoch()` also calls
    `epoch_transaction_finish_signal`, if that is set.
- `ariachain.aggregation`:
  - `local_id_from_ips` gives a server's position in its cluster.
  - `AggregationBroadcaster` keeps apart the transactions a server executes
    (`add_broadcast_transaction`) and those it listens for
    (`add_listen_transaction`). It builds the `AggregationExchange` of
    `ExchangeNode`s to send for an epoch (`collect_broadcast`) and merges a
    peer's exchange (`apply_exchange`). It calls the optional
    `buffer_updates` callback for every merged transaction.
  - `AggregationCoordinator` runs the local transactions first. It then
    hands out the merged ones as aggregation workloads.

## Examples

```python
from ariachain.lru_cache import LRUCache, KeyNotFound

cache = LRUCache(max_size=2, elasticity=1)
cache.insert("a", 1)
cache.insert("b", 2)
cache.insert("c", 3)      # reaches the hard limit; pruned back to 2 entries
assert "a" not in cache
assert cache["c"] == 3

try:
    cache["missing"]
except KeyNotFound:
    pass
```

```python
from dataclasses import dataclass
from ariachain.coordinator import AriaCoordinator

@dataclass
class Tx:
    epoch: int

coordinator = AriaCoordinator(startup_epoch=1)
coordinator.add_transaction([Tx(1), Tx(1), Tx(1)])
coordinator.add_transaction([Tx(2)])

workloads = list(coordinator.epoch_workloads())
assert [len(w) for w in workloads] == [3]
assert coordinator.finish_epoch() == 1
assert coordinator.current_epoch == 2
```

`create_workload()` waits while the queue is empty. An epoch is over only
once a transaction of a later epoch is at the front of the queue.

```python
from ariachain.aggregation import local_id_from_ips

assert local_id_from_ips("10.0.0.2", ["10.0.0.1", "10.0.0.2", "10.0.0.3"]) == 1
```

## What the package does not do

There is no networking, no worker threads and no storage. The aggregation
classes build and apply `AggregationExchange` objects, but sending them
between servers is up to the caller. Likewise the caller runs the
transactions in each `Workload`. No command-line program is installed.