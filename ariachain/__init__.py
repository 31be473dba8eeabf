"""Epoch-based transaction coordination: caches, ORM definitions, workload sizing and aggregation."""

__version__ = "0.1.0"

__all__ = [
    "aggregation",
    "batch_divider",
    "coordinator",
    "lru_cache",
    "mvcc_hash_map",
    "net_topology",
    "orm",
    "workload_size_adapter",
]