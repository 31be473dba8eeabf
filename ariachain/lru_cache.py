"""A least-recently-used cache with a soft and a hard size limit."""

from __future__ import annotations

import contextlib
from collections import OrderedDict
from typing import Any, ContextManager, Generic, Hashable, Iterator, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class KeyNotFound(KeyError):
    """Raised when a key that is not cached is looked up."""

    def __init__(self, key: Any = None) -> None:
        super().__init__("key_not_found" if key is None else key)


class LRUCache(Generic[K, V]):
    """LRU cache that may grow to ``max_size + elasticity`` entries.

    Once the hard limit is reached it is pruned back to ``max_size``,
    dropping the least recently used entries first. ``max_size == 0``
    means the cache is unbounded. Pass a lock (for example
    ``threading.Lock()``) to make the cache safe to share between threads.
    """

    def __init__(
        self,
        max_size: int = 64,
        elasticity: int = 10,
        lock: ContextManager[Any] | None = None,
    ) -> None:
        if max_size < 0 or elasticity < 0:
            raise ValueError("max_size and elasticity must not be negative")
        self._max_size = max_size
        self._elasticity = elasticity
        self._lock: ContextManager[Any] = lock if lock is not None else contextlib.nullcontext()
        # The most recently used entry is kept at the end.
        self._entries: OrderedDict[K, V] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __getitem__(self, key: K) -> V:
        with self._lock:
            try:
                self._entries.move_to_end(key)
            except KeyError:
                raise KeyNotFound(key) from None
            return self._entries[key]

    def __iter__(self) -> Iterator[K]:
        """Iterate over the keys, most recently used first."""
        with self._lock:
            keys = list(reversed(self._entries))
        return iter(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def insert(self, key: K, value: V) -> None:
        """Store ``value`` under ``key`` and mark it most recently used."""
        with self._lock:
            if key in self._entries:
                self._entries[key] = value
                self._entries.move_to_end(key)
                return
            self._entries[key] = value
            self._prune()

    def get(self, key: K, default: Any = None) -> V | Any:
        """Return the cached value, refreshing it, or ``default`` if absent."""
        with self._lock:
            value = self._entries.get(key, _MISSING)
            if value is _MISSING:
                return default
            self._entries.move_to_end(key)
            return value

    def remove(self, key: K) -> bool:
        """Drop ``key``; return whether it was present."""
        with self._lock:
            return self._entries.pop(key, _MISSING) is not _MISSING

    def items(self) -> list[tuple[K, V]]:
        """Return the cached pairs, most recently used first."""
        with self._lock:
            return list(reversed(self._entries.items()))

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def elasticity(self) -> int:
        return self._elasticity

    @property
    def max_allowed_size(self) -> int:
        return self._max_size + self._elasticity

    def _prune(self) -> int:
        if self._max_size == 0 or len(self._entries) < self.max_allowed_size:
            return 0
        removed = 0
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)
            removed += 1
        return removed