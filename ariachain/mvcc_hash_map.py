"""A sharded hash map that keeps several string-versioned values per key.

For each key the versions are kept newest first. The caller is
responsible for vacuuming old versions.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
R = TypeVar("R")


class _Bucket(Generic[K, V]):
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[K, list[tuple[str, V]]] = {}


class MVCCHashMap(Generic[K, V]):
    """Multi-version hash map split into independently locked buckets."""

    def __init__(self, buckets: int = 16) -> None:
        if buckets <= 0:
            raise ValueError("buckets must be positive")
        self._buckets: list[_Bucket[K, V]] = [_Bucket() for _ in range(buckets)]

    def _apply(self, key: K, func: Callable[[dict[K, list[tuple[str, V]]]], R]) -> R:
        bucket = self._buckets[hash(key) % len(self._buckets)]
        with bucket.lock:
            return func(bucket.entries)

    def contains_key(self, key: K) -> bool:
        """Whether the key holds at least one version."""
        return self._apply(key, lambda m: bool(m.get(key)))

    def contains_key_version(self, key: K, version: str) -> bool:
        return self._apply(
            key, lambda m: any(v == version for v, _ in m.get(key, ()))
        )

    def remove_key(self, key: K) -> bool:
        """Drop the key with all its versions; return whether it existed."""
        def op(m: dict[K, list[tuple[str, V]]]) -> bool:
            return m.pop(key, None) is not None

        return self._apply(key, op)

    def remove_key_version(self, key: K, version: str) -> bool:
        """Drop one version of the key; return whether it was found."""
        def op(m: dict[K, list[tuple[str, V]]]) -> bool:
            versions = m.get(key)
            if versions is None:
                return False
            for index, (v, _) in enumerate(versions):
                if v == version:
                    del versions[index]
                    return True
            return False

        return self._apply(key, op)

    def insert_key_version(self, key: K, version: str, value: V) -> None:
        """Add ``value`` as the newest version of ``key``."""
        def op(m: dict[K, list[tuple[str, V]]]) -> None:
            m.setdefault(key, []).insert(0, (version, value))

        self._apply(key, op)

    def version_count(self, key: K) -> int:
        return self._apply(key, lambda m: len(m.get(key, ())))

    def get_key_version(self, key: K, version: str) -> V | None:
        """Return the value stored at exactly ``version``, or None."""
        def op(m: dict[K, list[tuple[str, V]]]) -> Any:
            return next((val for v, val in m.get(key, ()) if v == version), None)

        return self._apply(key, op)

    def get_key_version_prev(self, key: K, version: str) -> V | None:
        """Return the newest value whose version is below ``version``, or None."""
        def op(m: dict[K, list[tuple[str, V]]]) -> Any:
            return next((val for v, val in m.get(key, ()) if v < version), None)

        return self._apply(key, op)

    def vacuum_key_versions(self, key: K, vacuum_version: str) -> int:
        """Remove the oldest versions up to, not including, ``vacuum_version``.

        Returns the number of versions removed.
        """
        def op(m: dict[K, list[tuple[str, V]]]) -> int:
            versions = m.get(key)
            if versions is None:
                return 0
            removed = 0
            while versions and versions[-1][0] != vacuum_version:
                versions.pop()
                removed += 1
            return removed

        return self._apply(key, op)

    def vacuum_key_keep_latest(self, key: K) -> int:
        """Remove every version except the newest; return how many went."""
        def op(m: dict[K, list[tuple[str, V]]]) -> int:
            versions = m.get(key)
            if not versions:
                return 0
            removed = len(versions) - 1
            del versions[1:]
            return removed

        return self._apply(key, op)