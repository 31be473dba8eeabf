import threading

import pytest

from ariachain.lru_cache import KeyNotFound, LRUCache


def test_defaults():
    cache = LRUCache()
    assert cache.max_size == 64
    assert cache.elasticity == 10
    assert cache.max_allowed_size == cache.max_size + cache.elasticity


def test_insert_and_lookup():
    cache = LRUCache(4, 2)
    cache.insert("a", 1)
    assert cache["a"] == 1
    assert cache.get("a") == 1
    assert "a" in cache
    assert len(cache) == 1


def test_missing_key_raises():
    cache = LRUCache(4, 2)
    cache.insert("a", 1)
    with pytest.raises(KeyNotFound) as excinfo:
        cache["nope"]
    assert isinstance(excinfo.value, KeyError)
    assert "nope" not in cache
    assert len(cache) == 1
    assert list(cache) == ["a"]


def test_get_default():
    cache = LRUCache(4, 2)
    sentinel = object()
    assert cache.get("x", sentinel) is sentinel
    assert cache.get("x") is None


def test_insert_existing_updates_value():
    cache = LRUCache(4, 2)
    cache.insert("a", 1)
    cache.insert("a", 2)
    assert cache["a"] == 2
    assert len(cache) == 1


def test_grows_until_hard_limit_then_prunes():
    cache = LRUCache(3, 2)
    keys = ["a", "b", "c", "d"]
    for k in keys:
        cache.insert(k, k.upper())
    assert len(cache) == len(keys)
    cache.insert("e", "E")
    assert len(cache) == cache.max_size
    assert list(cache) == ["e", "d", "c"]
    assert "a" not in cache and "b" not in cache


def test_recently_used_survives_prune():
    cache = LRUCache(2, 1)
    cache.insert("a", 1)
    cache.insert("b", 2)
    assert cache["a"] == 1  # refresh a
    cache.insert("c", 3)
    assert "a" in cache
    assert "c" in cache
    assert "b" not in cache


def test_get_refreshes_order():
    cache = LRUCache(10, 0)
    cache.insert("a", 1)
    cache.insert("b", 2)
    cache.get("a")
    assert list(cache) == ["a", "b"]


def test_contains_does_not_refresh():
    cache = LRUCache(10, 0)
    cache.insert("a", 1)
    cache.insert("b", 2)
    assert "a" in cache
    assert list(cache) == ["b", "a"]


def test_unbounded_when_max_size_zero():
    cache = LRUCache(0, 0)
    items = list(range(200))
    for i in items:
        cache.insert(i, i)
    assert len(cache) == len(items)


def test_remove():
    cache = LRUCache(4, 2)
    cache.insert("a", 1)
    assert cache.remove("a") is True
    assert cache.remove("a") is False
    assert "a" not in cache


def test_clear():
    cache = LRUCache(4, 2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    cache.clear()
    assert len(cache) == 0
    assert list(cache) == []


def test_items_most_recent_first():
    cache = LRUCache(4, 2)
    cache.insert("a", 1)
    cache.insert("b", 2)
    assert cache.items() == [("b", 2), ("a", 1)]


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        LRUCache(-1, 0)


def test_with_real_lock_from_threads():
    cache = LRUCache(1000, 10, lock=threading.Lock())

    def worker(base):
        for i in range(100):
            cache.insert(base + i, i)

    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(cache) == 500
    assert cache[250] == 50