from __future__ import annotations

import pytest

from cornerfx.cache import LRUCache


def test_lru_cache_evicts_oldest():
    cache: LRUCache[str, int] = LRUCache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert len(cache) == 2


def test_lru_cache_get_or_compute_runs_once():
    cache: LRUCache[int, float] = LRUCache()
    calls = []

    def compute() -> float:
        calls.append(1)
        return 2.5

    assert cache.get_or_compute(7, compute) == 2.5
    assert cache.get_or_compute(7, compute) == 2.5
    assert len(calls) == 1
    cache.clear()
    assert len(cache) == 0


def test_lru_cache_rejects_non_positive_size():
    with pytest.raises(ValueError):
        LRUCache(max_size=0)
