import threading

import pytest

from folio_assistant.data.bounded_cache import BoundedCache


class TestBoundedCache:
    def test_get_missing_returns_none(self):
        cache: BoundedCache[str, int] = BoundedCache(2)
        assert cache.get("nope") is None

    def test_evicts_least_recently_used(self):
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        assert "a" not in cache
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_get_promotes_entry(self):
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("a") == 1
        assert "b" not in cache

    def test_overwrite_keeps_size(self):
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)

        assert len(cache) == 2
        assert cache.get("a") == 10
        assert cache.get("b") == 2

    def test_overwrite_promotes_entry(self):
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)

        assert "b" not in cache
        assert "a" in cache

    def test_clear(self):
        cache: BoundedCache[str, int] = BoundedCache(3)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()

        assert len(cache) == 0
        assert cache.get("a") is None

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            BoundedCache(0)

    def test_concurrent_access_stays_bounded(self):
        cache: BoundedCache[int, int] = BoundedCache(8)
        sizes: list[int] = []

        def worker(offset: int) -> None:
            for i in range(500):
                cache.set(offset + i, i)
                if offset + i in cache:
                    sizes.append(len(cache))

        threads = [threading.Thread(target=worker, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 8
        assert max(sizes) <= 8
