"""Tests for the validator cache backends."""

from __future__ import annotations

import threading
import time

import pytest

from exposee.cache import (
    DiskResponseCache,
    InMemoryResponseCache,
    NullResponseCache,
    create_cache,
)
from exposee.models import CacheConfig, ExposedRecord, RequestIdentity


def _identity(url: str = "http://xy.ch/v1/exposed/1000") -> RequestIdentity:
    return RequestIdentity(url=url, headers=(("Accept", "application/x-protobuf"),))


def _batch(n: int = 2) -> list[ExposedRecord]:
    return [ExposedRecord.from_key_date(bytes([i]) * 32, 1000 * i) for i in range(n)]


@pytest.fixture()
def disk_cache(tmp_path):
    """A DiskResponseCache rooted at tmp_path."""
    c = DiskResponseCache(tmp_path)
    yield c
    c.close()


@pytest.fixture(params=["memory", "disk"])
def cache(request, tmp_path):
    """Each persistent backend in turn."""
    if request.param == "memory":
        c = InMemoryResponseCache()
    else:
        c = DiskResponseCache(tmp_path)
    yield c
    c.close()


# ------------------------------------------------------------------ #
# Shared lookup/store behaviour
# ------------------------------------------------------------------ #


class TestLookupStore:
    def test_miss_returns_none(self, cache) -> None:
        assert cache.lookup(_identity()) is None

    def test_store_then_lookup(self, cache) -> None:
        batch = _batch()
        cache.store(_identity(), "HASH", batch)
        entry = cache.lookup(_identity())
        assert entry is not None
        assert entry.validator == "HASH"
        assert list(entry.batch) == batch

    def test_store_overwrites(self, cache) -> None:
        cache.store(_identity(), "OLD", _batch(3))
        cache.store(_identity(), "NEW", [])
        entry = cache.lookup(_identity())
        assert entry.validator == "NEW"
        assert entry.batch == ()

    def test_keys_are_exact_urls(self, cache) -> None:
        cache.store(_identity("http://xy.ch/v1/exposed/1000"), "A", [])
        assert cache.lookup(_identity("http://xy.ch/v1/exposed/1000/")) is None
        assert cache.lookup(_identity("http://xy.ch/v1/exposed/1001")) is None

    def test_absent_validator_is_stored(self, cache) -> None:
        cache.store(_identity(), None, _batch(1))
        entry = cache.lookup(_identity())
        assert entry is not None
        assert entry.validator is None

    def test_invalidate(self, cache) -> None:
        cache.store(_identity(), "HASH", [])
        cache.invalidate(_identity())
        assert cache.lookup(_identity()) is None

    def test_clear(self, cache) -> None:
        cache.store(_identity("http://a/1"), "A", [])
        cache.store(_identity("http://a/2"), "B", [])
        cache.clear()
        assert cache.lookup(_identity("http://a/1")) is None
        assert cache.lookup(_identity("http://a/2")) is None


# ------------------------------------------------------------------ #
# Backend specifics
# ------------------------------------------------------------------ #


class TestNullResponseCache:
    def test_always_misses(self) -> None:
        cache = NullResponseCache()
        cache.store(_identity(), "HASH", _batch())
        assert cache.lookup(_identity()) is None


class TestInMemoryResponseCache:
    def test_len(self) -> None:
        cache = InMemoryResponseCache()
        cache.store(_identity("http://a/1"), "A", [])
        cache.store(_identity("http://a/2"), "B", [])
        assert len(cache) == 2

    def test_stored_batch_is_a_snapshot(self) -> None:
        cache = InMemoryResponseCache()
        batch = _batch(1)
        cache.store(_identity(), "A", batch)
        batch.clear()
        assert len(cache.lookup(_identity()).batch) == 1

    def test_concurrent_stores_for_distinct_identities(self) -> None:
        cache = InMemoryResponseCache()

        def worker(i: int) -> None:
            for j in range(50):
                cache.store(_identity(f"http://a/{i}/{j}"), str(j), [])

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 400


class TestDiskResponseCache:
    def test_survives_reopen(self, tmp_path) -> None:
        first = DiskResponseCache(tmp_path)
        first.store(_identity(), "HASH", _batch(2))
        first.close()

        second = DiskResponseCache(tmp_path)
        try:
            entry = second.lookup(_identity())
            assert entry.validator == "HASH"
            assert list(entry.batch) == _batch(2)
        finally:
            second.close()

    def test_ttl_expiry(self, tmp_path) -> None:
        cache = DiskResponseCache(tmp_path, ttl_seconds=1)
        try:
            cache.store(_identity(), "HASH", [])
            assert cache.lookup(_identity()) is not None
            time.sleep(1.5)
            assert cache.lookup(_identity()) is None
        finally:
            cache.close()

    def test_stats(self, disk_cache: DiskResponseCache, tmp_path) -> None:
        disk_cache.store(_identity(), "HASH", [])
        stats = disk_cache.stats()
        assert stats["size"] == 1
        assert stats["directory"] == str(tmp_path / "validators")
        assert stats["ttl_seconds"] is None

    def test_keys_are_hashed(self, disk_cache: DiskResponseCache) -> None:
        key = disk_cache._make_key(_identity())
        assert len(key) == 64
        assert key == disk_cache._make_key(_identity())


class TestCreateCache:
    def test_memory(self, tmp_path) -> None:
        assert isinstance(create_cache(CacheConfig(backend="memory"), tmp_path), InMemoryResponseCache)

    def test_none(self, tmp_path) -> None:
        assert isinstance(create_cache(CacheConfig(backend="none"), tmp_path), NullResponseCache)

    def test_disk(self, tmp_path) -> None:
        cache = create_cache(CacheConfig(backend="disk", ttl_seconds=60), tmp_path)
        try:
            assert isinstance(cache, DiskResponseCache)
            assert cache.stats()["ttl_seconds"] == 60
        finally:
            cache.close()
