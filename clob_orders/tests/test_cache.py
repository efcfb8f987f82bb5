"""Tests for cache module."""

import time

import pytest

from ..exceptions import ValidationError
from ..trading.market_data import CachingMarketData
from ..utils.cache import TTLCache
from .fakes import FakeMarketData, SyncMarketData


def test_ttl_cache_basic():
    """Test basic cache operations."""
    cache = TTLCache(default_ttl=1.0)

    cache.set("key1", "value1")
    assert cache.get("key1") == "value1"
    assert cache.get("missing") is None

    cache.set("key2", "value2", ttl=0.1)
    time.sleep(0.2)
    assert cache.get("key2") is None


def test_ttl_cache_keeps_falsy_values_but_not_none():
    cache = TTLCache()
    cache.set("neg_risk", False)
    cache.set("fee", 0)
    cache.set("nothing", None)

    assert cache.get("neg_risk") is False
    assert cache.get("fee") == 0
    assert cache.size() == 2


def test_ttl_cache_lru_eviction():
    cache = TTLCache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)

    assert cache.get("a") == 1
    assert cache.get("b") is None
    assert cache.get("c") == 3


def test_ttl_cache_delete_clear_cleanup():
    cache = TTLCache()
    cache.set("a", 1)
    cache.set("b", 2, ttl=0.05)
    cache.delete("a")
    assert cache.get("a") is None

    time.sleep(0.1)
    assert cache.cleanup_expired() == 1
    assert cache.size() == 0

    cache.set("c", 3)
    cache.clear()
    assert cache.size() == 0


class TestCachingMarketData:
    """Metadata memoization in front of a source."""

    @pytest.mark.asyncio
    async def test_metadata_cached_books_live(self):
        source = FakeMarketData(tick_size="0.001", neg_risk=True, fee_rate_bps=0)
        cached = CachingMarketData(source)

        for _ in range(2):
            assert await cached.get_tick_size("1") == "0.001"
            assert await cached.get_neg_risk("1") is True
            assert await cached.get_fee_rate_bps("1") == 0
            await cached.get_order_book("1")

        assert source.calls == ["tick_size", "neg_risk", "fee_rate", "order_book", "order_book"]

    @pytest.mark.asyncio
    async def test_wraps_sync_sources(self):
        source = SyncMarketData()
        cached = CachingMarketData(source)

        assert await cached.get_tick_size("1") == "0.01"
        assert await cached.get_tick_size("1") == "0.01"
        assert source.calls == ["tick_size"]

    @pytest.mark.asyncio
    async def test_errors_propagate_and_are_not_cached(self):
        source = FakeMarketData(fail_on="tick_size")
        cached = CachingMarketData(source)

        with pytest.raises(RuntimeError):
            await cached.get_tick_size("1")

        source.fail_on = None
        assert await cached.get_tick_size("1") == "0.01"
        assert source.calls == ["tick_size", "tick_size"]

    @pytest.mark.asyncio
    async def test_neg_risk_validated_before_caching(self):
        source = FakeMarketData(neg_risk={"neg_risk": True})
        cached = CachingMarketData(source)

        with pytest.raises(ValidationError):
            await cached.get_neg_risk("1")
        assert cached.cache.size() == 0

        source.neg_risk = "false"
        assert await cached.get_neg_risk("1") is False
        assert await cached.get_neg_risk("1") is False
        assert source.calls == ["neg_risk", "neg_risk"]

        with pytest.raises(ValidationError):
            cached.set_neg_risk("2", None)

    @pytest.mark.asyncio
    async def test_manual_set_and_invalidate(self):
        source = FakeMarketData()
        cached = CachingMarketData(source)

        cached.set_tick_size("1", "0.001")
        cached.set_neg_risk("1", True)
        cached.set_fee_rate("1", 5)
        assert await cached.get_tick_size("1") == "0.001"
        assert await cached.get_neg_risk("1") is True
        assert await cached.get_fee_rate_bps("1") == 5
        assert source.calls == []

        cached.invalidate("1")
        assert await cached.get_tick_size("1") == "0.01"
        assert source.calls == ["tick_size"]

    @pytest.mark.asyncio
    async def test_cleanup_drops_expired(self):
        cached = CachingMarketData(FakeMarketData(), ttl=0.05)
        await cached.get_tick_size("1")
        await cached.get_neg_risk("1")

        time.sleep(0.1)
        assert cached.cleanup() == 2
