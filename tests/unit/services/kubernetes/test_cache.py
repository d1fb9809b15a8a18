"""Unit tests for ResourceCache."""

from __future__ import annotations

import pytest

from flux_inventory.services.kubernetes.cache import CacheKey, ResourceCache


class FakeClock:
    """Manually advanced time source."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.mark.unit
class TestResourceCache:
    """Tests for ResourceCache."""

    def test_get_missing(self, clock: FakeClock) -> None:
        assert ResourceCache(5, clock).get(CacheKey("prod", "Kustomization")) is None

    def test_entry_expires_after_ttl(self, clock: FakeClock) -> None:
        cache = ResourceCache(5, clock)
        key = CacheKey("prod", "Kustomization")
        cache.set(key, ["apps"])

        clock.now += 4.9
        assert cache.get(key) == ["apps"]

        clock.now = 105.0
        assert cache.get(key) is None
        assert len(cache) == 0

    def test_zero_ttl_stores_nothing(self, clock: FakeClock) -> None:
        cache = ResourceCache(0, clock)
        cache.set(CacheKey("prod", "Kustomization"), [])

        assert len(cache) == 0
        assert cache.ttl == 0

    def test_keys_include_namespace(self, clock: FakeClock) -> None:
        cache = ResourceCache(5, clock)
        cache.set(CacheKey("prod", "HelmRelease", "web"), ["nginx"])

        assert cache.get(CacheKey("prod", "HelmRelease")) is None
        assert cache.get(CacheKey("prod", "HelmRelease", "web")) == ["nginx"]

    def test_invalidate_one_cluster(self, clock: FakeClock) -> None:
        cache = ResourceCache(5, clock)
        cache.set(CacheKey("prod", "Kustomization"), [])
        cache.set(CacheKey("prod", "HelmRelease"), [])
        cache.set(CacheKey("staging", "Kustomization"), [])

        assert cache.invalidate("prod") == 2
        assert cache.get(CacheKey("staging", "Kustomization")) == []
        assert len(cache) == 1

    def test_invalidate_all(self, clock: FakeClock) -> None:
        cache = ResourceCache(5, clock)
        cache.set(CacheKey("prod", "Kustomization"), [])
        cache.set(CacheKey("staging", "Kustomization"), [])

        assert cache.invalidate() == 2
        assert len(cache) == 0
