"""Tests for cache statistics model."""

from imageprovider.cache.stats import CacheStats


class TestCacheStats:
    def test_defaults(self):
        stats = CacheStats()
        assert stats.entries == 0
        assert stats.hits == 0
        assert stats.hit_rate == 0.0

    def test_hit_rate(self):
        stats = CacheStats(hits=3, misses=1)
        assert stats.hit_rate == 0.75

    def test_size_mb(self):
        stats = CacheStats(size_bytes=2 * 1024 * 1024)
        assert stats.size_mb == 2.0
