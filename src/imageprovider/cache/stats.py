"""Cache statistics model."""

from __future__ import annotations

from pydantic import BaseModel


class CacheStats(BaseModel):
    """Aggregate cache and read-through statistics."""

    entries: int = 0
    size_bytes: int = 0
    hits: int = 0
    misses: int = 0
    primary_hits: int = 0
    secondary_hits: int = 0
    evictions: int = 0
    rejected: int = 0
    write_back_failures: int = 0

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
