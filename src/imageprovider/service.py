"""Image service — coordinates the bounded cache, normalizer and storage tiers.

Write path: ``add`` normalizes and admits into the cache only. It does not
write through to any tier; persistence is an explicit ``save`` by the
caller, or happens as a write-back when ``get`` finds a record only in the
secondary tier.

Read path: cache -> primary -> secondary. Each tier hit is normalized and
admitted into the cache; a secondary hit is also written back to primary on
a best-effort basis.

The cache lock is never held across normalization or tier I/O.
"""

from __future__ import annotations

import logging
import threading

from imageprovider.cache.keys import id_from_filename
from imageprovider.cache.memory import BoundedCache
from imageprovider.cache.stats import CacheStats
from imageprovider.errors.exceptions import (
    DecodeError,
    ImageProviderError,
    NotFoundError,
    TierError,
    TooLargeError,
)
from imageprovider.storage.base import StorageTier
from imageprovider.types import CANONICAL_FORMAT, ImageRecord, TierName
from imageprovider.utils.image import normalize

logger = logging.getLogger(__name__)

_DEFAULT_MAX_ITEMS = 100
_DEFAULT_MAX_SIZE_MB = 100


class ImageService:
    """Single shared entry point for add/get/delete/list on images."""

    def __init__(
        self,
        primary: StorageTier,
        secondary: StorageTier | None = None,
        max_items: int = _DEFAULT_MAX_ITEMS,
        max_size_mb: float = _DEFAULT_MAX_SIZE_MB,
        cache: BoundedCache | None = None,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._cache = (
            cache if cache is not None else BoundedCache(max_items=max_items, max_size_mb=max_size_mb)
        )
        self._stats = CacheStats()
        self._stats_lock = threading.Lock()

    @property
    def cache(self) -> BoundedCache:
        return self._cache

    @property
    def primary(self) -> StorageTier:
        return self._primary

    @property
    def secondary(self) -> StorageTier | None:
        return self._secondary

    # ── Write path ──

    def add(self, record: ImageRecord) -> ImageRecord:
        """Normalize ``record`` when it is an image and admit it into the cache.

        Replaces any cached entry with the same id. Raises TooLargeError if
        the record cannot fit; the cache is then left as it was.
        """
        record = self._normalize_if_image(record)
        try:
            evicted = self._cache.put(record)
        except TooLargeError:
            self._count("rejected")
            raise
        logger.debug("Cached image %s (%d bytes, %d evicted)", record.id, record.size_bytes, len(evicted))
        return record

    def ingest(self, filename: str, data: bytes) -> ImageRecord:
        """Upload path: the payload must be an image.

        The id is the base filename without its extension. Raises DecodeError
        for non-image payloads.
        """
        image_id = id_from_filename(filename)
        if not image_id:
            raise ImageProviderError(f"Cannot derive an image id from filename {filename!r}")

        canonical, source_format = normalize(data)
        record = ImageRecord(
            id=image_id,
            data=canonical,
            format=CANONICAL_FORMAT,
            source_format=source_format,
        )
        return self.add(record)

    def save(self, record: ImageRecord) -> None:
        """Persist ``record`` to the primary tier. Tier failures propagate."""
        self._primary.save(record)

    # ── Read path ──

    def get(self, image_id: str) -> ImageRecord:
        """Return the image, reading through primary then secondary on a miss.

        Raises NotFoundError once the cache and every configured tier missed;
        its ``tier`` names the last tier consulted. A tier copy is only cached
        if nobody added or deleted ``image_id`` while it was being read.
        """
        token = self._cache.begin_fill(image_id)
        try:
            return self._get(image_id, token)
        finally:
            self._cache.end_fill(image_id)

    def _get(self, image_id: str, token: int) -> ImageRecord:
        cached = self._cache.find(image_id)
        if cached is not None:
            self._count("hits")
            return self._serve_cached(cached)
        self._count("misses")

        try:
            record = self._primary.get(image_id)
        except ImageProviderError as e:
            last_error: ImageProviderError = e
            last_tier = TierName.PRIMARY
            self._log_tier_miss(last_tier, image_id, e)
        else:
            self._count("primary_hits")
            record = self._normalize_if_image(record)
            self._admit(record, token)
            return record

        if self._secondary is not None:
            logger.info(
                "Image not found in primary storage, trying secondary storage for ID: %s",
                image_id,
            )
            try:
                record = self._secondary.get(image_id)
            except ImageProviderError as e:
                last_error = e
                last_tier = TierName.SECONDARY
                self._log_tier_miss(last_tier, image_id, e)
            else:
                self._count("secondary_hits")
                record = self._normalize_if_image(record)
                if self._admit(record, token):
                    self._write_back(record)
                return record

        raise NotFoundError(image_id=image_id, tier=last_tier.value) from last_error

    def _serve_cached(self, cached: ImageRecord) -> ImageRecord:
        if cached.is_canonical:
            return cached

        normalized = self._normalize_if_image(cached)
        if normalized is cached:
            return cached

        try:
            if not self._cache.put_if_unchanged(cached, normalized):
                logger.debug("Cached image %s changed during normalization, not replacing", cached.id)
        except TooLargeError as e:
            self._count("rejected")
            logger.warning("Normalized image %s no longer fits the cache: %s", cached.id, e)
        return normalized

    def _admit(self, record: ImageRecord, token: int) -> bool:
        """Cache a read-through record under both bounds.

        Oversized records are served uncached. Returns False when a concurrent
        add or delete of the same id superseded the tier copy.
        """
        try:
            if not self._cache.put_if_untouched(record, token):
                logger.debug("Image %s changed during read-through, keeping the newer entry", record.id)
                return False
        except TooLargeError as e:
            self._count("rejected")
            logger.warning("Serving image %s without caching it: %s", record.id, e)
        return True

    def _write_back(self, record: ImageRecord) -> None:
        try:
            self._primary.save(record)
        except ImageProviderError as e:
            self._count("write_back_failures")
            logger.warning(
                "Failed to save to primary storage after retrieving from secondary: %s", e
            )

    # ── Delete / list ──

    def delete(self, image_id: str) -> None:
        """Remove ``image_id`` from the cache, primary and secondary tiers.

        Deleting an absent id succeeds. A primary TierError propagates, but
        the cache removal that preceded it is not rolled back. Secondary
        failures are logged only.
        """
        if self._cache.delete(image_id):
            logger.debug("Removed image %s from cache", image_id)

        try:
            self._primary.delete(image_id)
        except NotFoundError:
            logger.debug("Image %s not present in primary storage", image_id)

        if self._secondary is not None:
            try:
                self._secondary.delete(image_id)
            except NotFoundError:
                logger.debug("Image %s not present in secondary storage", image_id)
            except ImageProviderError as e:
                logger.warning("Failed to delete image from secondary storage: %s", e)

    def list(self) -> list[ImageRecord]:
        """Cached records, most recent first. Tier contents are not consulted."""
        return self._cache.records()

    def list_tier(self, tier: TierName | str = TierName.PRIMARY) -> list[str]:
        """Durable catalogue of one tier."""
        tier = TierName(tier)
        if tier == TierName.PRIMARY:
            return self._primary.list()
        if self._secondary is None:
            raise TierError("Secondary storage is not configured", tier=tier.value)
        return self._secondary.list()

    def stats(self) -> CacheStats:
        with self._stats_lock:
            snapshot = self._stats.model_copy()
        snapshot.entries = len(self._cache)
        snapshot.size_bytes = self._cache.size_bytes
        snapshot.evictions = self._cache.evictions
        return snapshot

    # ── Helpers ──

    def _normalize_if_image(self, record: ImageRecord) -> ImageRecord:
        """Canonical copy of ``record``, or ``record`` itself when already
        canonical or not an image."""
        if record.is_canonical:
            return record
        try:
            canonical, source_format = normalize(record.data)
        except DecodeError:
            logger.debug("File is not an image, keeping original format: %s", record.format)
            return record
        return record.with_data(canonical, CANONICAL_FORMAT, source_format=source_format)

    def _count(self, field: str) -> None:
        with self._stats_lock:
            setattr(self._stats, field, getattr(self._stats, field) + 1)

    @staticmethod
    def _log_tier_miss(tier: TierName, image_id: str, error: ImageProviderError) -> None:
        if isinstance(error, NotFoundError):
            logger.debug("Image %s not found in %s storage", image_id, tier.value)
        else:
            logger.warning("Error reading image %s from %s storage: %s", image_id, tier.value, error)
