"""In-memory LRU cache bounded by item count and total bytes."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from imageprovider.cache.keys import ids_match
from imageprovider.errors.exceptions import TooLargeError
from imageprovider.types import ImageRecord

logger = logging.getLogger(__name__)

_DEFAULT_MAX_ITEMS = 100
_DEFAULT_MAX_SIZE_MB = 100


class BoundedCache:
    """Thread-safe recency-ordered cache of image records.

    Two independent bounds: ``max_items`` and ``max_size_mb``. Eviction always
    drops the least recently inserted-or-updated record first; reads never
    reorder. The byte total is owned by the instance and only changes under
    its lock.
    """

    def __init__(
        self,
        max_items: int = _DEFAULT_MAX_ITEMS,
        max_size_mb: float = _DEFAULT_MAX_SIZE_MB,
    ) -> None:
        if max_items < 1:
            raise ValueError(f"max_items must be positive, got {max_items}")
        if max_size_mb <= 0:
            raise ValueError(f"max_size_mb must be positive, got {max_size_mb}")
        # Oldest first; the most recent record sits at the end.
        self._store: OrderedDict[str, ImageRecord] = OrderedDict()
        self._max_items = max_items
        self._max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._current_size_bytes = 0
        self._evictions = 0
        # Write counter, plus the last write seen for ids with a fill in flight.
        self._writes = 0
        self._fills: dict[str, int] = {}
        self._touched: dict[str, int] = {}
        self._lock = threading.RLock()

    @property
    def max_items(self) -> int:
        return self._max_items

    @property
    def max_size_bytes(self) -> int:
        return self._max_size_bytes

    def get(self, image_id: str) -> ImageRecord | None:
        """Exact-id lookup."""
        with self._lock:
            return self._store.get(image_id)

    def find(self, image_id: str) -> ImageRecord | None:
        """Extension-insensitive lookup, most recent match first."""
        with self._lock:
            record = self._store.get(image_id)
            if record is not None:
                return record
            for record in reversed(self._store.values()):
                if ids_match(record.id, image_id):
                    return record
            return None

    def put(self, record: ImageRecord) -> list[str]:
        """Insert or replace ``record``, evicting as needed.

        Returns the ids evicted to make room. Raises TooLargeError, leaving
        the cache untouched, when the record alone exceeds the byte budget.
        """
        with self._lock:
            return self._put_locked(record)

    def put_if_unchanged(self, expected: ImageRecord, record: ImageRecord) -> bool:
        """Replace ``expected`` with ``record`` unless another writer got there first."""
        with self._lock:
            if self._store.get(expected.id) is not expected:
                return False
            self._put_locked(record)
            return True

    def delete(self, image_id: str) -> bool:
        """Remove an exact-id entry. Absent ids are a no-op."""
        with self._lock:
            self._mark_written(image_id)
            return self._remove(image_id) is not None

    # ── Read-through fills ──

    def begin_fill(self, image_id: str) -> int:
        """Register a read-through fill for ``image_id`` before the tier read.

        Returns the token to pass to ``put_if_untouched``. Every call must be
        paired with ``end_fill``.
        """
        with self._lock:
            self._fills[image_id] = self._fills.get(image_id, 0) + 1
            return self._writes

    def put_if_untouched(self, record: ImageRecord, token: int) -> bool:
        """Admit a read-through ``record`` unless the id was written since ``token``.

        A put or delete of the same id after ``begin_fill`` wins over the
        older tier copy. Raises TooLargeError like ``put``.
        """
        with self._lock:
            if self._touched.get(record.id, -1) > token or record.id in self._store:
                return False
            self._put_locked(record)
            return True

    def end_fill(self, image_id: str) -> None:
        with self._lock:
            pending = self._fills.get(image_id, 0) - 1
            if pending > 0:
                self._fills[image_id] = pending
            else:
                self._fills.pop(image_id, None)
                self._touched.pop(image_id, None)

    def list(self) -> list[str]:
        """Snapshot of cached ids, most recent first."""
        with self._lock:
            return list(reversed(self._store.keys()))

    def records(self) -> list[ImageRecord]:
        """Snapshot of cached records, most recent first."""
        with self._lock:
            return list(reversed(self._store.values()))

    def clear(self) -> None:
        with self._lock:
            for image_id in self._fills:
                self._mark_written(image_id)
            self._store.clear()
            self._current_size_bytes = 0

    @property
    def size_bytes(self) -> int:
        with self._lock:
            return self._current_size_bytes

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)

    @property
    def evictions(self) -> int:
        with self._lock:
            return self._evictions

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, image_id: object) -> bool:
        with self._lock:
            return image_id in self._store

    def _put_locked(self, record: ImageRecord) -> list[str]:
        entry_size = record.size_bytes
        if entry_size > self._max_size_bytes:
            raise TooLargeError(
                image_id=record.id,
                size_bytes=entry_size,
                available_bytes=self._max_size_bytes,
            )

        self._mark_written(record.id)
        # Replacing refreshes recency: drop the old copy, re-insert at the end.
        self._remove(record.id)

        evicted: list[str] = []
        while self._current_size_bytes + entry_size > self._max_size_bytes and self._store:
            evicted.append(self._evict_oldest())

        self._store[record.id] = record
        self._current_size_bytes += entry_size

        while len(self._store) > self._max_items:
            evicted.append(self._evict_oldest())

        if evicted:
            logger.debug("Evicted %d cached image(s): %s", len(evicted), ", ".join(evicted))
        return evicted

    def _remove(self, image_id: str) -> ImageRecord | None:
        record = self._store.pop(image_id, None)
        if record is not None:
            self._current_size_bytes -= record.size_bytes
        return record

    def _evict_oldest(self) -> str:
        image_id, record = self._store.popitem(last=False)
        self._current_size_bytes -= record.size_bytes
        self._evictions += 1
        return image_id

    def _mark_written(self, image_id: str) -> None:
        self._writes += 1
        if image_id in self._fills:
            self._touched[image_id] = self._writes
