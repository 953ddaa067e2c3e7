"""Storage tier contract consumed by the image service."""

from __future__ import annotations

from typing import Protocol

from imageprovider.types import ImageRecord


class StorageTier(Protocol):
    """Durable id -> blob store.

    Implementations raise NotFoundError for absent ids and TierError for
    backend failures. Records returned by ``get`` are tagged with the
    canonical format.
    """

    name: str

    def save(self, record: ImageRecord) -> None:
        """Persist ``record``, overwriting any durable copy with the same id."""
        ...

    def get(self, image_id: str) -> ImageRecord: ...

    def delete(self, image_id: str) -> None: ...

    def list(self) -> list[str]: ...
