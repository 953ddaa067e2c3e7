"""Shared Pydantic models for imageprovider."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

# Canonical encoding every image is normalized into before serving.
CANONICAL_FORMAT = "webp"
CANONICAL_EXTENSION = ".webp"
CANONICAL_CONTENT_TYPE = "image/webp"


class TierName(StrEnum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class ImageRecord(BaseModel):
    """A blob held by the cache or a storage tier.

    Records are frozen: replacing the bytes means building a new record
    (``with_data``), so a record handed to a caller never changes under it.
    """

    model_config = {"frozen": True}

    id: str
    data: bytes
    format: str = ""
    source_format: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def is_canonical(self) -> bool:
        return self.format == CANONICAL_FORMAT

    def with_data(
        self,
        data: bytes,
        format: str,
        source_format: str | None = None,
    ) -> ImageRecord:
        """Return a copy carrying new bytes/format, remembering the prior tag."""
        return self.model_copy(
            update={
                "data": data,
                "format": format,
                "source_format": source_format or self.source_format or self.format or None,
            }
        )
