"""Custom exception hierarchy for imageprovider."""

from __future__ import annotations

from typing import Any


class ImageProviderError(Exception):
    """Base exception for all imageprovider errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ImageProviderError):
    """Image absent from the cache and every tier that was consulted.

    ``tier`` names the tier that reported the miss ("primary", "secondary"
    or a backend name when raised by a tier itself).
    """

    def __init__(
        self,
        message: str = "",
        image_id: str = "",
        tier: str | None = None,
    ) -> None:
        super().__init__(message or f"Image not found: {image_id}")
        self.image_id = image_id
        self.tier = tier


class TooLargeError(ImageProviderError):
    """A single record exceeds the cache byte budget; it is never partially admitted."""

    def __init__(
        self,
        message: str = "",
        image_id: str = "",
        size_bytes: int = 0,
        available_bytes: int = 0,
    ) -> None:
        super().__init__(
            message
            or (
                f"Image too large for cache (size: {size_bytes} bytes, "
                f"available: {available_bytes} bytes)"
            )
        )
        self.image_id = image_id
        self.size_bytes = size_bytes
        self.available_bytes = available_bytes


class DecodeError(ImageProviderError):
    """Payload is not a recognized image encoding.

    Tolerated on read paths (the payload is served as-is), fatal on ingestion.
    """

    def __init__(self, message: str = "", original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


class TierError(ImageProviderError):
    """A storage backend failed (I/O, network, permission)."""

    def __init__(
        self,
        message: str = "",
        tier: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.tier = tier
        self.original = original


class InvalidIdError(TierError):
    """Image id cannot be mapped safely onto a storage key."""
