"""Exception taxonomy shared by the cache, the storage tiers and the service."""

from imageprovider.errors.exceptions import (
    DecodeError,
    ImageProviderError,
    InvalidIdError,
    NotFoundError,
    TierError,
    TooLargeError,
)

__all__ = [
    "ImageProviderError",
    "NotFoundError",
    "TooLargeError",
    "DecodeError",
    "TierError",
    "InvalidIdError",
]
