"""Storage tiers — filesystem (primary) and S3-compatible object store (secondary)."""

from imageprovider.storage.base import StorageTier
from imageprovider.storage.filesystem import FileSystemStorage

__all__ = [
    "StorageTier",
    "FileSystemStorage",
]
