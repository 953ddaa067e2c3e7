"""imageprovider — tiered image store with a bounded in-memory cache."""

from imageprovider.core import build_service, load_service
from imageprovider.service import ImageService
from imageprovider.types import CANONICAL_FORMAT, ImageRecord

__version__ = "0.1.0"

__all__ = [
    "CANONICAL_FORMAT",
    "ImageRecord",
    "ImageService",
    "build_service",
    "load_service",
]
