"""Cache subsystem — bounded in-memory LRU with extension-insensitive lookup."""

from imageprovider.cache.keys import id_from_filename, ids_match, strip_extension
from imageprovider.cache.memory import BoundedCache
from imageprovider.cache.stats import CacheStats

__all__ = [
    "BoundedCache",
    "CacheStats",
    "id_from_filename",
    "ids_match",
    "strip_extension",
]
