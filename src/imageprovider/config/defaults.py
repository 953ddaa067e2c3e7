"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Default cache settings
DEFAULT_MAX_CACHE_FILES = 100
DEFAULT_MAX_CACHE_SIZE_MB = 100.0

# Default primary storage location
DEFAULT_STORAGE_PATH = "./data"

# Secondary storage is off unless an endpoint is configured
DEFAULT_S3_USE_SSL = False

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "max_cache_files": DEFAULT_MAX_CACHE_FILES,
        "max_cache_size_mb": DEFAULT_MAX_CACHE_SIZE_MB,
        "storage_path": DEFAULT_STORAGE_PATH,
        "s3_endpoint": None,
        "s3_access_key": None,
        "s3_secret_key": None,
        "s3_bucket": None,
        "s3_region": None,
        "s3_use_ssl": DEFAULT_S3_USE_SSL,
        "log_level": DEFAULT_LOG_LEVEL,
    }
