"""Top-level entry points: build_service(), load_service()."""

from __future__ import annotations

import logging
from typing import Any

from imageprovider.config.hierarchy import load_config_hierarchy
from imageprovider.config.schema import S3Config, ServiceConfig
from imageprovider.errors.exceptions import TierError
from imageprovider.service import ImageService
from imageprovider.storage.base import StorageTier
from imageprovider.storage.filesystem import FileSystemStorage

logger = logging.getLogger(__name__)


def build_service(config: ServiceConfig) -> ImageService:
    """Assemble an ImageService from validated settings.

    The filesystem tier is mandatory. The S3 tier is optional: if it cannot
    be initialized the service runs without a secondary tier.
    """
    primary = FileSystemStorage(config.storage_path)
    secondary = _build_secondary(config.s3) if config.s3 else None

    logger.info(
        "Image service ready (primary=%s, secondary=%s, max_files=%d, max_mb=%.1f)",
        config.storage_path,
        config.s3.endpoint if secondary else "none",
        config.max_cache_files,
        config.max_cache_size_mb,
    )
    return ImageService(
        primary,
        secondary,
        max_items=config.max_cache_files,
        max_size_mb=config.max_cache_size_mb,
    )


def load_service(**runtime_overrides: Any) -> ImageService:
    """Resolve configuration from every source and build the service."""
    config = ServiceConfig.from_flat(load_config_hierarchy(**runtime_overrides))
    return build_service(config)


def _build_secondary(s3: S3Config) -> StorageTier | None:
    from imageprovider.storage.s3 import S3Storage

    try:
        return S3Storage(
            bucket=s3.bucket,
            endpoint=s3.endpoint,
            access_key=s3.access_key,
            secret_key=s3.secret_key,
            use_ssl=s3.use_ssl,
            region=s3.region,
        )
    except (TierError, ValueError) as e:
        logger.warning("Failed to initialize S3 storage: %s", e)
        return None
