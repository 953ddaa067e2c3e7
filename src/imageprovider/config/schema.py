"""Pydantic models for service configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from imageprovider.config.defaults import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CACHE_FILES,
    DEFAULT_MAX_CACHE_SIZE_MB,
    DEFAULT_STORAGE_PATH,
)


class S3Config(BaseModel):
    endpoint: str
    bucket: str = "images"
    access_key: str | None = None
    secret_key: str | None = None
    region: str | None = None
    use_ssl: bool = False


class ServiceConfig(BaseModel):
    max_cache_files: int = Field(default=DEFAULT_MAX_CACHE_FILES, gt=0)
    max_cache_size_mb: float = Field(default=DEFAULT_MAX_CACHE_SIZE_MB, gt=0)
    storage_path: Path = Path(DEFAULT_STORAGE_PATH)
    s3: S3Config | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_flat(cls, config: dict[str, Any]) -> ServiceConfig:
        """Build from the flat dict produced by load_config_hierarchy().

        The S3 section exists only when an endpoint is configured.
        """
        s3 = None
        if config.get("s3_endpoint"):
            s3 = S3Config(
                endpoint=config["s3_endpoint"],
                bucket=config.get("s3_bucket") or "images",
                access_key=config.get("s3_access_key"),
                secret_key=config.get("s3_secret_key"),
                region=config.get("s3_region"),
                use_ssl=bool(config.get("s3_use_ssl", False)),
            )

        kwargs: dict[str, Any] = {"s3": s3}
        for key in ("max_cache_files", "max_cache_size_mb", "storage_path", "log_level"):
            if config.get(key) is not None:
                kwargs[key] = config[key]
        return cls(**kwargs)
