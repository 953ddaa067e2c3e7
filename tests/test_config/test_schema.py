"""Tests for service configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from imageprovider.config.defaults import get_defaults
from imageprovider.config.schema import ServiceConfig


class TestServiceConfig:
    def test_from_defaults(self):
        config = ServiceConfig.from_flat(get_defaults())
        assert config.max_cache_files == 100
        assert config.max_cache_size_mb == 100.0
        assert config.storage_path == Path("./data")
        assert config.s3 is None

    def test_s3_section_when_endpoint_set(self):
        flat = get_defaults() | {
            "s3_endpoint": "minio:9000",
            "s3_bucket": "photos",
            "s3_access_key": "ak",
            "s3_secret_key": "sk",
            "s3_use_ssl": True,
        }
        config = ServiceConfig.from_flat(flat)
        assert config.s3 is not None
        assert config.s3.endpoint == "minio:9000"
        assert config.s3.bucket == "photos"
        assert config.s3.use_ssl is True

    def test_s3_bucket_default(self):
        config = ServiceConfig.from_flat({"s3_endpoint": "minio:9000"})
        assert config.s3.bucket == "images"

    def test_rejects_non_positive_limits(self):
        with pytest.raises(ValidationError):
            ServiceConfig(max_cache_files=0)
        with pytest.raises(ValidationError):
            ServiceConfig(max_cache_size_mb=-1)
