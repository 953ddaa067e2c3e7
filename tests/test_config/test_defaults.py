"""Tests for package defaults."""

from imageprovider.config.defaults import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CACHE_FILES,
    DEFAULT_MAX_CACHE_SIZE_MB,
    DEFAULT_S3_USE_SSL,
    DEFAULT_STORAGE_PATH,
    get_defaults,
)


class TestDefaults:
    def test_cache_limits(self):
        assert DEFAULT_MAX_CACHE_FILES == 100
        assert DEFAULT_MAX_CACHE_SIZE_MB == 100.0

    def test_storage_path(self):
        assert DEFAULT_STORAGE_PATH == "./data"

    def test_ssl_off(self):
        assert DEFAULT_S3_USE_SSL is False

    def test_default_log_level(self):
        assert DEFAULT_LOG_LEVEL == "WARNING"

    def test_get_defaults_has_all_keys(self):
        defaults = get_defaults()
        assert defaults["max_cache_files"] == DEFAULT_MAX_CACHE_FILES
        assert defaults["s3_endpoint"] is None
        assert "s3_bucket" in defaults
