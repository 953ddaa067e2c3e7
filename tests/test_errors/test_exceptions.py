"""Tests for custom exception hierarchy."""

from imageprovider.errors.exceptions import (
    DecodeError,
    ImageProviderError,
    InvalidIdError,
    NotFoundError,
    TierError,
    TooLargeError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_base(self):
        assert issubclass(NotFoundError, ImageProviderError)
        assert issubclass(TooLargeError, ImageProviderError)
        assert issubclass(DecodeError, ImageProviderError)
        assert issubclass(TierError, ImageProviderError)

    def test_invalid_id_is_tier_error(self):
        assert issubclass(InvalidIdError, TierError)

    def test_all_inherit_from_exception(self):
        assert issubclass(ImageProviderError, Exception)


class TestNotFoundError:
    def test_default_message(self):
        err = NotFoundError(image_id="42", tier="primary")
        assert str(err) == "Image not found: 42"
        assert err.image_id == "42"
        assert err.tier == "primary"

    def test_custom_message(self):
        err = NotFoundError("gone", image_id="42")
        assert err.message == "gone"
        assert err.tier is None


class TestTooLargeError:
    def test_attributes(self):
        err = TooLargeError(image_id="big", size_bytes=2048, available_bytes=1024)
        assert err.size_bytes == 2048
        assert err.available_bytes == 1024
        assert "2048" in str(err)


class TestTierError:
    def test_attributes(self):
        cause = OSError("disk full")
        err = TierError("save failed", tier="filesystem", original=cause)
        assert err.tier == "filesystem"
        assert err.original is cause
        assert "save failed" in str(err)
