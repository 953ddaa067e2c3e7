"""Tests for image id helpers."""

import pytest

from imageprovider.cache.keys import (
    id_from_filename,
    ids_match,
    strip_extension,
    validate_image_id,
)
from imageprovider.errors.exceptions import InvalidIdError


class TestStripExtension:
    def test_strips_last_suffix(self):
        assert strip_extension("cat.png") == "cat"
        assert strip_extension("archive.tar.gz") == "archive.tar"

    def test_no_suffix(self):
        assert strip_extension("42") == "42"

    def test_dot_leading_name_strips_to_empty(self):
        assert strip_extension(".png") == ""
        assert strip_extension(".hidden") == ""

    def test_dot_in_directory_is_not_extension(self):
        assert strip_extension("v1.2/cat") == "v1.2/cat"


class TestIdsMatch:
    def test_extension_insensitive(self):
        assert ids_match("cat.png", "cat")
        assert ids_match("cat.png", "cat.webp")
        assert ids_match("cat", "cat")

    def test_different_bases(self):
        assert not ids_match("cat.png", "dog.png")
        assert not ids_match("cat", "cats")


class TestIdFromFilename:
    def test_base_name_without_extension(self):
        assert id_from_filename("holiday.jpg") == "holiday"

    def test_directories_dropped(self):
        assert id_from_filename("uploads/2024/holiday.jpg") == "holiday"
        assert id_from_filename("C:\\photos\\holiday.jpg") == "holiday"

    def test_extension_only_filename_is_empty(self):
        assert id_from_filename("uploads/.png") == ""


class TestValidateImageId:
    def test_accepts_plain_ids(self):
        assert validate_image_id("123456") == "123456"
        assert validate_image_id("cat.v2") == "cat.v2"

    @pytest.mark.parametrize("bad", ["", "   ", "a/b", "a\\b", "..", "..evil", "."])
    def test_rejects_unsafe_ids(self, bad):
        with pytest.raises(InvalidIdError):
            validate_image_id(bad)
