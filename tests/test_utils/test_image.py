"""Tests for image decoding and canonical WebP conversion."""

import io

import pytest
from PIL import Image

from imageprovider.errors.exceptions import DecodeError
from imageprovider.utils.image import load_image, normalize


def _is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


class TestNormalize:
    def test_png_becomes_webp(self, png_bytes):
        canonical, source = normalize(png_bytes)
        assert _is_webp(canonical)
        assert source == "png"

    def test_jpeg_source_tag(self, jpeg_bytes):
        canonical, source = normalize(jpeg_bytes)
        assert _is_webp(canonical)
        assert source == "jpeg"

    def test_lossless_pixels_preserved(self, png_bytes):
        canonical, _ = normalize(png_bytes)
        original = Image.open(io.BytesIO(png_bytes)).convert("RGB")
        converted = Image.open(io.BytesIO(canonical)).convert("RGB")
        assert original.size == converted.size
        assert list(original.getdata()) == list(converted.getdata())

    def test_idempotent(self, jpeg_bytes):
        once, _ = normalize(jpeg_bytes)
        twice, source = normalize(once)
        assert twice == once
        assert source == "webp"

    def test_idempotent_with_alpha(self, rgba_png_bytes):
        once, _ = normalize(rgba_png_bytes)
        twice, _ = normalize(once)
        assert twice == once

    def test_grayscale_converted(self, make_image_bytes):
        raw = make_image_bytes("PNG", mode="L", color=128)
        canonical, source = normalize(raw)
        assert _is_webp(canonical)
        assert source == "png"

    def test_gif_supported(self, make_image_bytes):
        canonical, source = normalize(make_image_bytes("GIF", mode="P", color=3))
        assert _is_webp(canonical)
        assert source == "gif"

    def test_not_an_image_raises(self, text_bytes):
        with pytest.raises(DecodeError):
            normalize(text_bytes)

    def test_empty_payload_raises(self):
        with pytest.raises(DecodeError, match="Empty"):
            normalize(b"")


class TestLoadImage:
    def test_reads_bytes(self, tmp_path, png_bytes):
        path = tmp_path / "cat.png"
        path.write_bytes(png_bytes)
        assert load_image(path) == png_bytes

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "missing.png")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(ValueError, match="Unsupported file type"):
            load_image(path)

    def test_symlink_rejected(self, tmp_path, png_bytes):
        target = tmp_path / "real.png"
        target.write_bytes(png_bytes)
        link = tmp_path / "link.png"
        link.symlink_to(target)
        with pytest.raises(ValueError, match="Symlinks"):
            load_image(link)
