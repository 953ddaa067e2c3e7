import io

import pytest
from PIL import Image

from imageprovider.errors.exceptions import NotFoundError, TierError
from imageprovider.types import ImageRecord


def _encode(fmt: str, size: tuple = (16, 12), color: tuple = (200, 40, 90), mode: str = "RGB") -> bytes:
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class InMemoryTier:
    """Dict-backed storage tier with switchable failures."""

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self.records: dict[str, ImageRecord] = {}
        self.fail_save = False
        self.fail_get = False
        self.fail_delete = False
        # Called with the id at the start of get, before the lookup.
        self.on_get = None
        self.calls: list[tuple[str, str]] = []

    def save(self, record: ImageRecord) -> None:
        self.calls.append(("save", record.id))
        if self.fail_save:
            raise TierError("disk full", tier=self.name)
        self.records[record.id] = record

    def get(self, image_id: str) -> ImageRecord:
        self.calls.append(("get", image_id))
        if self.on_get is not None:
            self.on_get(image_id)
        if self.fail_get:
            raise TierError("connection reset", tier=self.name)
        if image_id not in self.records:
            raise NotFoundError(image_id=image_id, tier=self.name)
        return self.records[image_id]

    def delete(self, image_id: str) -> None:
        self.calls.append(("delete", image_id))
        if self.fail_delete:
            raise TierError("permission denied", tier=self.name)
        if image_id not in self.records:
            raise NotFoundError(image_id=image_id, tier=self.name)
        del self.records[image_id]

    def list(self) -> list[str]:
        return sorted(self.records)


@pytest.fixture
def png_bytes():
    return _encode("PNG")


@pytest.fixture
def jpeg_bytes():
    return _encode("JPEG", color=(10, 120, 250))


@pytest.fixture
def rgba_png_bytes():
    return _encode("PNG", mode="RGBA", color=(0, 255, 0, 128))


@pytest.fixture
def make_image_bytes():
    """Factory for encoded test images: make_image_bytes("PNG", size=(w, h))."""
    return _encode


@pytest.fixture
def text_bytes():
    return b"%PDF-1.4 not really an image"


@pytest.fixture
def primary_tier():
    return InMemoryTier("primary-fake")


@pytest.fixture
def secondary_tier():
    return InMemoryTier("secondary-fake")
