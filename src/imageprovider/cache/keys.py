"""Image id helpers: extension-insensitive matching and storage-safe ids."""

from __future__ import annotations

import posixpath

from imageprovider.errors.exceptions import InvalidIdError


def strip_extension(image_id: str) -> str:
    """Drop the final ".suffix" ("cat.png" -> "cat", "a.tar.gz" -> "a.tar").

    A dot-leading name is all suffix, so ".png" strips to "".
    """
    dot = image_id.rfind(".")
    if dot == -1 or "/" in image_id[dot:]:
        return image_id
    return image_id[:dot]


def ids_match(cached_id: str, requested_id: str) -> bool:
    """Cache lookup rule: equal once both trailing extensions are stripped."""
    return strip_extension(cached_id) == strip_extension(requested_id)


def id_from_filename(filename: str) -> str:
    """Derive an image id from an upload filename (base name, no extension)."""
    base = posixpath.basename(filename.replace("\\", "/"))
    return strip_extension(base)


def validate_image_id(image_id: str) -> str:
    """Reject ids that cannot be used as a storage key.

    Raises InvalidIdError for empty ids, path separators and dot segments.
    """
    if not image_id or not image_id.strip():
        raise InvalidIdError("Image id must not be empty")
    if "/" in image_id or "\\" in image_id or "\x00" in image_id:
        raise InvalidIdError(f"Image id contains a path separator: {image_id!r}")
    if image_id in (".", "..") or image_id.startswith(".."):
        raise InvalidIdError(f"Image id is a relative path segment: {image_id!r}")
    return image_id
