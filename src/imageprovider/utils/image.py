"""Image decoding and canonical-format conversion utilities."""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from imageprovider.errors.exceptions import DecodeError
from imageprovider.types import CANONICAL_FORMAT

_SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".tif", ".webp"}
_DECODABLE_FORMATS = ("JPEG", "PNG", "GIF", "WEBP", "BMP", "TIFF")
_MAX_IMAGE_SIZE_BYTES = 50 * 1024 * 1024  # 50 MB


def normalize(raw: bytes) -> tuple[bytes, str]:
    """Re-encode ``raw`` as lossless WebP.

    Returns ``(canonical_bytes, source_format)`` where ``source_format`` is
    the lowercase tag of the detected input encoding. Raises ``DecodeError``
    when ``raw`` is not a supported image.

    Lossless + exact encoding keeps every pixel value, so normalizing the
    output again yields the same bytes.
    """
    img, source_format = _decode(raw)
    try:
        return _to_canonical_bytes(img), source_format
    except (OSError, ValueError) as e:
        raise DecodeError(f"Failed to encode image as {CANONICAL_FORMAT}: {e}", original=e) from e


def load_image(path: str | Path) -> bytes:
    """Load an image file and return raw bytes."""
    path = Path(path)
    _validate_path(path)
    return path.read_bytes()


def _decode(raw: bytes) -> tuple[Image.Image, str]:
    if not raw:
        raise DecodeError("Empty payload")
    try:
        img = Image.open(io.BytesIO(raw), formats=_DECODABLE_FORMATS)
        img.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        SyntaxError,
        EOFError,
    ) as e:
        raise DecodeError(f"Not a supported image: {e}", original=e) from e
    source_format = (img.format or "").lower()
    return img, source_format


def _to_canonical_bytes(img: Image.Image) -> bytes:
    # Multi-frame inputs (animated GIF/WebP) keep their first frame only.
    if getattr(img, "n_frames", 1) > 1:
        img.seek(0)

    if img.mode not in ("RGB", "RGBA"):
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")

    buf = io.BytesIO()
    img.save(buf, format="WEBP", lossless=True, exact=True)
    return buf.getvalue()


def _validate_path(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if path.is_symlink():
        raise ValueError(f"Symlinks not allowed: {path}")
    if path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {path.suffix}")
    size = path.stat().st_size
    if size > _MAX_IMAGE_SIZE_BYTES:
        raise ValueError(f"File too large ({size} bytes, max {_MAX_IMAGE_SIZE_BYTES})")
