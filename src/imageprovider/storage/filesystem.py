"""Primary tier: images sharded under a local directory."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from imageprovider.cache.keys import validate_image_id
from imageprovider.errors.exceptions import NotFoundError, TierError
from imageprovider.types import CANONICAL_EXTENSION, CANONICAL_FORMAT, ImageRecord

logger = logging.getLogger(__name__)

_SHARD_WIDTH = 2


class FileSystemStorage:
    """Stores each image as ``<base_dir>/<2-char shards...>/<last>.webp``.

    "123456" lands at ``12/34/56.webp``; ids shorter than one shard sit
    directly under ``base_dir``.
    """

    name = "filesystem"

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TierError(
                f"Cannot create storage directory {self._base_dir}: {e}",
                tier=self.name,
                original=e,
            ) from e

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, image_id: str) -> Path:
        validate_image_id(image_id)
        if len(image_id) < _SHARD_WIDTH:
            return self._base_dir / f"{image_id}{CANONICAL_EXTENSION}"

        parts = [image_id[i : i + _SHARD_WIDTH] for i in range(0, len(image_id), _SHARD_WIDTH)]
        filename = parts.pop() + CANONICAL_EXTENSION
        return self._base_dir.joinpath(*parts, filename)

    def save(self, record: ImageRecord) -> None:
        path = self.path_for(record.id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write beside the target and rename so readers never see a partial file.
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(record.data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise TierError(
                f"Failed to save image {record.id}: {e}", tier=self.name, original=e
            ) from e
        logger.debug("Saved image %s to %s (%d bytes)", record.id, path, record.size_bytes)

    def get(self, image_id: str) -> ImageRecord:
        path = self.path_for(image_id)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(image_id=image_id, tier=self.name) from e
        except OSError as e:
            raise TierError(
                f"Failed to read image {image_id}: {e}", tier=self.name, original=e
            ) from e
        return ImageRecord(id=image_id, data=data, format=CANONICAL_FORMAT)

    def delete(self, image_id: str) -> None:
        path = self.path_for(image_id)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFoundError(image_id=image_id, tier=self.name) from e
        except OSError as e:
            raise TierError(
                f"Failed to delete image {image_id}: {e}", tier=self.name, original=e
            ) from e

    def list(self) -> list[str]:
        ids: list[str] = []
        try:
            for path in self._base_dir.rglob(f"*{CANONICAL_EXTENSION}"):
                if not path.is_file() or path.name.startswith(".tmp-"):
                    continue
                rel = path.relative_to(self._base_dir).with_suffix("")
                ids.append("".join(rel.parts))
        except OSError as e:
            raise TierError(f"Failed to list images: {e}", tier=self.name, original=e) from e
        return sorted(ids)
