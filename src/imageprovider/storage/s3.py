"""Secondary tier backed by an S3-compatible object store (AWS S3, MinIO, R2)."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from imageprovider.cache.keys import validate_image_id
from imageprovider.errors.exceptions import NotFoundError, TierError
from imageprovider.types import (
    CANONICAL_CONTENT_TYPE,
    CANONICAL_EXTENSION,
    CANONICAL_FORMAT,
    ImageRecord,
)

logger = logging.getLogger(__name__)

# Connection-level failures that warrant retry
_TRANSIENT_EXCEPTIONS = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
)

# Missing object. A missing bucket (NoSuchBucket) is a misconfiguration, not a miss.
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}

_transient_retry = retry(
    retry=retry_if_exception_type(_TRANSIENT_EXCEPTIONS),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
    stop=stop_after_attempt(3),
    reraise=True,
)


def endpoint_url(endpoint: str, use_ssl: bool = False) -> str:
    """Turn a bare ``host:port`` endpoint into a URL boto3 accepts."""
    if "://" in endpoint:
        return endpoint
    scheme = "https" if use_ssl else "http"
    return f"{scheme}://{endpoint}"


def object_key(image_id: str) -> str:
    return f"{validate_image_id(image_id)}{CANONICAL_EXTENSION}"


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _is_not_found(exc: ClientError) -> bool:
    return _error_code(exc) in _NOT_FOUND_CODES


class S3Storage:
    """Stores each image as object ``<id>.webp`` in a single bucket."""

    name = "s3"

    def __init__(
        self,
        bucket: str,
        endpoint: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        use_ssl: bool = False,
        region: str | None = None,
        create_bucket: bool = True,
    ) -> None:
        if not bucket:
            raise ValueError("S3 bucket name must be set")

        self.bucket = bucket
        client_kwargs: dict[str, Any] = {
            "aws_access_key_id": access_key or None,
            "aws_secret_access_key": secret_key or None,
            "region_name": region,
        }
        if endpoint:
            client_kwargs["endpoint_url"] = endpoint_url(endpoint, use_ssl)
        self.s3 = boto3.client("s3", **client_kwargs)

        if create_bucket:
            self._ensure_bucket()

    def save(self, record: ImageRecord) -> None:
        key = object_key(record.id)
        try:
            self._put_object(key, record.data)
        except (ClientError, BotoCoreError) as e:
            raise TierError(
                f"Failed to upload {key} to bucket {self.bucket}: {e}",
                tier=self.name,
                original=e,
            ) from e
        logger.debug("Uploaded %s to bucket %s (%d bytes)", key, self.bucket, record.size_bytes)

    def get(self, image_id: str) -> ImageRecord:
        key = object_key(image_id)
        try:
            data = self._get_object(key)
        except ClientError as e:
            if _is_not_found(e):
                raise NotFoundError(image_id=image_id, tier=self.name) from e
            raise TierError(
                f"Failed to download {key} from bucket {self.bucket}: {e}",
                tier=self.name,
                original=e,
            ) from e
        except BotoCoreError as e:
            raise TierError(
                f"Failed to download {key} from bucket {self.bucket}: {e}",
                tier=self.name,
                original=e,
            ) from e
        return ImageRecord(id=image_id, data=data, format=CANONICAL_FORMAT)

    def delete(self, image_id: str) -> None:
        # S3 itself answers success for a missing key; other stores may say NoSuchKey.
        key = object_key(image_id)
        try:
            self._delete_object(key)
        except ClientError as e:
            if _is_not_found(e):
                raise NotFoundError(image_id=image_id, tier=self.name) from e
            raise TierError(
                f"Failed to delete {key} from bucket {self.bucket}: {e}",
                tier=self.name,
                original=e,
            ) from e
        except BotoCoreError as e:
            raise TierError(
                f"Failed to delete {key} from bucket {self.bucket}: {e}",
                tier=self.name,
                original=e,
            ) from e

    def list(self) -> list[str]:
        ids: list[str] = []
        try:
            paginator = self.s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    if key.endswith(CANONICAL_EXTENSION):
                        ids.append(key[: -len(CANONICAL_EXTENSION)])
        except (ClientError, BotoCoreError) as e:
            raise TierError(
                f"Failed to list bucket {self.bucket}: {e}", tier=self.name, original=e
            ) from e
        return ids

    def _ensure_bucket(self) -> None:
        try:
            self.s3.head_bucket(Bucket=self.bucket)
            return
        except ClientError as e:
            if _error_code(e) not in _MISSING_BUCKET_CODES:
                raise TierError(
                    f"Cannot access bucket {self.bucket}: {e}", tier=self.name, original=e
                ) from e
        except BotoCoreError as e:
            raise TierError(
                f"Cannot reach object store for bucket {self.bucket}: {e}",
                tier=self.name,
                original=e,
            ) from e

        logger.info("Bucket %s does not exist, creating it", self.bucket)
        try:
            self.s3.create_bucket(Bucket=self.bucket)
        except (ClientError, BotoCoreError) as e:
            raise TierError(
                f"Failed to create bucket {self.bucket}: {e}", tier=self.name, original=e
            ) from e

    @_transient_retry
    def _put_object(self, key: str, data: bytes) -> None:
        self.s3.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=CANONICAL_CONTENT_TYPE,
        )

    @_transient_retry
    def _get_object(self, key: str) -> bytes:
        response = self.s3.get_object(Bucket=self.bucket, Key=key)
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    @_transient_retry
    def _delete_object(self, key: str) -> None:
        self.s3.delete_object(Bucket=self.bucket, Key=key)
