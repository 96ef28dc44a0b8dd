"""Object store adapter for generated documentation (MinIO / S3)."""

from __future__ import annotations

import hashlib
import io
import logging
import re
from typing import Protocol, Sequence

from minio import Minio
from minio.deleteobjects import DeleteObject
from minio.error import MinioException
from urllib3.exceptions import HTTPError

from ..cancellation import CancellationToken, ensure_token
from ..config import StorageConfig
from ..errors import Error, StorageError
from ..logging import get_logger
from .records import MARKDOWN_CONTENT_TYPE

_BUCKET_INVALID = re.compile(r"[^a-z0-9.-]+")


class ObjectStore(Protocol):
    def remove_bucket_if_exists(
        self,
        bucket: str,
        object_names: Sequence[str],
        cancellation: CancellationToken | None = None,
    ) -> None:
        ...

    def upload(
        self,
        bucket: str,
        name: str,
        data: bytes,
        cancellation: CancellationToken | None = None,
    ) -> None:
        ...


def bucket_slug(name: str) -> str:
    """Map a project name onto an S3-legal bucket name (3-63 chars, lowercase).

    Names that are already legal are kept. Any other name gets a short hash of
    the original appended, so ``Foo`` and ``foo`` never share a bucket.
    """
    slug = _BUCKET_INVALID.sub("-", name.lower())
    slug = re.sub(r"-{2,}", "-", slug).strip(".-")
    if slug == name and 3 <= len(slug) <= 63:
        return slug
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    base = slug[:54].rstrip(".-") or "documate"
    return f"{base}-{digest}"


class MinioObjectStore:
    """Stores artifacts in one bucket per project."""

    def __init__(self, client: Minio, *, logger: logging.Logger | None = None) -> None:
        self.client = client
        self.logger = logger or get_logger("storage.objects")

    @classmethod
    def from_config(
        cls, config: StorageConfig, *, logger: logging.Logger | None = None
    ) -> "MinioObjectStore":
        client = Minio(
            config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
            region=config.region,
        )
        return cls(client, logger=logger)

    def remove_bucket_if_exists(
        self,
        bucket: str,
        object_names: Sequence[str],
        cancellation: CancellationToken | None = None,
    ) -> None:
        token = ensure_token(cancellation)
        physical = bucket_slug(bucket)
        try:
            token.raise_if_cancelled("bucket lookup")
            if not self.client.bucket_exists(physical):
                return

            if object_names:
                token.raise_if_cancelled("object removal")
                delete_list = [DeleteObject(name) for name in object_names]
                # remove_objects is lazy; iterating drives the deletion.
                for failure in self.client.remove_objects(physical, delete_list):
                    self.logger.error("Failed to remove %s from %s: %s", failure.name, physical, failure.message)
                    raise StorageError(
                        Error.failure("remove.bucket", f"Failed to remove object {failure.name}")
                    )

            token.raise_if_cancelled("bucket removal")
            self.client.remove_bucket(physical)
            self.logger.debug("Removed bucket %s", physical)
        except (MinioException, HTTPError) as exc:
            self.logger.error("Error while removing bucket %s: %s", physical, exc)
            raise StorageError(
                Error.failure("remove.bucket", f"Error while removing bucket: {exc}")
            ) from exc

    def upload(
        self,
        bucket: str,
        name: str,
        data: bytes,
        cancellation: CancellationToken | None = None,
    ) -> None:
        token = ensure_token(cancellation)
        physical = bucket_slug(bucket)
        try:
            token.raise_if_cancelled("bucket lookup")
            if not self.client.bucket_exists(physical):
                token.raise_if_cancelled("bucket creation")
                self.client.make_bucket(physical)

            token.raise_if_cancelled("object upload")
            self.client.put_object(
                physical,
                name,
                io.BytesIO(data),
                length=len(data),
                content_type=MARKDOWN_CONTENT_TYPE,
            )
        except (MinioException, HTTPError) as exc:
            self.logger.error("Error while uploading %s to %s: %s", name, physical, exc)
            raise StorageError(
                Error.failure("file.upload.minio", f"Error while uploading file to storage: {exc}")
            ) from exc


__all__ = ["MinioObjectStore", "ObjectStore", "bucket_slug"]
