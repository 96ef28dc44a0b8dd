"""Metadata store adapter (MongoDB ``files`` collection)."""

from __future__ import annotations

import logging
from typing import List, Protocol, Sequence

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..cancellation import CancellationToken, ensure_token
from ..config import MetadataConfig
from ..errors import Error, StorageError
from ..logging import get_logger
from .records import ArtifactRecord


class ArtifactRepository(Protocol):
    def file_names(self, bucket: str, cancellation: CancellationToken | None = None) -> List[str]:
        ...

    def delete_by_bucket(self, bucket: str, cancellation: CancellationToken | None = None) -> None:
        ...

    def add_range(
        self, records: Sequence[ArtifactRecord], cancellation: CancellationToken | None = None
    ) -> None:
        ...


class MongoArtifactRepository:
    """Reads and writes artifact rows keyed by ``bucket_name``."""

    def __init__(self, collection: Collection, *, logger: logging.Logger | None = None) -> None:
        self.collection = collection
        self.logger = logger or get_logger("storage.metadata")

    @classmethod
    def from_config(
        cls, config: MetadataConfig, *, logger: logging.Logger | None = None
    ) -> "MongoArtifactRepository":
        client: MongoClient = MongoClient(config.uri)
        return cls(client[config.database][config.collection], logger=logger)

    def file_names(self, bucket: str, cancellation: CancellationToken | None = None) -> List[str]:
        ensure_token(cancellation).raise_if_cancelled("metadata lookup")
        try:
            cursor = self.collection.find({"bucket_name": bucket}, {"file_path": 1})
            return [row["file_path"] for row in cursor if "file_path" in row]
        except PyMongoError as exc:
            self.logger.error("Error while getting files from metadata store: %s", exc)
            raise StorageError(
                Error.failure("get.files.mongo", "Error while getting files from metadata store")
            ) from exc

    def delete_by_bucket(self, bucket: str, cancellation: CancellationToken | None = None) -> None:
        ensure_token(cancellation).raise_if_cancelled("metadata removal")
        try:
            result = self.collection.delete_many({"bucket_name": bucket})
        except PyMongoError as exc:
            self.logger.error("Error while deleting files from metadata store: %s", exc)
            raise StorageError(
                Error.failure("delete.files.mongo", "Error while deleting files from metadata store")
            ) from exc
        self.logger.debug("Deleted %d metadata rows for %s", result.deleted_count, bucket)

    def add_range(
        self, records: Sequence[ArtifactRecord], cancellation: CancellationToken | None = None
    ) -> None:
        if not records:
            return
        ensure_token(cancellation).raise_if_cancelled("metadata insert")
        try:
            self.collection.insert_many([record.to_document() for record in records])
        except PyMongoError as exc:
            self.logger.error("Error while uploading files to metadata store: %s", exc)
            raise StorageError(
                Error.failure("files.upload.mongo", "Error while uploading files to metadata store")
            ) from exc


__all__ = ["ArtifactRepository", "MongoArtifactRepository"]
