"""Replaces a project's published documentation with a freshly generated set."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import PurePath
from typing import List, Mapping

from .cancellation import CancellationToken, ensure_token
from .logging import get_logger
from .prompting import DOCUMENT_MARKER
from .storage import ArtifactRecord, ArtifactRepository, ObjectStore

SOURCE_SUFFIX = ".cs"
ARTIFACT_SUFFIX = ".md"


def artifact_name(path: str) -> str:
    """``src/Core/Foo.cs`` -> ``Foo.md``; other suffixes are kept."""
    name = PurePath(path.replace("\\", "/")).name
    if name.endswith(SOURCE_SUFFIX):
        return name[: -len(SOURCE_SUFFIX)] + ARTIFACT_SUFFIX
    return name


def trim_document(text: str, marker: str = DOCUMENT_MARKER) -> str:
    """Drop any preamble before the first ``marker``; text without it is kept as is."""
    index = text.find(marker)
    return text[index:] if index >= 0 else text


class ArtifactSynchronizer:
    """Deletes the previous artifacts of a project, then uploads the new ones.

    Steps run strictly in order: list existing rows, remove the bucket, drop
    the rows, then upload each document and insert its row. The first failure
    propagates; already-applied steps are not rolled back.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        repository: ArtifactRepository,
        *,
        marker: str = DOCUMENT_MARKER,
        logger: logging.Logger | None = None,
    ) -> None:
        self.object_store = object_store
        self.repository = repository
        self.marker = marker
        self.logger = logger or get_logger("synchronizer")

    @staticmethod
    def bucket_for(project_name: str) -> str:
        return PurePath(project_name.rstrip("/\\").replace("\\", "/")).name

    def sync(
        self,
        documents: Mapping[str, str],
        project_name: str,
        cancellation: CancellationToken | None = None,
    ) -> List[str]:
        token = ensure_token(cancellation)
        bucket = self.bucket_for(project_name)

        previous = self.repository.file_names(bucket, token)
        self.object_store.remove_bucket_if_exists(bucket, previous, token)
        self.repository.delete_by_bucket(bucket, token)
        self.logger.debug("Cleared %d previous artifacts from %s", len(previous), bucket)

        self._warn_on_collisions(documents)

        uploaded: List[str] = []
        for path, document in documents.items():
            name = artifact_name(path)
            data = trim_document(document, self.marker).encode("utf-8")
            self.object_store.upload(bucket, name, data, token)
            record = ArtifactRecord(file_size=len(data), file_path=name, bucket_name=bucket)
            self.repository.add_range([record], token)
            uploaded.append(name)

        self.logger.info("Uploaded %d artifacts to %s", len(uploaded), bucket)
        return uploaded

    def _warn_on_collisions(self, documents: Mapping[str, str]) -> None:
        counts = Counter(artifact_name(path) for path in documents)
        for name, count in sorted(counts.items()):
            if count > 1:
                self.logger.warning(
                    "%d source files map to artifact %s; the last one uploaded wins", count, name
                )


__all__ = ["ArtifactSynchronizer", "artifact_name", "trim_document"]
