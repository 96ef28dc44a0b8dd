"""Object and metadata store adapters for generated artifacts."""

from .metadata import ArtifactRepository, MongoArtifactRepository
from .objects import MinioObjectStore, ObjectStore, bucket_slug
from .records import MARKDOWN_CONTENT_TYPE, ArtifactRecord

__all__ = [
    "ArtifactRecord",
    "ArtifactRepository",
    "MARKDOWN_CONTENT_TYPE",
    "MinioObjectStore",
    "MongoArtifactRepository",
    "ObjectStore",
    "bucket_slug",
]
