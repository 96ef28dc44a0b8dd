"""Metadata row describing one uploaded documentation artifact."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

MARKDOWN_CONTENT_TYPE = "text/markdown"


class ArtifactRecord(BaseModel):
    """One row of the ``files`` collection; ``id`` is stored as ``_id``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    file_size: int
    content_type: str = MARKDOWN_CONTENT_TYPE
    file_path: str
    bucket_name: str
    upload_date: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


__all__ = ["ArtifactRecord", "MARKDOWN_CONTENT_TYPE"]
