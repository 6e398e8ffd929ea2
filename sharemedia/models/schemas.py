"""
Pydantic models for sharemedia.

Records exchanged with the host application through the shared
preferences domain.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator


# =====================================================
# Content Kinds
# =====================================================

class ContentKind(str, Enum):
    """Kind of shared content. Declaration order is the probing priority."""
    IMAGE = "image"
    VIDEO = "video"
    TEXT = "text"
    FILE = "file"
    URL = "url"

    @property
    def type_identifier(self) -> str:
        """Uniform type identifier an attachment must declare for this kind."""
        return _TYPE_IDENTIFIERS[self]

    @property
    def fallback_extension(self) -> str:
        """Extension for generated names when the source has no file name."""
        return _FALLBACK_EXTENSIONS.get(self, "")


_TYPE_IDENTIFIERS = {
    ContentKind.IMAGE: "public.image",
    ContentKind.VIDEO: "public.movie",
    ContentKind.TEXT: "public.text",
    ContentKind.FILE: "public.file-url",
    ContentKind.URL: "public.url",
}

_FALLBACK_EXTENSIONS = {
    ContentKind.IMAGE: ".png",
    ContentKind.VIDEO: ".mp4",
    ContentKind.TEXT: ".txt",
}


# =====================================================
# Hand-off Models
# =====================================================

class MediaRecord(BaseModel):
    """One materialized attachment."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    path: str
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    thumbnail_path: Optional[str] = Field(default=None, alias="thumbnail")
    duration_ms: Optional[int] = Field(default=None, alias="duration")
    kind: ContentKind = Field(alias="type")

    @field_validator("path")
    @classmethod
    def _path_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("path must not be empty")
        return value

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _round_duration(cls, value: Any) -> Any:
        # Hosts written against the float encoding send e.g. 1234.0
        if isinstance(value, float):
            return int(round(value))
        return value

    @model_validator(mode="after")
    def _thumbnail_pairs_with_duration(self) -> "MediaRecord":
        if (self.thumbnail_path is None) != (self.duration_ms is None):
            raise ValueError("thumbnail and duration must be set together")
        return self

    def to_wire(self) -> Dict[str, Any]:
        """Interchange form: wire field names, absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


_RECORD_LIST = TypeAdapter(List[MediaRecord])


class HandoffEnvelope(BaseModel):
    """Complete hand-off payload committed in one write."""
    records: List[MediaRecord] = []
    message: Optional[str] = None

    def records_json(self) -> str:
        """Serialize records to the canonical interchange text."""
        return json.dumps([record.to_wire() for record in self.records])

    @classmethod
    def from_store_values(cls, records_json: Optional[str], message: Optional[str]) -> "HandoffEnvelope":
        """Rebuild an envelope from the two stored values."""
        records = _RECORD_LIST.validate_json(records_json) if records_json else []
        return cls(records=records, message=message)
