from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backoffice.features.entities.types import EntityType
from backoffice.features.media.schemas import MediaDescriptor, MediaKind


class DialogOpenInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entity_type: EntityType
    entity_id: str | None = Field(default=None, min_length=1)
    existing_media: list[MediaDescriptor] = Field(default_factory=list)


class DialogSubmitInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    payload: dict[str, Any] = Field(default_factory=dict)


class StagedFileView(BaseModel):
    id: str
    filename: str
    content_type: str
    size_bytes: int
    size_label: str
    kind: MediaKind
    kind_label: str
    accepted: bool
    rejection_reason: str | None = None
    preview_url: str | None = None


class UploadProgressView(BaseModel):
    done: int
    total: int
    in_flight: bool


class DialogDetail(BaseModel):
    id: str
    entity_type: EntityType
    entity_id: str | None
    existing_media: list[MediaDescriptor]
    staged: list[StagedFileView]
    total_size_label: str
    max_total_size_label: str
    progress: UploadProgressView


class DialogSubmitResponse(BaseModel):
    entity: dict[str, Any]
    media: list[MediaDescriptor]


class BatchFailureDetail(BaseModel):
    message: str
    errors: list[str]
    media: list[MediaDescriptor]
