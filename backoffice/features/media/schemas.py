from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, model_validator

MediaKind = Literal["image", "video", "audio", "document"]
TransferErrorKind = Literal["too_large", "unsupported_media", "generic"]


def _new_file_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class CandidateFile:
    """A file picked by the user, not yet validated.

    `size_bytes` is the declared size and is what every ceiling is checked
    against; `content` is only read when the file is actually transferred.
    """

    filename: str
    content_type: str
    size_bytes: int
    content: bytes = field(default=b"", repr=False)
    id: str = field(default_factory=_new_file_id)

    @classmethod
    def from_bytes(cls, filename: str, content_type: str, data: bytes) -> CandidateFile:
        return cls(
            filename=filename,
            content_type=content_type,
            size_bytes=len(data),
            content=data,
        )


@dataclass(frozen=True)
class ValidationOutcome:
    accepted: bool
    kind: MediaKind
    rejection_reason: str | None = None


@dataclass(frozen=True)
class PendingAttachment:
    file: CandidateFile
    kind: MediaKind
    preview_ref: str | None = None
    rejection_reason: str | None = None

    @property
    def id(self) -> str:
        return self.file.id

    @property
    def accepted(self) -> bool:
        return self.rejection_reason is None


@dataclass(frozen=True)
class UploadResult:
    source_file: CandidateFile
    success: bool
    remote_url: str | None = None
    error: str | None = None
    error_kind: TransferErrorKind | None = None


@dataclass(frozen=True)
class UploadProgress:
    done: int
    total: int
    in_flight: bool


class MediaDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: MediaKind
    url: str
    mimetype: str | None = None
    filename: str | None = None
    caption: str | None = None


class BatchOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    media: list[MediaDescriptor]
    errors: list[str]

    @model_validator(mode="after")
    def _success_matches_errors(self) -> BatchOutcome:
        if self.success != (not self.errors):
            raise ValueError("success must be true exactly when errors is empty.")
        return self
