from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import BatchOutcome, TransferErrorKind, UploadResult


class MediaDomainError(Exception):
    """Base exception for media staging and upload operations."""


class AttachmentValidationError(MediaDomainError):
    pass


class TransferError(MediaDomainError):
    def __init__(self, message: str, *, kind: TransferErrorKind = "generic") -> None:
        super().__init__(message)
        self.kind = kind


class BatchUploadFailedError(MediaDomainError):
    def __init__(self, outcome: BatchOutcome) -> None:
        super().__init__("; ".join(outcome.errors) or "Upload failed.")
        self.outcome = outcome


class UploadCancelledError(MediaDomainError):
    def __init__(self, results: list[UploadResult]) -> None:
        super().__init__(f"Upload cancelled after {len(results)} file(s).")
        self.results = results


class SubmissionInProgressError(MediaDomainError):
    pass


class ProviderAlreadyRegisteredError(MediaDomainError):
    pass
