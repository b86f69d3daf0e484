from .aggregate import aggregate_results, build_media_descriptor
from .bridge import PendingFilesProvider, SubmissionBridge
from .errors import (
    AttachmentValidationError,
    BatchUploadFailedError,
    MediaDomainError,
    ProviderAlreadyRegisteredError,
    SubmissionInProgressError,
    TransferError,
    UploadCancelledError,
)
from .formatting import classify_media_kind, format_file_size
from .previews import PreviewManager
from .schemas import (
    BatchOutcome,
    CandidateFile,
    MediaDescriptor,
    MediaKind,
    PendingAttachment,
    UploadProgress,
    UploadResult,
    ValidationOutcome,
)
from .staging import StagingList
from .submission import MediaSubmission
from .uploads import CancellationToken, MediaUploadClient, upload_batch, upload_files
from .validation import validate_candidate, validate_selection, validate_total_size

__all__ = [
    "AttachmentValidationError",
    "BatchOutcome",
    "BatchUploadFailedError",
    "CancellationToken",
    "CandidateFile",
    "MediaDescriptor",
    "MediaDomainError",
    "MediaKind",
    "MediaSubmission",
    "MediaUploadClient",
    "PendingAttachment",
    "PendingFilesProvider",
    "PreviewManager",
    "ProviderAlreadyRegisteredError",
    "StagingList",
    "SubmissionBridge",
    "SubmissionInProgressError",
    "TransferError",
    "UploadCancelledError",
    "UploadProgress",
    "UploadResult",
    "ValidationOutcome",
    "aggregate_results",
    "build_media_descriptor",
    "classify_media_kind",
    "format_file_size",
    "upload_batch",
    "upload_files",
    "validate_candidate",
    "validate_selection",
    "validate_total_size",
]
