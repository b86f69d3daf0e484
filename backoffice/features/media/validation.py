from __future__ import annotations

from collections.abc import Iterable

from .errors import AttachmentValidationError
from .formatting import classify_media_kind, format_file_size, format_megabytes
from .schemas import CandidateFile, ValidationOutcome

_IMAGE_MIME_TYPES = {
    "image/png",
    "image/jpg",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "image/svg+xml",
}
_VIDEO_MIME_TYPES = {
    "video/mp4",
    "video/avi",
    "video/x-msvideo",
    "video/mov",
    "video/quicktime",
    "video/wmv",
    "video/x-ms-wmv",
    "video/flv",
    "video/x-flv",
    "video/webm",
}
_AUDIO_MIME_TYPES = {
    "audio/mp3",
    "audio/mpeg",
    "audio/wav",
    "audio/ogg",
    "audio/aac",
    "audio/flac",
}
_DOCUMENT_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/csv",
    "application/rtf",
    "application/xml",
    "text/xml",
}
ALLOWED_MIME_TYPES = frozenset(
    {
        *_IMAGE_MIME_TYPES,
        *_VIDEO_MIME_TYPES,
        *_AUDIO_MIME_TYPES,
        *_DOCUMENT_MIME_TYPES,
    }
)
# Checked before the allow-list and always wins.
DENIED_MIME_TYPES = frozenset(
    {
        "application/x-executable",
        "application/x-msdownload",
        "application/x-dosexec",
        "application/zip",
        "application/x-zip-compressed",
        "application/x-rar-compressed",
        "application/vnd.rar",
        "application/x-7z-compressed",
        "application/x-tar",
        "application/gzip",
        "application/x-gzip",
    }
)


def _normalize_content_type(content_type: str) -> str:
    # Drop parameters such as `; charset=utf-8`.
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_allowed_content_type(content_type: str) -> bool:
    normalized = _normalize_content_type(content_type)
    if normalized in DENIED_MIME_TYPES:
        return False
    return normalized in ALLOWED_MIME_TYPES


def _unsupported_type_reason(content_type: str) -> str:
    return f"Unsupported file type: {content_type or 'unknown'}"


def validate_candidate(
    candidate: CandidateFile,
    *,
    running_total: int = 0,
    max_file_size: int,
    max_total_size: int,
) -> ValidationOutcome:
    """Classify a candidate file as accepted or rejected.

    `running_total` is the byte size of files already accepted into the
    staging list. The per-file ceiling is checked before the aggregate one.
    """
    normalized = _normalize_content_type(candidate.content_type)
    kind = classify_media_kind(normalized)

    if not is_allowed_content_type(normalized):
        return ValidationOutcome(
            accepted=False,
            kind=kind,
            rejection_reason=_unsupported_type_reason(candidate.content_type),
        )

    if candidate.size_bytes > max_file_size:
        return ValidationOutcome(
            accepted=False,
            kind=kind,
            rejection_reason=(
                f"{candidate.filename} exceeds the {format_megabytes(max_file_size)} per-file limit"
            ),
        )

    if running_total + candidate.size_bytes > max_total_size:
        return ValidationOutcome(
            accepted=False,
            kind=kind,
            rejection_reason=f"Exceeds the {format_megabytes(max_total_size)} total limit",
        )

    return ValidationOutcome(accepted=True, kind=kind)


def validate_selection(
    candidates: Iterable[CandidateFile],
    *,
    already_staged_bytes: int = 0,
    max_file_size: int,
    max_total_size: int,
) -> list[tuple[CandidateFile, ValidationOutcome]]:
    running_total = already_staged_bytes
    outcomes: list[tuple[CandidateFile, ValidationOutcome]] = []
    for candidate in candidates:
        outcome = validate_candidate(
            candidate,
            running_total=running_total,
            max_file_size=max_file_size,
            max_total_size=max_total_size,
        )
        if outcome.accepted:
            running_total += candidate.size_bytes
        outcomes.append((candidate, outcome))
    return outcomes


def validate_total_size(
    files: Iterable[CandidateFile],
    *,
    max_total_size: int,
) -> int:
    total = sum(item.size_bytes for item in files)
    if total > max_total_size:
        raise AttachmentValidationError(
            f"Total size of files ({format_file_size(total)}) exceeds the "
            f"{format_megabytes(max_total_size)} limit"
        )
    return total
