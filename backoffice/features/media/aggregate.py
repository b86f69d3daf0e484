from __future__ import annotations

from collections.abc import Iterable

from .formatting import classify_media_kind
from .schemas import BatchOutcome, MediaDescriptor, UploadResult

UNKNOWN_UPLOAD_ERROR = "Unknown error"


def build_media_descriptor(result: UploadResult) -> MediaDescriptor:
    if not result.success or not result.remote_url:
        raise ValueError(f"Upload of '{result.source_file.filename}' did not succeed.")
    source = result.source_file
    return MediaDescriptor(
        type=classify_media_kind(source.content_type),
        url=result.remote_url,
        mimetype=source.content_type,
        filename=source.filename,
        caption=None,
    )


def format_upload_error(result: UploadResult) -> str:
    return f"{result.source_file.filename}: {result.error or UNKNOWN_UPLOAD_ERROR}"


def aggregate_results(results: Iterable[UploadResult]) -> BatchOutcome:
    media: list[MediaDescriptor] = []
    errors: list[str] = []
    for result in results:
        if result.success and result.remote_url:
            media.append(build_media_descriptor(result))
        else:
            errors.append(format_upload_error(result))
    return BatchOutcome(success=not errors, media=media, errors=errors)
