from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status

from backoffice.features.entities.errors import EntityApiError
from backoffice.features.media.errors import (
    AttachmentValidationError,
    BatchUploadFailedError,
    SubmissionInProgressError,
    UploadCancelledError,
)

from .errors import DialogNotFoundError, StagedFileNotFoundError
from .service import DialogRegistry, read_candidate
from .types import (
    BatchFailureDetail,
    DialogDetail,
    DialogOpenInput,
    DialogSubmitInput,
    DialogSubmitResponse,
    StagedFileView,
    UploadProgressView,
)

router = APIRouter(prefix="/api/dialogs", tags=["dialogs"])


def get_dialog_registry(request: Request) -> DialogRegistry:
    return request.app.state.dialogs


def _raise_http_error(exc: Exception) -> None:
    if isinstance(exc, (DialogNotFoundError, StagedFileNotFoundError)):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, BatchUploadFailedError):
        detail = BatchFailureDetail(
            message="Some files could not be uploaded.",
            errors=exc.outcome.errors,
            media=exc.outcome.media,
        )
        raise HTTPException(status_code=422, detail=detail.model_dump()) from exc
    if isinstance(exc, (SubmissionInProgressError, UploadCancelledError)):
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    if isinstance(exc, AttachmentValidationError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, EntityApiError):
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    raise exc


@router.post("", response_model=DialogDetail, status_code=status.HTTP_201_CREATED)
async def open_dialog(
    payload: DialogOpenInput,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> DialogDetail:
    session = registry.open(
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
        existing_media=payload.existing_media,
    )
    return session.detail()


@router.get("/{dialog_id}", response_model=DialogDetail)
async def get_dialog(
    dialog_id: str,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> DialogDetail:
    try:
        return registry.get(dialog_id).detail()
    except Exception as exc:
        _raise_http_error(exc)


@router.post("/{dialog_id}/files", response_model=list[StagedFileView])
async def stage_files(
    dialog_id: str,
    files: list[UploadFile] = File(...),
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> list[StagedFileView]:
    try:
        session = registry.get(dialog_id)
        max_size = session.settings.upload_max_file_size_bytes
        candidates = [await read_candidate(item, max_size=max_size) for item in files]
        staged = session.stage(candidates)
        return session.staged_views(staged)
    except Exception as exc:
        _raise_http_error(exc)


@router.delete("/{dialog_id}/files/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_staged_file(
    dialog_id: str,
    attachment_id: str,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> Response:
    try:
        registry.get(dialog_id).remove_staged(attachment_id)
    except Exception as exc:
        _raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{dialog_id}/files/{attachment_id}/preview")
async def get_staged_preview(
    dialog_id: str,
    attachment_id: str,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> Response:
    try:
        candidate = registry.get(dialog_id).preview(attachment_id)
    except Exception as exc:
        _raise_http_error(exc)
    return Response(content=candidate.content, media_type=candidate.content_type)


@router.delete("/{dialog_id}/existing/{index}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_existing_media(
    dialog_id: str,
    index: int,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> Response:
    try:
        registry.get(dialog_id).remove_existing(index)
    except Exception as exc:
        _raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{dialog_id}/progress", response_model=UploadProgressView)
async def get_upload_progress(
    dialog_id: str,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> UploadProgressView:
    try:
        return registry.get(dialog_id).progress_view()
    except Exception as exc:
        _raise_http_error(exc)


@router.post("/{dialog_id}/submit", response_model=DialogSubmitResponse)
async def submit_dialog(
    dialog_id: str,
    payload: DialogSubmitInput,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> DialogSubmitResponse:
    try:
        session = registry.get(dialog_id)
        entity = await session.submit(payload.payload)
        return DialogSubmitResponse(entity=entity, media=session.submission.existing_media)
    except Exception as exc:
        _raise_http_error(exc)


@router.delete("/{dialog_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_dialog(
    dialog_id: str,
    registry: DialogRegistry = Depends(get_dialog_registry),
) -> Response:
    try:
        registry.close(dialog_id)
    except Exception as exc:
        _raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
