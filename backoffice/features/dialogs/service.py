from __future__ import annotations

import logging
import mimetypes
from typing import Any
from uuid import uuid4

from fastapi import UploadFile

from backoffice.core.config import Settings, get_settings
from backoffice.features.entities.client import BusinessApiClient
from backoffice.features.media import (
    CandidateFile,
    MediaDescriptor,
    MediaSubmission,
    PendingAttachment,
    StagingList,
    SubmissionBridge,
    format_file_size,
)
from backoffice.features.media.formatting import format_megabytes, media_kind_label
from backoffice.features.media.errors import SubmissionInProgressError
from backoffice.features.media.uploads import SingleFileUploader

from .errors import DialogNotFoundError, StagedFileNotFoundError
from .types import DialogDetail, StagedFileView, UploadProgressView

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 1024 * 1024


def _content_type_for(upload: UploadFile, filename: str) -> str:
    from_upload = (upload.content_type or "").strip().lower()
    if from_upload:
        return from_upload
    guessed, _ = mimetypes.guess_type(filename)
    return (guessed or "application/octet-stream").lower()


async def read_candidate(upload: UploadFile, *, max_size: int) -> CandidateFile:
    """Read an uploaded part into a candidate file.

    Bytes beyond `max_size` are counted but not kept; such a file is rejected
    by validation anyway, so only its declared size matters.
    """
    filename = upload.filename or "upload"
    total = 0
    chunks: list[bytes] = []
    while True:
        chunk = await upload.read(_READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total <= max_size:
            chunks.append(chunk)
        elif chunks:
            chunks.clear()
    return CandidateFile(
        filename=filename,
        content_type=_content_type_for(upload, filename),
        size_bytes=total,
        content=b"".join(chunks) if total <= max_size else b"",
    )


class DialogSession:
    """Server-side state of one open create/edit dialog.

    The picker (staging list) and the submission share only the bridge.
    """

    def __init__(
        self,
        *,
        entity_type: str,
        entity_id: str | None,
        existing_media: list[MediaDescriptor],
        uploader: SingleFileUploader,
        entity_client: BusinessApiClient,
        settings: Settings | None = None,
    ) -> None:
        resolved = settings or get_settings()
        self.id = str(uuid4())
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.settings = resolved
        self.bridge = SubmissionBridge()
        self.picker = StagingList.from_settings(resolved)
        self.picker.attach_to(self.bridge)
        self.submission = MediaSubmission(
            self.bridge,
            uploader,
            existing_media=existing_media,
            max_in_flight=resolved.upload_max_in_flight,
            max_total_size=resolved.upload_max_batch_size_bytes,
        )
        self._entity_client = entity_client

    def _ensure_idle(self) -> None:
        # The picker is cleared wholesale once a submit succeeds.
        if self.submission.in_flight:
            raise SubmissionInProgressError("Files cannot be changed while a submission is in progress.")

    def stage(self, candidates: list[CandidateFile]) -> list[PendingAttachment]:
        self._ensure_idle()
        return self.picker.stage(candidates)

    def remove_staged(self, attachment_id: str) -> None:
        self._ensure_idle()
        if not self.picker.remove(attachment_id):
            raise StagedFileNotFoundError(f"Staged file '{attachment_id}' was not found.")

    def remove_existing(self, index: int) -> MediaDescriptor:
        self._ensure_idle()
        try:
            return self.submission.remove_existing_media(index)
        except IndexError as exc:
            raise StagedFileNotFoundError(str(exc)) from exc

    def preview(self, attachment_id: str) -> CandidateFile:
        candidate = self.picker.resolve_preview(attachment_id)
        if candidate is None:
            raise StagedFileNotFoundError(f"No preview is available for '{attachment_id}'.")
        return candidate

    async def submit(self, payload: dict[str, Any]) -> dict[str, Any]:
        async def _save(media: list[MediaDescriptor]) -> dict[str, Any]:
            return await self._entity_client.save_entity(
                self.entity_type,
                self.entity_id,
                payload,
                media,
            )

        entity = await self.submission.submit(_save)
        if self.entity_id is None:
            created_id = entity.get("id")
            if isinstance(created_id, str) and created_id:
                self.entity_id = created_id
        return entity

    def close(self) -> None:
        if self.submission.cancel("dialog closed"):
            logger.info("Dialog %s closed during upload; remaining files were cancelled.", self.id)
        self.picker.close()

    def _staged_view(self, item: PendingAttachment) -> StagedFileView:
        preview_url = None
        if item.preview_ref is not None:
            preview_url = f"/api/dialogs/{self.id}/files/{item.id}/preview"
        return StagedFileView(
            id=item.id,
            filename=item.file.filename,
            content_type=item.file.content_type,
            size_bytes=item.file.size_bytes,
            size_label=format_file_size(item.file.size_bytes),
            kind=item.kind,
            kind_label=media_kind_label(item.kind),
            accepted=item.accepted,
            rejection_reason=item.rejection_reason,
            preview_url=preview_url,
        )

    def staged_views(self, items: list[PendingAttachment] | None = None) -> list[StagedFileView]:
        source = list(self.picker.items) if items is None else items
        return [self._staged_view(item) for item in source]

    def progress_view(self) -> UploadProgressView:
        progress = self.submission.progress
        return UploadProgressView(
            done=progress.done,
            total=progress.total,
            in_flight=self.submission.in_flight,
        )

    def detail(self) -> DialogDetail:
        return DialogDetail(
            id=self.id,
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            existing_media=self.submission.existing_media,
            staged=self.staged_views(),
            total_size_label=format_file_size(self.picker.accepted_size),
            max_total_size_label=format_megabytes(self.settings.upload_max_batch_size_bytes),
            progress=self.progress_view(),
        )


class DialogRegistry:
    """Open dialog sessions of one application instance."""

    def __init__(
        self,
        *,
        uploader: SingleFileUploader,
        entity_client: BusinessApiClient,
        settings: Settings | None = None,
    ) -> None:
        self._uploader = uploader
        self._entity_client = entity_client
        self._settings = settings
        self._sessions: dict[str, DialogSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(
        self,
        *,
        entity_type: str,
        entity_id: str | None = None,
        existing_media: list[MediaDescriptor] | None = None,
    ) -> DialogSession:
        session = DialogSession(
            entity_type=entity_type,
            entity_id=entity_id,
            existing_media=list(existing_media or []),
            uploader=self._uploader,
            entity_client=self._entity_client,
            settings=self._settings,
        )
        self._sessions[session.id] = session
        logger.debug("Opened %s dialog %s", entity_type, session.id)
        return session

    def get(self, dialog_id: str) -> DialogSession:
        session = self._sessions.get(dialog_id)
        if session is None:
            raise DialogNotFoundError(f"Dialog '{dialog_id}' was not found.")
        return session

    def close(self, dialog_id: str) -> None:
        session = self._sessions.pop(dialog_id, None)
        if session is None:
            raise DialogNotFoundError(f"Dialog '{dialog_id}' was not found.")
        session.close()

    def close_all(self) -> None:
        for dialog_id in list(self._sessions):
            self._sessions.pop(dialog_id).close()
