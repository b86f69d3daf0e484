from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from .aggregate import build_media_descriptor, format_upload_error
from .bridge import SubmissionBridge
from .errors import BatchUploadFailedError, SubmissionInProgressError, UploadCancelledError
from .schemas import BatchOutcome, CandidateFile, MediaDescriptor, UploadProgress, UploadResult
from .uploads import (
    CancellationToken,
    ProgressCallback,
    SingleFileUploader,
    notify_progress,
    upload_files,
)
from .validation import validate_total_size

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")
EntitySubmitter = Callable[[list[MediaDescriptor]], Awaitable[EntityT]]


class MediaSubmission:
    """Uploads a dialog's staged files and merges them into the entity payload.

    Files that uploaded successfully in an earlier, partially failed attempt
    are remembered and are not uploaded again on retry.
    """

    def __init__(
        self,
        bridge: SubmissionBridge,
        uploader: SingleFileUploader,
        *,
        existing_media: Iterable[MediaDescriptor] = (),
        max_in_flight: int = 1,
        max_total_size: int | None = None,
    ) -> None:
        self._bridge = bridge
        self._uploader = uploader
        self._existing_media = list(existing_media)
        self._max_in_flight = max_in_flight
        self._max_total_size = max_total_size
        self._lock = asyncio.Lock()
        self._uploaded: dict[str, MediaDescriptor] = {}
        self._cancel_token: CancellationToken | None = None
        self._progress = UploadProgress(done=0, total=0, in_flight=False)

    @property
    def existing_media(self) -> list[MediaDescriptor]:
        return list(self._existing_media)

    @property
    def uploaded_media(self) -> list[MediaDescriptor]:
        return list(self._uploaded.values())

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    @property
    def progress(self) -> UploadProgress:
        return self._progress

    def remove_existing_media(self, index: int) -> MediaDescriptor:
        if index < 0 or index >= len(self._existing_media):
            raise IndexError(f"No existing media at position {index}.")
        return self._existing_media.pop(index)

    def cancel(self, reason: str | None = None) -> bool:
        if self._cancel_token is None:
            return False
        self._cancel_token.cancel(reason)
        return True

    def _remember(self, results: Iterable[UploadResult]) -> None:
        for result in results:
            if result.success and result.remote_url:
                self._uploaded[result.source_file.id] = build_media_descriptor(result)

    def _outcome_for(self, files: list[CandidateFile], results: list[UploadResult]) -> BatchOutcome:
        errors = [format_upload_error(result) for result in results if not result.success]
        media = [self._uploaded[item.id] for item in files if item.id in self._uploaded]
        return BatchOutcome(success=not errors, media=media, errors=errors)

    async def submit(
        self,
        submit_entity: EntitySubmitter[EntityT],
        *,
        on_progress: ProgressCallback | None = None,
    ) -> EntityT:
        if self._lock.locked():
            raise SubmissionInProgressError("A submission is already in progress for this dialog.")

        async with self._lock:
            files = self._bridge.get_pending_files()
            if self._max_total_size is not None:
                validate_total_size(files, max_total_size=self._max_total_size)

            pending_ids = {item.id for item in files}
            for file_id in list(self._uploaded):
                if file_id not in pending_ids:
                    del self._uploaded[file_id]
            to_upload = [item for item in files if item.id not in self._uploaded]

            token = CancellationToken()
            self._cancel_token = token
            self._progress = UploadProgress(done=0, total=len(to_upload), in_flight=True)

            async def _track(done: int, total: int) -> None:
                self._progress = UploadProgress(done=done, total=total, in_flight=True)
                await notify_progress(on_progress, done, total)

            try:
                results = await upload_files(
                    self._uploader,
                    to_upload,
                    on_progress=_track,
                    cancel_token=token,
                    max_in_flight=self._max_in_flight,
                )
            except UploadCancelledError as exc:
                self._remember(exc.results)
                raise
            finally:
                self._cancel_token = None
                self._progress = UploadProgress(
                    done=self._progress.done,
                    total=self._progress.total,
                    in_flight=False,
                )

            self._remember(results)
            if token.cancelled:
                raise UploadCancelledError(results)
            outcome = self._outcome_for(files, results)
            if not outcome.success:
                logger.info(
                    "Upload batch finished with %s error(s); entity was not submitted.",
                    len(outcome.errors),
                )
                raise BatchUploadFailedError(outcome)

            media = [*self._existing_media, *outcome.media]
            entity = await submit_entity(media)

            self._bridge.clear_pending()
            self._uploaded.clear()
            self._existing_media = media
            return entity
