from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

import httpx

from backoffice.core.config import Settings, get_settings

from .aggregate import aggregate_results
from .errors import TransferError, UploadCancelledError
from .schemas import BatchOutcome, CandidateFile, PendingAttachment, UploadResult

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/file-upload"
GENERIC_UPLOAD_ERROR = "Error uploading file"
FILE_TOO_LARGE_ERROR = "File is too large"
UNSUPPORTED_MEDIA_ERROR = "Unsupported file type"
MISSING_URL_ERROR = "Upload response did not include a file URL"
UNEXPECTED_UPLOAD_ERROR = "Unexpected upload error"

ProgressCallback = Callable[[int, int], Awaitable[None] | None]


class SingleFileUploader(Protocol):
    async def upload_single_file(self, file: CandidateFile) -> UploadResult: ...


class CancellationToken:
    """Checked by `upload_files` before each file is started."""

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        if not self._cancelled:
            self._cancelled = True
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("message", "detail", "error"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def transfer_error_from_response(response: httpx.Response) -> TransferError:
    if response.status_code == 413:
        return TransferError(FILE_TOO_LARGE_ERROR, kind="too_large")
    if response.status_code == 415:
        return TransferError(UNSUPPORTED_MEDIA_ERROR, kind="unsupported_media")
    return TransferError(_server_message(response) or GENERIC_UPLOAD_ERROR)


def _failed(file: CandidateFile, error: TransferError) -> UploadResult:
    return UploadResult(
        source_file=file,
        success=False,
        error=str(error),
        error_kind=error.kind,
    )


class MediaUploadClient:
    def __init__(self, client: httpx.AsyncClient, *, upload_path: str = UPLOAD_PATH) -> None:
        self._client = client
        self._upload_path = upload_path

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> MediaUploadClient:
        resolved = settings or get_settings()
        client = httpx.AsyncClient(
            base_url=resolved.media_api_base_url,
            headers=resolved.auth_headers,
            timeout=resolved.upload_request_timeout_seconds,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def upload_single_file(self, file: CandidateFile) -> UploadResult:
        try:
            response = await self._client.post(
                self._upload_path,
                files={"file": (file.filename, file.content, file.content_type)},
            )
        except httpx.HTTPError as exc:
            logger.warning("Upload of %s failed in transport.", file.filename, exc_info=True)
            return _failed(file, TransferError(str(exc) or GENERIC_UPLOAD_ERROR))

        if not response.is_success:
            error = transfer_error_from_response(response)
            logger.warning(
                "Upload of %s rejected with status %s: %s",
                file.filename,
                response.status_code,
                error,
            )
            return _failed(file, error)

        try:
            payload: Any = response.json()
        except ValueError:
            payload = None
        url = payload.get("url") if isinstance(payload, dict) else None
        if not isinstance(url, str) or not url:
            return _failed(file, TransferError(MISSING_URL_ERROR))
        return UploadResult(source_file=file, success=True, remote_url=url)


def _as_candidate(item: PendingAttachment | CandidateFile) -> CandidateFile:
    if isinstance(item, PendingAttachment):
        return item.file
    return item


async def notify_progress(on_progress: ProgressCallback | None, done: int, total: int) -> None:
    if on_progress is None:
        return
    maybe_awaitable = on_progress(done, total)
    if inspect.isawaitable(maybe_awaitable):
        await maybe_awaitable


async def _upload_guarded(uploader: SingleFileUploader, file: CandidateFile) -> UploadResult:
    try:
        return await uploader.upload_single_file(file)
    except Exception:
        logger.exception("Unexpected error while uploading %s", file.filename)
        return UploadResult(source_file=file, success=False, error=UNEXPECTED_UPLOAD_ERROR)


async def upload_files(
    uploader: SingleFileUploader,
    attachments: Sequence[PendingAttachment | CandidateFile],
    *,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
    max_in_flight: int = 1,
) -> list[UploadResult]:
    """Upload every file and return one result per file, in input order.

    A failed file never stops the files after it. With `max_in_flight > 1`
    up to that many transfers overlap, but progress still counts 1..N.
    """
    files = [_as_candidate(item) for item in attachments]
    total = len(files)
    slots: list[UploadResult | None] = [None] * total
    done = 0
    semaphore = asyncio.Semaphore(max(1, max_in_flight))

    async def _run(index: int, file: CandidateFile) -> None:
        nonlocal done
        async with semaphore:
            if cancel_token is not None and cancel_token.cancelled:
                return
            result = await _upload_guarded(uploader, file)
        slots[index] = result
        done += 1
        await notify_progress(on_progress, done, total)

    if max_in_flight <= 1:
        for index, file in enumerate(files):
            await _run(index, file)
    else:
        await asyncio.gather(*(_run(index, file) for index, file in enumerate(files)))

    results = [item for item in slots if item is not None]
    if len(results) < total:
        logger.info("Upload batch cancelled after %s of %s file(s).", len(results), total)
        raise UploadCancelledError(results)
    return results


async def upload_batch(
    uploader: SingleFileUploader,
    attachments: Sequence[PendingAttachment | CandidateFile],
    *,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
    max_in_flight: int = 1,
) -> BatchOutcome:
    results = await upload_files(
        uploader,
        attachments,
        on_progress=on_progress,
        cancel_token=cancel_token,
        max_in_flight=max_in_flight,
    )
    return aggregate_results(results)
