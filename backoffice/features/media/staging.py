from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from backoffice.core.config import Settings, get_settings

from .bridge import SubmissionBridge
from .errors import AttachmentValidationError
from .previews import PreviewManager
from .schemas import CandidateFile, PendingAttachment
from .validation import validate_selection

logger = logging.getLogger(__name__)


class StagingList:
    """The file picker's list of selected, not-yet-uploaded files.

    Rejected files stay visible with their reason until removed, but never
    count towards the size total and are never handed out for upload.
    """

    def __init__(
        self,
        *,
        max_file_size: int,
        max_total_size: int,
        max_files: int = 0,
        previews: PreviewManager | None = None,
    ) -> None:
        self._items: list[PendingAttachment] = []
        self._previews = previews or PreviewManager()
        self._max_file_size = max_file_size
        self._max_total_size = max_total_size
        self._max_files = max_files
        self._unregister: Callable[[], None] | None = None
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        previews: PreviewManager | None = None,
    ) -> StagingList:
        resolved = settings or get_settings()
        return cls(
            max_file_size=resolved.upload_max_file_size_bytes,
            max_total_size=resolved.upload_max_batch_size_bytes,
            max_files=resolved.upload_max_files,
            previews=previews,
        )

    @property
    def previews(self) -> PreviewManager:
        return self._previews

    @property
    def items(self) -> tuple[PendingAttachment, ...]:
        return tuple(self._items)

    @property
    def accepted_size(self) -> int:
        return sum(item.file.size_bytes for item in self._items if item.accepted)

    @property
    def closed(self) -> bool:
        return self._closed

    def attach_to(self, bridge: SubmissionBridge) -> None:
        if self._unregister is not None:
            self._unregister()
        self._unregister = bridge.register(self)

    def get(self, attachment_id: str) -> PendingAttachment | None:
        for item in self._items:
            if item.id == attachment_id:
                return item
        return None

    def stage(self, candidates: Iterable[CandidateFile]) -> list[PendingAttachment]:
        if self._closed:
            raise AttachmentValidationError("The file picker has been closed.")

        selection = list(candidates)
        if self._max_files > 0:
            accepted_count = sum(1 for item in self._items if item.accepted)
            if accepted_count + len(selection) > self._max_files:
                raise AttachmentValidationError(f"You can only upload {self._max_files} files")

        staged: list[PendingAttachment] = []
        outcomes = validate_selection(
            selection,
            already_staged_bytes=self.accepted_size,
            max_file_size=self._max_file_size,
            max_total_size=self._max_total_size,
        )
        for candidate, outcome in outcomes:
            preview_ref = self._previews.acquire(candidate) if outcome.accepted else None
            staged.append(
                PendingAttachment(
                    file=candidate,
                    kind=outcome.kind,
                    preview_ref=preview_ref,
                    rejection_reason=outcome.rejection_reason,
                )
            )
        self._items.extend(staged)
        logger.debug(
            "Staged %s file(s), %s rejected.",
            len(staged),
            sum(1 for item in staged if not item.accepted),
        )
        return staged

    def remove(self, attachment_id: str) -> bool:
        for index, item in enumerate(self._items):
            if item.id == attachment_id:
                del self._items[index]
                self._previews.release_one(item.preview_ref)
                return True
        return False

    def pending_files(self) -> list[CandidateFile]:
        return [item.file for item in self._items if item.accepted]

    def resolve_preview(self, attachment_id: str) -> CandidateFile | None:
        item = self.get(attachment_id)
        if item is None or item.preview_ref is None:
            return None
        return self._previews.resolve(item.preview_ref)

    def clear(self) -> None:
        self._items.clear()
        self._previews.release_all()

    def close(self) -> None:
        """Tear the picker down: release every preview and leave the bridge."""
        self.clear()
        if self._unregister is not None:
            self._unregister()
            self._unregister = None
        self._closed = True
