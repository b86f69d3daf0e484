from __future__ import annotations

import logging
from uuid import uuid4

from .formatting import classify_media_kind
from .schemas import CandidateFile

logger = logging.getLogger(__name__)

PREVIEW_REF_PREFIX = "blob:"


class PreviewManager:
    """Owns the memory-backed preview references of one staging list.

    Every reference handed out by `acquire` is dropped exactly once, either
    through `release_one` or through `release_all`.
    """

    def __init__(self) -> None:
        self._live: dict[str, CandidateFile] = {}
        self._release_count = 0

    @property
    def live_count(self) -> int:
        return len(self._live)

    @property
    def release_count(self) -> int:
        return self._release_count

    def is_live(self, preview_ref: str) -> bool:
        return preview_ref in self._live

    def acquire(self, candidate: CandidateFile) -> str | None:
        if classify_media_kind(candidate.content_type) != "image":
            return None
        preview_ref = f"{PREVIEW_REF_PREFIX}{uuid4()}"
        self._live[preview_ref] = candidate
        logger.debug("Acquired preview %s for %s", preview_ref, candidate.filename)
        return preview_ref

    def resolve(self, preview_ref: str) -> CandidateFile | None:
        return self._live.get(preview_ref)

    def release_one(self, preview_ref: str | None) -> bool:
        if preview_ref is None:
            return False
        candidate = self._live.pop(preview_ref, None)
        if candidate is None:
            logger.debug("Preview %s was already released", preview_ref)
            return False
        self._release_count += 1
        logger.debug("Released preview %s for %s", preview_ref, candidate.filename)
        return True

    def release_all(self) -> int:
        released = 0
        for preview_ref in list(self._live):
            if self.release_one(preview_ref):
                released += 1
        return released
