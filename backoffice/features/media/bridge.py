from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from .errors import ProviderAlreadyRegisteredError
from .schemas import CandidateFile

logger = logging.getLogger(__name__)


class PendingFilesProvider(Protocol):
    def pending_files(self) -> list[CandidateFile]: ...

    def clear(self) -> None: ...


class SubmissionBridge:
    """Hands a picker's staged files to the dialog that submits the entity.

    One bridge belongs to one dialog. The picker registers itself when it is
    created and unregisters when it is closed; the dialog only reads the
    snapshot and clears it.
    """

    def __init__(self) -> None:
        self._provider: PendingFilesProvider | None = None

    @property
    def has_provider(self) -> bool:
        return self._provider is not None

    def register(self, provider: PendingFilesProvider) -> Callable[[], None]:
        if self._provider is not None and self._provider is not provider:
            raise ProviderAlreadyRegisteredError("A file picker is already registered for this dialog.")
        self._provider = provider

        def _unregister() -> None:
            if self._provider is provider:
                self._provider = None
                logger.debug("File picker unregistered from submission bridge.")

        return _unregister

    def get_pending_files(self) -> list[CandidateFile]:
        if self._provider is None:
            return []
        return list(self._provider.pending_files())

    def clear_pending(self) -> None:
        if self._provider is None:
            return
        self._provider.clear()
