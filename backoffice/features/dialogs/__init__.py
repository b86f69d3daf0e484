from __future__ import annotations

from .errors import DialogNotFoundError, DialogsDomainError, StagedFileNotFoundError
from .service import DialogRegistry, DialogSession, read_candidate
from .types import DialogDetail, DialogOpenInput, DialogSubmitInput, StagedFileView

__all__ = [
    "DialogDetail",
    "DialogNotFoundError",
    "DialogOpenInput",
    "DialogRegistry",
    "DialogSession",
    "DialogSubmitInput",
    "DialogsDomainError",
    "StagedFileNotFoundError",
    "StagedFileView",
    "read_candidate",
]
