from __future__ import annotations


class DialogsDomainError(Exception):
    """Base exception for entity dialog sessions."""


class DialogNotFoundError(DialogsDomainError):
    pass


class StagedFileNotFoundError(DialogsDomainError):
    pass
