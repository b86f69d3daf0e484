from __future__ import annotations


class EntityApiError(Exception):
    """Raised when the business API rejects an entity create or update."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
