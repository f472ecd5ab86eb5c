"""HTTP-level errors.

These subclass FastAPI's HTTPException so route handlers and dependencies can
raise them directly and FastAPI renders `{"detail": ...}` with the right status.
"""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=403, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=404, detail=detail)


def raise_not_found(item_id: int) -> NoReturn:
    """Raise the NotFound error used by every lookup-by-id."""
    raise NotFoundError(f"Could not find id : {item_id}")
