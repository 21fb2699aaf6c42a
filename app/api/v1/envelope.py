# app/api/v1/envelope.py
"""
Response envelope shared by the documents and duties & taxes endpoints.

Successful responses look like::

    {"status": "ok", "data": <payload>, "message": <optional string>}

Errors are plain FastAPI ``HTTPException`` bodies (``{"detail": ...}``).
Decimal amounts are emitted as JSON strings.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, computed_field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    status: str = "ok"
    data: T | None = None
    message: str | None = None


class PaginatedData(BaseModel, Generic[T]):
    """One page of a tenant's bills / invoices."""

    items: list[T]
    total: int
    limit: int
    offset: int

    @computed_field
    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


def ok(data: Any = None, message: str | None = None) -> dict:
    return ApiResponse(data=data, message=message).model_dump(mode="json")


def paginated(items: list, total: int, limit: int, offset: int) -> dict:
    page = PaginatedData(items=items, total=total, limit=limit, offset=offset)
    return ApiResponse(data=page).model_dump(mode="json")
