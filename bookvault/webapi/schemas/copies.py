"""Schemas for copy management endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class CopyPayload(BaseModel):
    id: int
    book_id: int
    acquired_date: date
    discarded_date: Optional[date] = None


class CopyListResponse(BaseModel):
    book_id: int
    copies: List[CopyPayload] = Field(default_factory=list)


class CopyCreateRequestPayload(BaseModel):
    acquired_date: date


class CopyUpdateRequestPayload(BaseModel):
    """Setting ``discarded_date`` retires the copy; clearing it reactivates it."""

    acquired_date: date
    discarded_date: Optional[date] = None

    @field_validator("discarded_date", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value
