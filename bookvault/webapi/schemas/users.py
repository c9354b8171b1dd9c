"""Schemas for profile and user administration endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class UserPayload(BaseModel):
    """Public representation of a stored user account."""

    id: int
    email: str
    display_name: str
    role: Literal["admin", "user"]
    created_at: Optional[datetime] = None


class UserListResponse(BaseModel):
    """Envelope returned when listing user accounts."""

    users: List[UserPayload] = Field(default_factory=list)


class ProfileResponse(BaseModel):
    user: UserPayload


class ProfileUpdateRequestPayload(BaseModel):
    """Payload for changing the caller's display name."""

    display_name: str = Field(min_length=1, max_length=255)
