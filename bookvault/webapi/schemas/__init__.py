"""Pydantic schemas used by the FastAPI routes."""

from .audit import AuditEntryPayload, AuditLogListResponse
from .books import (
    AdminBookListResponse,
    AdminBookPayload,
    BookCreatedResponse,
    BookDetailResponse,
    BookEditResponse,
    BookListResponse,
    BookLookupResponse,
    BookMetadataPayload,
    BookSummaryPayload,
)
from .copies import (
    CopyCreateRequestPayload,
    CopyListResponse,
    CopyPayload,
    CopyUpdateRequestPayload,
)
from .users import (
    ProfileResponse,
    ProfileUpdateRequestPayload,
    UserListResponse,
    UserPayload,
)

__all__ = [
    "AdminBookListResponse",
    "AdminBookPayload",
    "AuditEntryPayload",
    "AuditLogListResponse",
    "BookCreatedResponse",
    "BookDetailResponse",
    "BookEditResponse",
    "BookListResponse",
    "BookLookupResponse",
    "BookMetadataPayload",
    "BookSummaryPayload",
    "CopyCreateRequestPayload",
    "CopyListResponse",
    "CopyPayload",
    "CopyUpdateRequestPayload",
    "ProfileResponse",
    "ProfileUpdateRequestPayload",
    "UserListResponse",
    "UserPayload",
]
