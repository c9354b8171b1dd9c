"""Schemas for catalog and book intake endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class BookSummaryPayload(BaseModel):
    id: int
    title: str
    cover_url: str


class BookListResponse(BaseModel):
    books: List[BookSummaryPayload] = Field(default_factory=list)


class BookDetailResponse(BaseModel):
    """Public book page data; ``description_html`` is rendered from stored Markdown."""

    id: int
    title: str
    publisher: str
    published_date: str
    description_html: str
    cover_url: str
    authors: List[str] = Field(default_factory=list)
    review_count: int = 0
    average_rating: Optional[float] = None
    total_copies: int = 0
    loaned_copies: int = 0


class BookMetadataPayload(BaseModel):
    """Prefill data for the intake form, with the description already normalized."""

    google_id: str
    isbn13: Optional[str] = None
    title: str
    authors: List[str] = Field(default_factory=list)
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None
    cover_url: str = ""


class BookLookupResponse(BaseModel):
    found: bool
    book: Optional[BookMetadataPayload] = None
    detail: Optional[str] = None


class BookCreatedResponse(BaseModel):
    id: int
    location: str


class BookEditResponse(BaseModel):
    id: int
    google_id: Optional[str] = None
    isbn13: str
    title: str
    publisher: str
    published_date: str
    description: str
    authors: List[str] = Field(default_factory=list)


class AdminBookPayload(BaseModel):
    id: int
    title: str
    publisher: str
    published_date: Optional[str] = None
    copies_count: int = 0


class AdminBookListResponse(BaseModel):
    books: List[AdminBookPayload] = Field(default_factory=list)
