"""Public catalog routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..services import catalog
from .dependencies import get_db
from .schemas import BookDetailResponse, BookListResponse, BookSummaryPayload

router = APIRouter()


@router.get("", response_model=BookListResponse)
def list_books(session: Session = Depends(get_db)) -> BookListResponse:
    books = [
        BookSummaryPayload(id=entry.id, title=entry.title, cover_url=entry.cover_url)
        for entry in catalog.list_books(session)
    ]
    return BookListResponse(books=books)


@router.get("/{book_id}", response_model=BookDetailResponse)
def get_book(book_id: int, session: Session = Depends(get_db)) -> BookDetailResponse:
    return BookDetailResponse(**catalog.get_book_detail(session, book_id).to_dict())
