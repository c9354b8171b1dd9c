"""Read models for the public catalog and the admin book list."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..database.models import BookCopyModel, BookModel, LoanModel, ReviewModel
from ..errors import NotFoundError
from ..text.markup import render_description
from .book_intake import author_names_for
from .metadata import google_books_cover_url


@dataclass(frozen=True)
class BookSummary:
    id: int
    title: str
    cover_url: str


@dataclass(frozen=True)
class BookDetail:
    id: int
    title: str
    publisher: str
    published_date: str
    description_html: str
    cover_url: str
    authors: List[str] = field(default_factory=list)
    review_count: int = 0
    average_rating: Optional[float] = None
    total_copies: int = 0
    loaned_copies: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AdminBookRow:
    id: int
    title: str
    publisher: str
    published_date: str
    copies_count: int


def list_books(session: Session) -> List[BookSummary]:
    rows = session.execute(
        select(BookModel.id, BookModel.title, BookModel.google_id).order_by(BookModel.id)
    ).all()
    return [
        BookSummary(id=row.id, title=row.title, cover_url=google_books_cover_url(row.google_id))
        for row in rows
    ]


def get_book_detail(session: Session, book_id: int) -> BookDetail:
    book = session.get(BookModel, book_id)
    if book is None:
        raise NotFoundError(f"Book {book_id} not found")

    review_count, average_rating = session.execute(
        select(func.count(ReviewModel.id), func.avg(ReviewModel.rating)).where(
            ReviewModel.book_id == book.id
        )
    ).one()

    total_copies = session.execute(
        select(func.count(BookCopyModel.id)).where(BookCopyModel.book_id == book.id)
    ).scalar_one()

    # A copy is on loan while it has a loan without a return date.
    loaned_copies = session.execute(
        select(func.count(func.distinct(LoanModel.copy_id)))
        .join(BookCopyModel, BookCopyModel.id == LoanModel.copy_id)
        .where(BookCopyModel.book_id == book.id, LoanModel.returned_date.is_(None))
    ).scalar_one()

    return BookDetail(
        id=book.id,
        title=book.title,
        publisher=book.publisher,
        published_date=book.published_date,
        description_html=render_description(book.description),
        cover_url=google_books_cover_url(book.google_id),
        authors=author_names_for(session, book.id),
        review_count=review_count or 0,
        average_rating=float(average_rating) if average_rating is not None else None,
        total_copies=total_copies or 0,
        loaned_copies=loaned_copies or 0,
    )


def list_books_for_admin(session: Session) -> List[AdminBookRow]:
    active_copies = (
        select(BookCopyModel.book_id, func.count(BookCopyModel.id).label("copies_count"))
        .where(BookCopyModel.discarded_date.is_(None))
        .group_by(BookCopyModel.book_id)
        .subquery()
    )
    rows = session.execute(
        select(
            BookModel.id,
            BookModel.title,
            BookModel.publisher,
            BookModel.published_date,
            func.coalesce(active_copies.c.copies_count, 0).label("copies_count"),
        )
        .outerjoin(active_copies, active_copies.c.book_id == BookModel.id)
        .order_by(BookModel.id)
    ).all()
    return [
        AdminBookRow(
            id=row.id,
            title=row.title,
            publisher=row.publisher,
            published_date=row.published_date,
            copies_count=row.copies_count,
        )
        for row in rows
    ]


__all__ = [
    "AdminBookRow",
    "BookDetail",
    "BookSummary",
    "get_book_detail",
    "list_books",
    "list_books_for_admin",
]
