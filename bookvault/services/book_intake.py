"""Admin book intake: ISBN lookup, review and transactional registration.

The lookup stage is read-only. It refuses ISBNs that are already cataloged
before spending an upstream call, and it normalizes the fetched description
with the configured :class:`DescriptionStrategy`.

The commit stage runs inside the caller's transaction. The book insert, the
author upserts, the associations and the audit entry either all land or none
do. A uniqueness violation on the ISBN, which is how a concurrent
registration that slipped past the pre-check shows up, is reported as
:class:`DuplicateIsbnError` exactly like the pre-check.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import insert_if_absent
from ..database.models import AuthorModel, BookAuthorModel, BookModel, UserModel
from ..errors import (
    DuplicateIsbnError,
    NotFoundError,
    ValidationError,
    collect_field_errors,
)
from ..logging_manager import get_logger
from ..text.markup import DescriptionStrategy
from .audit import AuditRecorder
from .metadata import BaseMetadataClient, BookMetadata

logger = get_logger().getChild("services.book_intake")

ISBN13_PATTERN = r"^\d{13}$"
PUBLISHED_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

_ISBN_SEPARATORS = re.compile(r"[\s-]+")


def normalize_isbn13(value: str) -> str:
    """Drop spaces and hyphens; the result still has to be 13 digits."""

    return _ISBN_SEPARATORS.sub("", value or "")


class BookUpdatePayload(BaseModel):
    """Editable book fields. ``authors`` is a comma separated list."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=100)
    publisher: str = Field(min_length=1, max_length=100)
    published_date: str = Field(pattern=PUBLISHED_DATE_PATTERN)
    description: str = Field(min_length=1, max_length=10000)
    authors: Optional[str] = None


class BookCreatePayload(BookUpdatePayload):
    """Fields submitted when registering a new book."""

    google_id: Optional[str] = Field(default=None, max_length=100)
    isbn13: str = Field(pattern=ISBN13_PATTERN)

    @field_validator("google_id", mode="before")
    @classmethod
    def _blank_google_id(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("isbn13", mode="before")
    @classmethod
    def _strip_isbn_separators(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_isbn13(value)
        return value


PayloadT = TypeVar("PayloadT", bound=BaseModel)


def parse_payload(
    model: Type[PayloadT], payload: Union[PayloadT, Mapping[str, Any]]
) -> PayloadT:
    """Validate ``payload`` against ``model``, raising field-keyed errors."""

    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(collect_field_errors(exc.errors())) from exc


def split_author_names(raw: Optional[str]) -> List[str]:
    """Split a comma separated author list, trimming and dropping blanks and repeats."""

    if not raw:
        return []
    names = (name.strip() for name in raw.split(","))
    return list(dict.fromkeys(name for name in names if name))


def get_or_create_author(session: Session, name: str) -> int:
    """Return the id of the author called ``name``, inserting it when absent."""

    insert_if_absent(session, AuthorModel, {"name": name}, conflict_columns=("name",))
    return session.execute(
        select(AuthorModel.id).where(AuthorModel.name == name)
    ).scalar_one()


def author_names_for(session: Session, book_id: int) -> List[str]:
    return list(
        session.execute(
            select(AuthorModel.name)
            .join(BookAuthorModel, BookAuthorModel.author_id == AuthorModel.id)
            .where(BookAuthorModel.book_id == book_id)
            .order_by(BookAuthorModel.position, AuthorModel.id)
        ).scalars()
    )


@dataclass
class BookWithAuthors:
    book: BookModel
    authors: List[str] = field(default_factory=list)


class BookIntakeService:
    def __init__(
        self,
        session: Session,
        metadata_client: BaseMetadataClient,
        audit_recorder: Optional[AuditRecorder] = None,
        strategy: DescriptionStrategy = DescriptionStrategy.MARKDOWN,
    ) -> None:
        self._session = session
        self._metadata_client = metadata_client
        self._audit = audit_recorder or AuditRecorder(session)
        self._strategy = strategy

    # Lookup stage

    def lookup(self, isbn: str) -> Optional[BookMetadata]:
        """Fetch metadata for a new ISBN, or ``None`` when the source has no match."""

        normalized = normalize_isbn13(isbn)
        if not re.match(ISBN13_PATTERN, normalized):
            raise ValidationError({"isbn": ["ISBN must be 13 digits"]})
        self._ensure_not_cataloged(normalized)

        metadata = self._metadata_client.lookup_by_isbn13(normalized)
        if metadata is None:
            return None
        if metadata.description:
            metadata.description = self._strategy.apply(metadata.description)
        return metadata

    # Commit stage

    def create_book(
        self,
        actor: UserModel,
        payload: Union[BookCreatePayload, Mapping[str, Any]],
    ) -> BookModel:
        data = parse_payload(BookCreatePayload, payload)
        self._ensure_not_cataloged(data.isbn13)

        book = BookModel(
            google_id=data.google_id,
            isbn_13=data.isbn13,
            title=data.title,
            publisher=data.publisher,
            published_date=data.published_date,
            description=data.description,
        )
        self._session.add(book)
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            self._log_duplicate(data.isbn13, stage="insert")
            raise DuplicateIsbnError(data.isbn13) from exc

        self._replace_authors(book.id, split_author_names(data.authors))
        self._audit.record(
            actor.id,
            "create_book",
            {
                "entity": "book",
                "action": "create",
                "targetId": book.id,
                "data": {
                    "googleId": data.google_id,
                    "isbn13": data.isbn13,
                    "title": data.title,
                },
            },
        )
        logger.info(
            "Registered book",
            extra={
                "event": "intake.created",
                "user_email": actor.email,
                "attributes": {"book_id": book.id, "isbn13": data.isbn13},
            },
        )
        return book

    def update_book(
        self,
        actor: UserModel,
        book_id: int,
        payload: Union[BookUpdatePayload, Mapping[str, Any]],
    ) -> BookModel:
        """Apply an edit; the author list is replaced only when ``authors`` is sent."""

        data = parse_payload(BookUpdatePayload, payload)
        book = self._get_book(book_id)

        before = self._snapshot(book)
        book.title = data.title
        book.publisher = data.publisher
        book.published_date = data.published_date
        book.description = data.description
        if data.authors is not None:
            self._replace_authors(book.id, split_author_names(data.authors))
        self._session.flush()
        after = self._snapshot(book)

        changed = [key for key in after if before.get(key) != after[key]]
        detail: Dict[str, Any] = {"entity": "book", "action": "update", "targetId": book.id}
        if changed:
            detail["changes"] = {
                "before": {key: before[key] for key in changed},
                "after": {key: after[key] for key in changed},
            }
        self._audit.record(actor.id, "update_book", detail)
        logger.info(
            "Updated book",
            extra={
                "event": "intake.updated",
                "user_email": actor.email,
                "attributes": {"book_id": book.id, "changed": changed},
            },
        )
        return book

    def get_book_for_edit(self, book_id: int) -> BookWithAuthors:
        book = self._get_book(book_id)
        return BookWithAuthors(book=book, authors=author_names_for(self._session, book.id))

    # Helpers

    def _get_book(self, book_id: int) -> BookModel:
        book = self._session.get(BookModel, book_id)
        if book is None:
            raise NotFoundError(f"Book {book_id} not found")
        return book

    def _isbn_exists(self, isbn13: str) -> bool:
        return (
            self._session.execute(
                select(BookModel.id).where(BookModel.isbn_13 == isbn13)
            ).first()
            is not None
        )

    def _ensure_not_cataloged(self, isbn13: str) -> None:
        if self._isbn_exists(isbn13):
            self._log_duplicate(isbn13, stage="precheck")
            raise DuplicateIsbnError(isbn13)

    def _replace_authors(self, book_id: int, names: Sequence[str]) -> None:
        self._session.execute(
            delete(BookAuthorModel).where(BookAuthorModel.book_id == book_id)
        )
        rows = [
            {
                "book_id": book_id,
                "author_id": get_or_create_author(self._session, name),
                "position": position,
            }
            for position, name in enumerate(names)
        ]
        if rows:
            self._session.execute(insert(BookAuthorModel), rows)

    def _snapshot(self, book: BookModel) -> Dict[str, Any]:
        return {
            "title": book.title,
            "publisher": book.publisher,
            "publishedDate": book.published_date,
            "description": book.description,
            "authors": author_names_for(self._session, book.id),
        }

    @staticmethod
    def _log_duplicate(isbn13: str, *, stage: str) -> None:
        logger.info(
            "Rejected duplicate ISBN",
            extra={
                "event": "intake.duplicate",
                "status": 409,
                "attributes": {"isbn13": isbn13, "stage": stage},
            },
        )


__all__ = [
    "BookCreatePayload",
    "BookIntakeService",
    "BookUpdatePayload",
    "BookWithAuthors",
    "author_names_for",
    "get_or_create_author",
    "normalize_isbn13",
    "parse_payload",
    "split_author_names",
]
