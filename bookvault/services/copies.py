"""Admin management of physical book copies."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..database.models import BookCopyModel, BookModel, UserModel
from ..errors import NotFoundError, ValidationError
from ..logging_manager import get_logger
from .audit import AuditRecorder

logger = get_logger().getChild("services.copies")


class CopyService:
    """Create, retire and delete copies; every mutation is audited.

    A copy with a ``discarded_date`` is retired but kept for history.
    """

    def __init__(self, session: Session, audit_recorder: Optional[AuditRecorder] = None) -> None:
        self._session = session
        self._audit = audit_recorder or AuditRecorder(session)

    def list_copies(self, book_id: int) -> List[BookCopyModel]:
        self._get_book(book_id)
        return list(
            self._session.execute(
                select(BookCopyModel)
                .where(BookCopyModel.book_id == book_id)
                .order_by(BookCopyModel.id)
            ).scalars()
        )

    def add_copy(self, actor: UserModel, book_id: int, acquired_date: date) -> BookCopyModel:
        self._get_book(book_id)
        copy = BookCopyModel(book_id=book_id, acquired_date=acquired_date)
        self._session.add(copy)
        self._session.flush()
        self._audit.record(
            actor.id,
            "create_copy",
            {
                "entity": "book_copy",
                "action": "create",
                "targetId": copy.id,
                "data": {"bookId": book_id, "acquiredDate": acquired_date.isoformat()},
            },
        )
        self._log("copies.created", actor, copy)
        return copy

    def update_copy(
        self,
        actor: UserModel,
        book_id: int,
        copy_id: int,
        acquired_date: date,
        discarded_date: Optional[date] = None,
    ) -> BookCopyModel:
        copy = self._get_copy(book_id, copy_id)
        if discarded_date is not None and discarded_date < acquired_date:
            raise ValidationError(
                {"discarded_date": ["Discarded date cannot be before the acquired date"]}
            )

        before = _copy_snapshot(copy)
        copy.acquired_date = acquired_date
        copy.discarded_date = discarded_date
        self._session.flush()
        self._audit.record(
            actor.id,
            "update_copy",
            {
                "entity": "book_copy",
                "action": "update",
                "targetId": copy.id,
                "changes": {"before": before, "after": _copy_snapshot(copy)},
            },
        )
        self._log("copies.updated", actor, copy)
        return copy

    def delete_copy(self, actor: UserModel, book_id: int, copy_id: int) -> None:
        copy = self._get_copy(book_id, copy_id)
        snapshot = _copy_snapshot(copy)
        self._session.delete(copy)
        self._session.flush()
        self._audit.record(
            actor.id,
            "delete_copy",
            {
                "entity": "book_copy",
                "action": "delete",
                "targetId": copy_id,
                "data": {"bookId": book_id, **snapshot},
            },
        )
        self._log("copies.deleted", actor, copy)

    def _get_book(self, book_id: int) -> BookModel:
        book = self._session.get(BookModel, book_id)
        if book is None:
            raise NotFoundError(f"Book {book_id} not found")
        return book

    def _get_copy(self, book_id: int, copy_id: int) -> BookCopyModel:
        copy = self._session.get(BookCopyModel, copy_id)
        if copy is None or copy.book_id != book_id:
            raise NotFoundError(f"Copy {copy_id} not found for book {book_id}")
        return copy

    @staticmethod
    def _log(event: str, actor: UserModel, copy: BookCopyModel) -> None:
        logger.info(
            "Copy changed",
            extra={
                "event": event,
                "user_email": actor.email,
                "attributes": {"book_id": copy.book_id, "copy_id": copy.id},
            },
        )


def _copy_snapshot(copy: BookCopyModel) -> dict:
    return {
        "acquiredDate": copy.acquired_date.isoformat(),
        "discardedDate": copy.discarded_date.isoformat() if copy.discarded_date else None,
    }


__all__ = ["CopyService"]
