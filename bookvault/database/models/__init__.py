"""SQLAlchemy models; import all to register with Base.metadata."""

from .user import UserModel
from .catalog import (
    AuthorModel,
    BookAuthorModel,
    BookCopyModel,
    BookModel,
    LoanModel,
    ReviewModel,
)
from .audit import AuditLogModel

__all__ = [
    "UserModel",
    "BookModel",
    "AuthorModel",
    "BookAuthorModel",
    "BookCopyModel",
    "LoanModel",
    "ReviewModel",
    "AuditLogModel",
]
