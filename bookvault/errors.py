"""Error taxonomy shared by the services and the HTTP boundary."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence


class BookVaultError(RuntimeError):
    """Base class for failures with a well-defined HTTP mapping."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class UnauthenticatedError(BookVaultError):
    """No usable identity could be established for the request."""

    status_code = 401
    public_message = "Authentication required"


class MalformedTokenError(UnauthenticatedError):
    """The identity assertion token could not be decoded into an email claim."""

    public_message = "Malformed identity assertion"


class ForbiddenError(BookVaultError):
    """The caller is authenticated but lacks the required role."""

    status_code = 403
    public_message = "Administrator role required"


class ValidationError(BookVaultError):
    """Submitted fields failed validation; ``field_errors`` maps field names to messages."""

    status_code = 400
    public_message = "Invalid input"

    def __init__(
        self,
        field_errors: Mapping[str, Sequence[str]],
        message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.field_errors: Dict[str, List[str]] = {
            key: list(values) for key, values in field_errors.items()
        }


class NotFoundError(BookVaultError):
    status_code = 404
    public_message = "Not found"


class DuplicateIsbnError(BookVaultError):
    """A book with the same ISBN-13 is already cataloged."""

    status_code = 409
    public_message = "This ISBN is already registered"

    def __init__(self, isbn13: str, message: Optional[str] = None) -> None:
        super().__init__(message)
        self.isbn13 = isbn13


class UpstreamError(BookVaultError):
    """The external metadata service failed (as opposed to not knowing the book)."""

    status_code = 500
    public_message = "The book metadata service is unavailable"


class InvalidAuditDetailError(BookVaultError):
    """An audit detail payload did not match the audit schema."""

    status_code = 500
    public_message = "Invalid audit log detail structure"


_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})


def collect_field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic error entries into ``{field: [messages]}``.

    Request locations such as ``body`` are dropped from the field name.
    """

    grouped: Dict[str, List[str]] = {}
    for error in errors:
        location = [str(part) for part in error.get("loc", ())]
        if len(location) > 1 and location[0] in _LOCATION_PREFIXES:
            location = location[1:]
        field = ".".join(location) or "__root__"
        grouped.setdefault(field, []).append(str(error.get("msg", "Invalid value")))
    return grouped


__all__ = [
    "BookVaultError",
    "DuplicateIsbnError",
    "ForbiddenError",
    "InvalidAuditDetailError",
    "MalformedTokenError",
    "NotFoundError",
    "UnauthenticatedError",
    "UpstreamError",
    "ValidationError",
    "collect_field_errors",
]
