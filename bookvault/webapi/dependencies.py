"""Dependency providers for the FastAPI app."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..config_manager import get_settings
from ..database import get_db_session
from ..services.audit import AuditRecorder
from ..services.book_intake import BookIntakeService
from ..services.copies import CopyService
from ..services.metadata import BaseMetadataClient, GoogleBooksClient
from ..text.markup import DescriptionStrategy
from ..user_management import AccessGate, AuthenticatedUser


def get_db() -> Iterator[Session]:
    """Yield a per-request session; commit on success, roll back on error."""

    with get_db_session() as session:
        yield session


@lru_cache
def get_access_gate() -> AccessGate:
    return AccessGate(dev_email=get_settings().dev_auth_email)


@lru_cache
def get_metadata_client() -> BaseMetadataClient:
    """Return the shared Google Books client configured from settings."""

    settings = get_settings()
    return GoogleBooksClient(
        api_key=settings.google_books_api_key.get_secret_value(),
        timeout_seconds=settings.google_books_timeout_seconds,
    )


def get_description_strategy() -> DescriptionStrategy:
    return DescriptionStrategy.MARKDOWN


def get_request_email(
    request: Request,
    gate: AccessGate = Depends(get_access_gate),
) -> str:
    """Resolve the caller's email without requiring a stored account."""

    return gate.resolve_email(request.headers)


def require_user(
    request: Request,
    session: Session = Depends(get_db),
    gate: AccessGate = Depends(get_access_gate),
) -> AuthenticatedUser:
    return gate.authenticate(session, request.headers)


def require_admin(
    request: Request,
    session: Session = Depends(get_db),
    gate: AccessGate = Depends(get_access_gate),
) -> AuthenticatedUser:
    return gate.authorize_admin(session, request.headers)


def get_intake_service(
    admin: AuthenticatedUser = Depends(require_admin),
    metadata_client: BaseMetadataClient = Depends(get_metadata_client),
    strategy: DescriptionStrategy = Depends(get_description_strategy),
) -> BookIntakeService:
    return BookIntakeService(
        admin.session,
        metadata_client,
        AuditRecorder(admin.session),
        strategy=strategy,
    )


def get_copy_service(admin: AuthenticatedUser = Depends(require_admin)) -> CopyService:
    return CopyService(admin.session)


__all__ = [
    "get_access_gate",
    "get_copy_service",
    "get_db",
    "get_description_strategy",
    "get_intake_service",
    "get_metadata_client",
    "get_request_email",
    "require_admin",
    "require_user",
]
