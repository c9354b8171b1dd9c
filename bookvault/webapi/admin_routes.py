"""Administrative routes: users, audit log, book intake and copies."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from ..database.models import BookCopyModel
from ..services import catalog
from ..services.audit import AuditRecorder
from ..services.book_intake import BookCreatePayload, BookIntakeService, BookUpdatePayload
from ..services.copies import CopyService
from ..services.metadata import google_books_cover_url
from ..user_management import AuthenticatedUser, list_users as list_user_records
from .dependencies import get_copy_service, get_intake_service, require_admin
from .schemas import (
    AdminBookListResponse,
    AdminBookPayload,
    AuditEntryPayload,
    AuditLogListResponse,
    BookCreatedResponse,
    BookEditResponse,
    BookLookupResponse,
    BookMetadataPayload,
    CopyCreateRequestPayload,
    CopyListResponse,
    CopyPayload,
    CopyUpdateRequestPayload,
    UserListResponse,
)
from .user_routes import serialize_user

router = APIRouter()


def _serialize_copy(copy: BookCopyModel) -> CopyPayload:
    return CopyPayload(
        id=copy.id,
        book_id=copy.book_id,
        acquired_date=copy.acquired_date,
        discarded_date=copy.discarded_date,
    )


@router.get("/users", response_model=UserListResponse)
def list_users(admin: AuthenticatedUser = Depends(require_admin)) -> UserListResponse:
    users = [serialize_user(record) for record in list_user_records(admin.session)]
    return UserListResponse(users=users)


@router.get("/audit-logs", response_model=AuditLogListResponse)
def list_audit_logs(
    limit: int = Query(default=100, ge=1, le=500),
    admin: AuthenticatedUser = Depends(require_admin),
) -> AuditLogListResponse:
    entries = AuditRecorder(admin.session).list_entries(limit=limit)
    return AuditLogListResponse(
        entries=[
            AuditEntryPayload(
                id=entry.id,
                user_id=entry.user_id,
                user_email=entry.user_email,
                action_type=entry.action_type,
                detail=entry.detail,
                created_at=entry.created_at,
            )
            for entry in entries
        ]
    )


@router.get("/books", response_model=AdminBookListResponse)
def list_admin_books(admin: AuthenticatedUser = Depends(require_admin)) -> AdminBookListResponse:
    rows = catalog.list_books_for_admin(admin.session)
    return AdminBookListResponse(
        books=[
            AdminBookPayload(
                id=row.id,
                title=row.title,
                publisher=row.publisher,
                published_date=row.published_date,
                copies_count=row.copies_count,
            )
            for row in rows
        ]
    )


@router.get(
    "/books/lookup",
    response_model=BookLookupResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": BookLookupResponse}},
)
def lookup_book(
    isbn: str = Query(..., min_length=1),
    service: BookIntakeService = Depends(get_intake_service),
):
    """Fetch upstream metadata for an ISBN that is not cataloged yet."""

    metadata = service.lookup(isbn)
    if metadata is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=BookLookupResponse(
                found=False, detail="No book found for this ISBN"
            ).model_dump(),
        )
    return BookLookupResponse(
        found=True,
        book=BookMetadataPayload(
            **metadata.to_dict(),
            cover_url=google_books_cover_url(metadata.google_id),
        ),
    )


@router.post(
    "/books",
    response_model=BookCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_book(
    payload: BookCreatePayload,
    response: Response,
    admin: AuthenticatedUser = Depends(require_admin),
    service: BookIntakeService = Depends(get_intake_service),
) -> BookCreatedResponse:
    book = service.create_book(admin.user, payload)
    location = f"/api/books/{book.id}"
    response.headers["Location"] = location
    return BookCreatedResponse(id=book.id, location=location)


@router.get("/books/{book_id}", response_model=BookEditResponse)
def get_book_for_edit(
    book_id: int,
    service: BookIntakeService = Depends(get_intake_service),
) -> BookEditResponse:
    entry = service.get_book_for_edit(book_id)
    book = entry.book
    return BookEditResponse(
        id=book.id,
        google_id=book.google_id,
        isbn13=book.isbn_13,
        title=book.title,
        publisher=book.publisher,
        published_date=book.published_date,
        description=book.description,
        authors=entry.authors,
    )


@router.put("/books/{book_id}", response_model=BookEditResponse)
def update_book(
    book_id: int,
    payload: BookUpdatePayload,
    admin: AuthenticatedUser = Depends(require_admin),
    service: BookIntakeService = Depends(get_intake_service),
) -> BookEditResponse:
    service.update_book(admin.user, book_id, payload)
    return get_book_for_edit(book_id, service)


@router.get("/books/{book_id}/copies", response_model=CopyListResponse)
def list_copies(
    book_id: int,
    service: CopyService = Depends(get_copy_service),
) -> CopyListResponse:
    copies = service.list_copies(book_id)
    return CopyListResponse(book_id=book_id, copies=[_serialize_copy(copy) for copy in copies])


@router.post(
    "/books/{book_id}/copies",
    response_model=CopyPayload,
    status_code=status.HTTP_201_CREATED,
)
def add_copy(
    book_id: int,
    payload: CopyCreateRequestPayload,
    admin: AuthenticatedUser = Depends(require_admin),
    service: CopyService = Depends(get_copy_service),
) -> CopyPayload:
    return _serialize_copy(service.add_copy(admin.user, book_id, payload.acquired_date))


@router.put("/books/{book_id}/copies/{copy_id}", response_model=CopyPayload)
def update_copy(
    book_id: int,
    copy_id: int,
    payload: CopyUpdateRequestPayload,
    admin: AuthenticatedUser = Depends(require_admin),
    service: CopyService = Depends(get_copy_service),
) -> CopyPayload:
    copy = service.update_copy(
        admin.user,
        book_id,
        copy_id,
        acquired_date=payload.acquired_date,
        discarded_date=payload.discarded_date,
    )
    return _serialize_copy(copy)


@router.delete("/books/{book_id}/copies/{copy_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_copy(
    book_id: int,
    copy_id: int,
    admin: AuthenticatedUser = Depends(require_admin),
    service: CopyService = Depends(get_copy_service),
) -> Response:
    service.delete_copy(admin.user, book_id, copy_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
