"""Profile routes for the signed-in user."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database.models import UserModel
from ..user_management import ensure_user, update_display_name
from .dependencies import get_db, get_request_email
from .schemas import ProfileResponse, ProfileUpdateRequestPayload, UserPayload

router = APIRouter()


def serialize_user(user: UserModel) -> UserPayload:
    return UserPayload(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=user.role,
        created_at=user.created_at,
    )


@router.get("/me", response_model=ProfileResponse)
def get_profile(
    email: str = Depends(get_request_email),
    session: Session = Depends(get_db),
) -> ProfileResponse:
    """Return the caller's profile, creating the account on first visit."""

    return ProfileResponse(user=serialize_user(ensure_user(session, email)))


@router.put("/me", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequestPayload,
    email: str = Depends(get_request_email),
    session: Session = Depends(get_db),
) -> ProfileResponse:
    user = ensure_user(session, email)
    update_display_name(session, user, payload.display_name)
    return ProfileResponse(user=serialize_user(user))
