"""Persistence helpers for user accounts."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..database import insert_if_absent
from ..database.models import UserModel
from ..errors import ValidationError
from ..logging_manager import get_logger
from ..permissions import USER_ROLE

logger = get_logger().getChild("users.store")

DISPLAY_NAME_MAX_LENGTH = 255


def get_user_by_email(session: Session, email: str) -> Optional[UserModel]:
    return session.execute(
        select(UserModel).where(UserModel.email == email)
    ).scalar_one_or_none()


def list_users(session: Session) -> List[UserModel]:
    return list(session.execute(select(UserModel).order_by(UserModel.id)).scalars())


def default_display_name(email: str) -> str:
    """Return the local part of ``email``, which seeds a new user's display name."""

    local_part = email.split("@", 1)[0].strip()
    return (local_part or email)[:DISPLAY_NAME_MAX_LENGTH]


def ensure_user(session: Session, email: str) -> UserModel:
    """Return the user for ``email``, creating a ``user``-role account on first login."""

    user = get_user_by_email(session, email)
    if user is not None:
        return user

    insert_if_absent(
        session,
        UserModel,
        {"email": email, "display_name": default_display_name(email), "role": USER_ROLE},
        conflict_columns=("email",),
    )
    user = get_user_by_email(session, email)
    if user is None:  # pragma: no cover - insert_if_absent guarantees a row
        raise RuntimeError(f"User '{email}' could not be provisioned")
    logger.info(
        "Provisioned user on first login",
        extra={"event": "users.provisioned", "user_email": email},
    )
    return user


def update_display_name(session: Session, user: UserModel, display_name: str) -> UserModel:
    normalized = display_name.strip()
    if not normalized:
        raise ValidationError({"display_name": ["Display name is required"]})
    if len(normalized) > DISPLAY_NAME_MAX_LENGTH:
        raise ValidationError(
            {"display_name": [f"Display name must be at most {DISPLAY_NAME_MAX_LENGTH} characters"]}
        )
    user.display_name = normalized
    session.flush()
    return user


__all__ = [
    "default_display_name",
    "ensure_user",
    "get_user_by_email",
    "list_users",
    "update_display_name",
]
