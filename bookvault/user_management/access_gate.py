"""Authentication and role checks performed before any operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from ..database.models import UserModel
from ..errors import ForbiddenError, UnauthenticatedError
from ..logging_manager import get_logger
from ..permissions import is_admin_role
from .identity import IdentityVerifier, UpstreamAssertionVerifier, resolve_email
from .user_store import get_user_by_email

logger = get_logger().getChild("auth.gate")


@dataclass(frozen=True)
class AuthenticatedUser:
    """The store handle and user record for an authenticated request."""

    session: Session
    user: UserModel

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.user.role)


class AccessGate:
    """Map request headers to a stored user and enforce the admin role.

    The gate never provisions users; first-login bootstrap belongs to the
    profile flow.
    """

    def __init__(
        self,
        verifier: Optional[IdentityVerifier] = None,
        dev_email: Optional[str] = None,
    ) -> None:
        self._verifier = verifier or UpstreamAssertionVerifier()
        self._dev_email = dev_email

    def resolve_email(self, headers: Mapping[str, str]) -> str:
        return resolve_email(headers, dev_email=self._dev_email, verifier=self._verifier)

    def authenticate(self, session: Session, headers: Mapping[str, str]) -> AuthenticatedUser:
        email = self.resolve_email(headers)
        user = get_user_by_email(session, email)
        if user is None:
            logger.info(
                "Rejected unknown user",
                extra={"event": "auth.denied", "user_email": email, "status": 401},
            )
            raise UnauthenticatedError("User is not registered")
        return AuthenticatedUser(session=session, user=user)

    def authorize_admin(self, session: Session, headers: Mapping[str, str]) -> AuthenticatedUser:
        authenticated = self.authenticate(session, headers)
        if not authenticated.is_admin:
            logger.info(
                "Rejected non-admin user",
                extra={"event": "auth.denied", "user_email": authenticated.user.email, "status": 403},
            )
            raise ForbiddenError()
        return authenticated


__all__ = ["AccessGate", "AuthenticatedUser"]
