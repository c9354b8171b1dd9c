"""Identity resolution, access control and user persistence."""

from .access_gate import AccessGate, AuthenticatedUser
from .identity import (
    ASSERTION_HEADER,
    IdentityVerifier,
    UpstreamAssertionVerifier,
    resolve_email,
)
from .user_store import (
    ensure_user,
    get_user_by_email,
    list_users,
    update_display_name,
)

__all__ = [
    "ASSERTION_HEADER",
    "AccessGate",
    "AuthenticatedUser",
    "IdentityVerifier",
    "UpstreamAssertionVerifier",
    "ensure_user",
    "get_user_by_email",
    "list_users",
    "resolve_email",
    "update_display_name",
]
