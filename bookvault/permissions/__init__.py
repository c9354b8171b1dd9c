"""Permission helpers for access control."""

from .roles import ADMIN_ROLE, ALLOWED_ROLES, USER_ROLE, is_admin_role, normalize_role

__all__ = [
    "ADMIN_ROLE",
    "ALLOWED_ROLES",
    "USER_ROLE",
    "is_admin_role",
    "normalize_role",
]
