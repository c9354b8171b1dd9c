"""Role helpers for the admin/user access model."""

from __future__ import annotations

from typing import Optional

ADMIN_ROLE = "admin"
USER_ROLE = "user"
ALLOWED_ROLES = frozenset({ADMIN_ROLE, USER_ROLE})


def normalize_role(value: Optional[str]) -> Optional[str]:
    """Return the canonical role name, or ``None`` for unknown roles."""

    if not value:
        return None
    normalized = value.strip().lower()
    return normalized if normalized in ALLOWED_ROLES else None


def is_admin_role(value: Optional[str]) -> bool:
    return normalize_role(value) == ADMIN_ROLE
