"""Resolve the caller's email from an upstream identity assertion.

BookVault sits behind an access proxy that verifies the assertion token's
signature before forwarding the request. This module trusts that check: it
decodes the payload segment of the token without looking at the header or
the signature and reads only the ``email`` claim. Both ``header.payload``
and ``header.payload.signature`` tokens are accepted. Swap in a different
:class:`IdentityVerifier` if that trust assumption is ever tightened.
"""

from __future__ import annotations

import json
from typing import Mapping, Optional, Protocol

from jwt.utils import base64url_decode

from ..errors import MalformedTokenError, UnauthenticatedError
from ..logging_manager import get_logger

logger = get_logger().getChild("auth.identity")

ASSERTION_HEADER = "cf-access-jwt-assertion"


class IdentityVerifier(Protocol):
    """Turns an identity assertion token into an email address."""

    def extract_email(self, token: str) -> str:
        ...


class UpstreamAssertionVerifier:
    """Read the ``email`` claim of a token the proxy already verified."""

    def extract_email(self, token: str) -> str:
        segments = token.split(".")
        if len(segments) < 2:
            raise MalformedTokenError("Identity assertion is not a JWT")
        try:
            payload = json.loads(base64url_decode(segments[1]))
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError("Identity assertion could not be decoded") from exc

        email = payload.get("email") if isinstance(payload, dict) else None
        if not isinstance(email, str) or not email.strip():
            raise MalformedTokenError("Identity assertion has no email claim")
        return email.strip()


def _header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        for key, candidate in headers.items():
            if key.lower() == name:
                value = candidate
                break
    if value is None:
        return None
    value = value.strip()
    return value or None


def resolve_email(
    headers: Mapping[str, str],
    *,
    dev_email: Optional[str],
    verifier: IdentityVerifier,
) -> str:
    """Return the verified email for a request or raise.

    A present assertion always wins; the development override only applies
    when no assertion header was sent.
    """

    token = _header_value(headers, ASSERTION_HEADER)
    if token is not None:
        return verifier.extract_email(token)

    if dev_email:
        logger.debug(
            "Using development identity override",
            extra={"event": "auth.identity.dev_override", "user_email": dev_email},
        )
        return dev_email

    raise UnauthenticatedError()


__all__ = [
    "ASSERTION_HEADER",
    "IdentityVerifier",
    "UpstreamAssertionVerifier",
    "resolve_email",
]
