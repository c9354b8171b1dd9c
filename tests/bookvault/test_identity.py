from __future__ import annotations

import base64
import json

import jwt
import pytest

from bookvault.errors import MalformedTokenError, UnauthenticatedError
from bookvault.user_management.identity import (
    ASSERTION_HEADER,
    UpstreamAssertionVerifier,
    resolve_email,
)

pytestmark = pytest.mark.auth


def _token(payload) -> str:
    return jwt.encode(payload, "proxy-signing-key", algorithm="HS256")


class _FakeVerifier:
    def __init__(self, email: str = "fake@example.com"):
        self.email = email
        self.tokens: list[str] = []

    def extract_email(self, token: str) -> str:
        self.tokens.append(token)
        return self.email


def test_email_claim_is_read_without_checking_the_signature() -> None:
    token = jwt.encode({"email": "reader@example.com"}, "some-other-key", algorithm="HS256")

    email = resolve_email(
        {ASSERTION_HEADER: token},
        dev_email=None,
        verifier=UpstreamAssertionVerifier(),
    )

    assert email == "reader@example.com"


def test_header_lookup_is_case_insensitive() -> None:
    headers = {"CF-Access-JWT-Assertion": _token({"email": "reader@example.com"})}

    assert (
        resolve_email(headers, dev_email=None, verifier=UpstreamAssertionVerifier())
        == "reader@example.com"
    )


def test_assertion_takes_precedence_over_dev_override() -> None:
    verifier = _FakeVerifier("proxy@example.com")

    email = resolve_email(
        {ASSERTION_HEADER: "a.b.c"},
        dev_email="dev@example.com",
        verifier=verifier,
    )

    assert email == "proxy@example.com"
    assert verifier.tokens == ["a.b.c"]


def test_dev_override_used_without_assertion() -> None:
    verifier = _FakeVerifier()

    email = resolve_email({}, dev_email="dev@example.com", verifier=verifier)

    assert email == "dev@example.com"
    assert verifier.tokens == []


@pytest.mark.parametrize("headers", [{}, {ASSERTION_HEADER: "   "}])
def test_missing_identity_is_unauthenticated(headers) -> None:
    with pytest.raises(UnauthenticatedError) as excinfo:
        resolve_email(headers, dev_email=None, verifier=UpstreamAssertionVerifier())

    assert not isinstance(excinfo.value, MalformedTokenError)
    assert excinfo.value.status_code == 401


@pytest.mark.parametrize(
    "token",
    [
        "not-a-token",
        "header.bm90LWpzb24",
        _token({"sub": "user-1"}),
        _token({"email": 42}),
        _token({"email": ""}),
    ],
    ids=["single-segment", "payload-not-json", "no-email", "non-string-email", "empty-email"],
)
def test_malformed_assertions_are_rejected(token: str) -> None:
    with pytest.raises(MalformedTokenError):
        resolve_email(
            {ASSERTION_HEADER: token},
            dev_email="dev@example.com",
            verifier=UpstreamAssertionVerifier(),
        )


def test_payload_that_is_not_json_is_rejected() -> None:
    header = base64.urlsafe_b64encode(json.dumps({"alg": "none"}).encode()).rstrip(b"=")
    token = f"{header.decode()}.%%%.sig"

    with pytest.raises(MalformedTokenError):
        UpstreamAssertionVerifier().extract_email(token)


def test_two_segment_assertion_is_accepted() -> None:
    header = base64.urlsafe_b64encode(json.dumps({"alg": "none"}).encode()).rstrip(b"=")
    payload = base64.urlsafe_b64encode(json.dumps({"email": "a@example.com"}).encode()).rstrip(b"=")
    token = f"{header.decode()}.{payload.decode()}"

    email = resolve_email(
        {ASSERTION_HEADER: token},
        dev_email=None,
        verifier=UpstreamAssertionVerifier(),
    )

    assert email == "a@example.com"


def test_header_segment_is_not_inspected() -> None:
    payload = base64.urlsafe_b64encode(json.dumps({"email": "b@example.com"}).encode()).rstrip(b"=")

    assert UpstreamAssertionVerifier().extract_email(f"garbage.{payload.decode()}.sig") == "b@example.com"
