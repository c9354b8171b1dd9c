from __future__ import annotations

import os

# Keep test runs from writing rotating log files into the checkout.
os.environ.setdefault("BOOKVAULT_LOG_DIR", "")

import logging
from collections.abc import Iterator
from typing import Any, Callable, Dict, List, Optional

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bookvault.config_manager import reset_settings
from bookvault.database import dispose_engine, get_engine, get_session_factory, init_db
from bookvault.database.models import UserModel
from bookvault.services.metadata import GoogleBooksClient
from bookvault.user_management import AccessGate
from bookvault.webapi.application import create_app
from bookvault.webapi.dependencies import get_access_gate, get_metadata_client

_NO_JSON = object()


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload
        self.text = "" if payload is _NO_JSON else str(payload)

    def json(self) -> Any:
        if self._payload is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class _FakeSession:
    """Serves queued responses (or raises queued exceptions) in call order."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses: List[Any] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, status_code: int = 200, payload: Any = None) -> None:
        self.responses.append(_FakeResponse(status_code, payload))

    def get(self, url: str, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"Unexpected upstream request to {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass


@pytest.fixture
def fake_books_session() -> _FakeSession:
    return _FakeSession()


@pytest.fixture
def no_json() -> object:
    return _NO_JSON


@pytest.fixture
def volume_detail() -> Callable[..., Dict[str, Any]]:
    def _build(google_id: str = "abc123", **volume_info: Any) -> Dict[str, Any]:
        info = {
            "title": "The C Programming Language",
            "authors": ["Brian W. Kernighan", "Dennis M. Ritchie"],
            "publisher": "Prentice Hall",
            "publishedDate": "1988-04-01",
            "description": "<p>A classic.</p>",
            "industryIdentifiers": [
                {"type": "ISBN_10", "identifier": "0131103628"},
                {"type": "ISBN_13", "identifier": "9780134190440"},
            ],
        }
        info.update(volume_info)
        return {"id": google_id, "kind": "books#volume", "volumeInfo": info}

    return _build


@pytest.fixture
def database_url(tmp_path, monkeypatch) -> Iterator[str]:
    url = f"sqlite:///{tmp_path / 'bookvault.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.delenv("DEV_AUTH_EMAIL", raising=False)
    monkeypatch.delenv("BOOKVAULT_DEV_AUTH_EMAIL", raising=False)
    reset_settings()
    dispose_engine()
    yield url
    dispose_engine()
    reset_settings()


@pytest.fixture
def db_session(database_url) -> Iterator[Session]:
    init_db(get_engine())
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _add_user(session: Session, email: str, display_name: str, role: str) -> UserModel:
    user = UserModel(email=email, display_name=display_name, role=role)
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def admin_user(db_session) -> UserModel:
    return _add_user(db_session, "admin@example.com", "Admin", "admin")


@pytest.fixture
def member_user(db_session) -> UserModel:
    return _add_user(db_session, "member@example.com", "Member", "user")


@pytest.fixture
def auth_headers() -> Callable[[str], Dict[str, str]]:
    """Build the proxy assertion header for ``email``."""

    def _build(email: str) -> Dict[str, str]:
        token = jwt.encode({"email": email, "sub": email}, "proxy-signing-key", algorithm="HS256")
        return {"cf-access-jwt-assertion": token}

    return _build


@pytest.fixture
def bookvault_caplog(caplog):
    """caplog wired to the ``bookvault`` logger, which does not propagate by default."""

    bookvault_logger = logging.getLogger("bookvault")
    original = bookvault_logger.propagate
    bookvault_logger.propagate = True
    caplog.set_level(logging.DEBUG, logger="bookvault")
    try:
        yield caplog
    finally:
        bookvault_logger.propagate = original


@pytest.fixture
def api_client(db_session, admin_user, member_user, fake_books_session) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_access_gate] = lambda: AccessGate()
    app.dependency_overrides[get_metadata_client] = lambda: GoogleBooksClient(
        session=fake_books_session, timeout_seconds=1.0
    )

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
