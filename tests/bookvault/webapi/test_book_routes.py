from __future__ import annotations

import pytest
from sqlalchemy import func, select

from bookvault.database.models import AuditLogModel, BookModel

pytestmark = pytest.mark.webapi

ISBN = "9780134190440"


def _create_body(**overrides):
    body = {
        "google_id": "abc123",
        "isbn13": ISBN,
        "title": "The C Programming Language",
        "publisher": "Prentice Hall",
        "published_date": "1988-04-01",
        "description": "A classic.",
        "authors": "Brian W. Kernighan, Dennis M. Ritchie",
    }
    body.update(overrides)
    return body


@pytest.fixture
def admin_headers(auth_headers, admin_user):
    return auth_headers(admin_user.email)


@pytest.fixture
def member_headers(auth_headers, member_user):
    return auth_headers(member_user.email)


def test_healthcheck_echoes_request_id(api_client) -> None:
    response = api_client.get("/_health", headers={"X-Request-Id": "req-123"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-Id"] == "req-123"


def test_admin_routes_require_identity(api_client) -> None:
    response = api_client.get("/api/admin/books")

    assert response.status_code == 401
    assert response.json()["detail"]


def test_admin_routes_require_admin_role(api_client, member_headers) -> None:
    response = api_client.get("/api/admin/books", headers=member_headers)

    assert response.status_code == 403
    assert response.json() == {"detail": "Administrator role required"}


def test_unregistered_identity_is_rejected(api_client, auth_headers) -> None:
    response = api_client.get("/api/admin/users", headers=auth_headers("ghost@example.com"))

    assert response.status_code == 401


def test_malformed_assertion_is_rejected(api_client) -> None:
    response = api_client.get(
        "/api/admin/users", headers={"cf-access-jwt-assertion": "garbage"}
    )

    assert response.status_code == 401


def test_lookup_returns_normalized_metadata(
    api_client, admin_headers, fake_books_session, volume_detail
) -> None:
    fake_books_session.queue(200, {"items": [{"id": "abc123"}]})
    fake_books_session.queue(200, volume_detail("abc123"))

    response = api_client.get(f"/api/admin/books/lookup?isbn={ISBN}", headers=admin_headers)

    assert response.status_code == 200
    payload = response.json()
    assert payload["found"] is True
    assert payload["book"]["description"] == "A classic."
    assert payload["book"]["authors"] == ["Brian W. Kernighan", "Dennis M. Ritchie"]
    assert payload["book"]["cover_url"].startswith("https://books.google.com/")


def test_lookup_not_found(api_client, admin_headers, fake_books_session) -> None:
    fake_books_session.queue(200, {"items": []})

    response = api_client.get(f"/api/admin/books/lookup?isbn={ISBN}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["found"] is False


def test_lookup_upstream_failure(api_client, admin_headers, fake_books_session) -> None:
    fake_books_session.queue(500, None)

    response = api_client.get(f"/api/admin/books/lookup?isbn={ISBN}", headers=admin_headers)

    assert response.status_code == 500
    assert "500" in response.json()["detail"]


def test_lookup_forbidden_for_members_skips_upstream(
    api_client, member_headers, fake_books_session
) -> None:
    response = api_client.get(f"/api/admin/books/lookup?isbn={ISBN}", headers=member_headers)

    assert response.status_code == 403
    assert fake_books_session.calls == []


def test_create_book_then_duplicate(api_client, admin_headers, db_session, fake_books_session) -> None:
    created = api_client.post("/api/admin/books", json=_create_body(), headers=admin_headers)

    assert created.status_code == 201
    book_id = created.json()["id"]
    assert created.headers["Location"] == f"/api/books/{book_id}"

    duplicate = api_client.post("/api/admin/books", json=_create_body(), headers=admin_headers)

    assert duplicate.status_code == 409
    assert "isbn13" in duplicate.json()["errors"]
    assert db_session.execute(select(func.count(BookModel.id))).scalar_one() == 1

    lookup = api_client.get(f"/api/admin/books/lookup?isbn={ISBN}", headers=admin_headers)
    assert lookup.status_code == 409
    assert fake_books_session.calls == []


def test_create_book_validation_errors(api_client, admin_headers, db_session) -> None:
    response = api_client.post(
        "/api/admin/books",
        json=_create_body(isbn13="123", published_date="April 1988", title=""),
        headers=admin_headers,
    )

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {"isbn13", "published_date", "title"} <= set(errors)
    assert db_session.execute(select(func.count(BookModel.id))).scalar_one() == 0


def test_edit_book_round_trip(api_client, admin_headers) -> None:
    book_id = api_client.post("/api/admin/books", json=_create_body(), headers=admin_headers).json()["id"]

    response = api_client.put(
        f"/api/admin/books/{book_id}",
        json={
            "title": "The C Programming Language (2nd ed.)",
            "publisher": "Prentice Hall",
            "published_date": "1988-04-01",
            "description": "Still a classic.",
            "authors": "Dennis M. Ritchie",
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "The C Programming Language (2nd ed.)"
    assert body["authors"] == ["Dennis M. Ritchie"]
    assert body["isbn13"] == ISBN

    fetched = api_client.get(f"/api/admin/books/{book_id}", headers=admin_headers)
    assert fetched.json()["description"] == "Still a classic."


def test_edit_unknown_book(api_client, admin_headers) -> None:
    response = api_client.get("/api/admin/books/999", headers=admin_headers)

    assert response.status_code == 404


def test_public_catalog(api_client, admin_headers) -> None:
    book_id = api_client.post(
        "/api/admin/books",
        json=_create_body(description="# Overview\n\nA *classic*."),
        headers=admin_headers,
    ).json()["id"]

    listing = api_client.get("/api/books")
    detail = api_client.get(f"/api/books/{book_id}")

    assert listing.status_code == 200
    assert [entry["id"] for entry in listing.json()["books"]] == [book_id]
    assert detail.status_code == 200
    payload = detail.json()
    assert "<h1>Overview</h1>" in payload["description_html"]
    assert payload["authors"] == ["Brian W. Kernighan", "Dennis M. Ritchie"]
    assert payload["review_count"] == 0
    assert payload["average_rating"] is None
    assert api_client.get("/api/books/999").status_code == 404


def test_copy_routes(api_client, admin_headers, db_session) -> None:
    book_id = api_client.post("/api/admin/books", json=_create_body(), headers=admin_headers).json()["id"]
    base = f"/api/admin/books/{book_id}/copies"

    created = api_client.post(base, json={"acquired_date": "2024-01-10"}, headers=admin_headers)
    assert created.status_code == 201
    copy_id = created.json()["id"]

    retired = api_client.put(
        f"{base}/{copy_id}",
        json={"acquired_date": "2024-01-10", "discarded_date": "2024-06-01"},
        headers=admin_headers,
    )
    assert retired.status_code == 200
    assert retired.json()["discarded_date"] == "2024-06-01"

    books = api_client.get("/api/admin/books", headers=admin_headers).json()["books"]
    assert books[0]["copies_count"] == 0

    invalid = api_client.post(base, json={"acquired_date": "someday"}, headers=admin_headers)
    assert invalid.status_code == 400
    assert "acquired_date" in invalid.json()["errors"]

    deleted = api_client.delete(f"{base}/{copy_id}", headers=admin_headers)
    assert deleted.status_code == 204
    assert api_client.get(base, headers=admin_headers).json()["copies"] == []

    action_types = db_session.execute(
        select(AuditLogModel.action_type).order_by(AuditLogModel.id)
    ).scalars().all()
    assert action_types == ["create_book", "create_copy", "update_copy", "delete_copy"]


def test_audit_log_listing(api_client, admin_headers, member_headers) -> None:
    api_client.post("/api/admin/books", json=_create_body(), headers=admin_headers)

    response = api_client.get("/api/admin/audit-logs", headers=admin_headers)

    assert response.status_code == 200
    entries = response.json()["entries"]
    assert entries[0]["action_type"] == "create_book"
    assert entries[0]["user_email"] == "admin@example.com"
    assert entries[0]["detail"]["entity"] == "book"
    assert api_client.get("/api/admin/audit-logs", headers=member_headers).status_code == 403
