from __future__ import annotations

import pytest
import requests

from bookvault.config_manager import GOOGLE_BOOKS_API_KEY_PLACEHOLDER
from bookvault.errors import UpstreamError
from bookvault.services.metadata import GoogleBooksClient, google_books_cover_url
from bookvault.services.metadata.clients.google_books import GOOGLE_BOOKS_VOLUMES_URL

pytestmark = pytest.mark.metadata

ISBN = "9780134190440"


def _client(session, api_key=None) -> GoogleBooksClient:
    return GoogleBooksClient(session=session, api_key=api_key, timeout_seconds=2.5)


def test_lookup_maps_search_and_detail(fake_books_session, volume_detail) -> None:
    fake_books_session.queue(200, {"kind": "books#volumes", "items": [{"id": "abc123"}]})
    fake_books_session.queue(200, volume_detail("abc123"))

    result = _client(fake_books_session).lookup_by_isbn13(ISBN)

    assert result is not None
    assert result.google_id == "abc123"
    assert result.isbn13 == ISBN
    assert result.title == "The C Programming Language"
    assert result.authors == ["Brian W. Kernighan", "Dennis M. Ritchie"]
    assert result.publisher == "Prentice Hall"
    assert result.published_date == "1988-04-01"
    assert result.description == "<p>A classic.</p>"

    search_call, detail_call = fake_books_session.calls
    assert search_call["url"] == GOOGLE_BOOKS_VOLUMES_URL
    assert search_call["params"] == {"q": f"isbn:{ISBN}"}
    assert search_call["timeout"] == 2.5
    assert detail_call["url"] == f"{GOOGLE_BOOKS_VOLUMES_URL}/abc123"


def test_optional_detail_fields_default(fake_books_session) -> None:
    fake_books_session.queue(200, {"items": [{"id": "xyz"}]})
    fake_books_session.queue(200, {"id": "xyz", "volumeInfo": {"title": "Untitled Notes"}})

    result = _client(fake_books_session).lookup_by_isbn13(ISBN)

    assert result is not None
    assert result.authors == []
    assert result.isbn13 is None
    assert result.publisher is None
    assert result.description is None
    assert result.to_dict()["authors"] == []


def test_real_api_key_is_sent_on_search_only(fake_books_session, volume_detail) -> None:
    fake_books_session.queue(200, {"items": [{"id": "abc123"}]})
    fake_books_session.queue(200, volume_detail())

    _client(fake_books_session, api_key="real-key").lookup_by_isbn13(ISBN)

    search_call, detail_call = fake_books_session.calls
    assert search_call["params"]["key"] == "real-key"
    assert not detail_call["params"]


@pytest.mark.parametrize("api_key", [None, "", GOOGLE_BOOKS_API_KEY_PLACEHOLDER])
def test_placeholder_api_key_is_not_sent(fake_books_session, api_key) -> None:
    fake_books_session.queue(200, {"items": []})

    _client(fake_books_session, api_key=api_key).lookup_by_isbn13(ISBN)

    assert "key" not in fake_books_session.calls[0]["params"]


def test_search_error_status_raises_upstream_error(fake_books_session) -> None:
    fake_books_session.queue(500, {"error": {"message": "backend error"}})

    with pytest.raises(UpstreamError) as excinfo:
        _client(fake_books_session).lookup_by_isbn13(ISBN)

    assert "500" in str(excinfo.value)
    assert len(fake_books_session.calls) == 1


def test_detail_error_status_raises_upstream_error(fake_books_session) -> None:
    fake_books_session.queue(200, {"items": [{"id": "abc123"}]})
    fake_books_session.queue(503, None)

    with pytest.raises(UpstreamError, match="503"):
        _client(fake_books_session).lookup_by_isbn13(ISBN)


@pytest.mark.parametrize(
    "payload",
    [{"items": []}, {"totalItems": 0}, {"items": [{"selfLink": "x"}]}, {"items": [{"id": ""}]}],
    ids=["empty-items", "missing-items", "missing-id", "blank-id"],
)
def test_unmatched_search_returns_none(fake_books_session, payload) -> None:
    fake_books_session.queue(200, payload)

    assert _client(fake_books_session).lookup_by_isbn13(ISBN) is None
    assert len(fake_books_session.calls) == 1


def test_unparseable_search_body_returns_none(fake_books_session, no_json) -> None:
    fake_books_session.queue(200, no_json)

    assert _client(fake_books_session).lookup_by_isbn13(ISBN) is None


def test_detail_without_title_returns_none(fake_books_session) -> None:
    fake_books_session.queue(200, {"items": [{"id": "abc123"}]})
    fake_books_session.queue(200, {"id": "abc123", "volumeInfo": {"authors": ["Someone"]}})

    assert _client(fake_books_session).lookup_by_isbn13(ISBN) is None


def test_timeout_raises_upstream_error(fake_books_session) -> None:
    fake_books_session.responses.append(requests.Timeout("read timed out"))

    with pytest.raises(UpstreamError, match="timed out"):
        _client(fake_books_session).lookup_by_isbn13(ISBN)


def test_connection_error_raises_upstream_error(fake_books_session) -> None:
    fake_books_session.responses.append(requests.ConnectionError("refused"))

    with pytest.raises(UpstreamError):
        _client(fake_books_session).lookup_by_isbn13(ISBN)


def test_upstream_failure_is_logged(fake_books_session, bookvault_caplog) -> None:
    fake_books_session.queue(502, None)

    with pytest.raises(UpstreamError):
        _client(fake_books_session).lookup_by_isbn13(ISBN)

    record = next(
        record
        for record in bookvault_caplog.records
        if getattr(record, "event", "") == "metadata.google_books.upstream_error"
    )
    assert record.status == 502


def test_cover_url() -> None:
    assert google_books_cover_url("abc123") == (
        "https://books.google.com/books/content?id=abc123"
        "&printsec=frontcover&img=1&zoom=1&source=gbs_api"
    )
    assert google_books_cover_url(None) == ""
    assert google_books_cover_url("") == ""
