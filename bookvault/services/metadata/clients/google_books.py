"""Google Books API client for book metadata."""

from __future__ import annotations

from typing import Optional

import pydantic
import requests

from ....config_manager import is_placeholder_api_key
from ....logging_manager import get_logger
from ..types import BookMetadata, VolumeDetailResponse, VolumeSearchResponse
from .base import UNPARSEABLE, BaseMetadataClient

logger = get_logger().getChild("services.metadata.clients.google_books")

GOOGLE_BOOKS_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"
GOOGLE_BOOKS_COVER_URL = "https://books.google.com/books/content"


def google_books_cover_url(google_id: Optional[str]) -> str:
    """Return the front-cover thumbnail URL for a volume id, or ``""``."""

    if not google_id:
        return ""
    return (
        f"{GOOGLE_BOOKS_COVER_URL}?id={google_id}"
        "&printsec=frontcover&img=1&zoom=1&source=gbs_api"
    )


class GoogleBooksClient(BaseMetadataClient):
    """Two-step ISBN lookup: search for the volume id, then fetch its detail.

    The API key is optional. The placeholder value shipped in example
    configuration is treated as absent, falling back to the anonymous quota.
    """

    name = "google_books"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
        base_url: str = GOOGLE_BOOKS_VOLUMES_URL,
    ) -> None:
        super().__init__(session=session, api_key=api_key, timeout_seconds=timeout_seconds)
        self._base_url = base_url.rstrip("/")

    @property
    def uses_api_key(self) -> bool:
        return not is_placeholder_api_key(self._api_key)

    def lookup_by_isbn13(self, isbn: str) -> Optional[BookMetadata]:
        volume_id = self._search_volume_id(isbn)
        if volume_id is None:
            logger.info(
                "No Google Books volume for ISBN",
                extra={"event": "metadata.google_books.not_found", "attributes": {"isbn": isbn}},
            )
            return None

        detail = self._fetch_detail(volume_id)
        if detail is None:
            logger.info(
                "Google Books volume detail did not match the expected shape",
                extra={
                    "event": "metadata.google_books.not_found",
                    "attributes": {"isbn": isbn, "google_id": volume_id},
                },
            )
            return None

        info = detail.volume_info
        return BookMetadata(
            google_id=detail.id,
            title=info.title,
            isbn13=info.isbn13(),
            authors=list(info.authors),
            publisher=info.publisher,
            published_date=info.published_date,
            description=info.description,
        )

    def _search_volume_id(self, isbn: str) -> Optional[str]:
        params = {"q": f"isbn:{isbn}"}
        if self.uses_api_key:
            params["key"] = self._api_key

        logger.info(
            "Searching Google Books by ISBN",
            extra={
                "event": "metadata.google_books.search",
                "attributes": {"isbn": isbn, "with_key": self.uses_api_key},
            },
        )
        payload = self._get_json(self._base_url, params=params)
        if payload is UNPARSEABLE:
            return None
        try:
            result = VolumeSearchResponse.model_validate(payload)
        except pydantic.ValidationError:
            return None
        return result.items[0].id

    def _fetch_detail(self, volume_id: str) -> Optional[VolumeDetailResponse]:
        payload = self._get_json(f"{self._base_url}/{volume_id}")
        if payload is UNPARSEABLE:
            return None
        try:
            return VolumeDetailResponse.model_validate(payload)
        except pydantic.ValidationError:
            return None


__all__ = ["GOOGLE_BOOKS_VOLUMES_URL", "GoogleBooksClient", "google_books_cover_url"]
