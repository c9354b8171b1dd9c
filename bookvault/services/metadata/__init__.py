"""External book metadata lookups."""

from .clients import BaseMetadataClient, GoogleBooksClient, google_books_cover_url
from .types import BookMetadata, VolumeDetailResponse, VolumeSearchResponse

__all__ = [
    "BaseMetadataClient",
    "BookMetadata",
    "GoogleBooksClient",
    "VolumeDetailResponse",
    "VolumeSearchResponse",
    "google_books_cover_url",
]
