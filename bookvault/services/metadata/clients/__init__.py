"""Metadata source clients."""

from .base import BaseMetadataClient
from .google_books import GoogleBooksClient, google_books_cover_url

__all__ = ["BaseMetadataClient", "GoogleBooksClient", "google_books_cover_url"]
