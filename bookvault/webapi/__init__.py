"""FastAPI web API for BookVault."""

from .application import create_app

__all__ = ["create_app"]
