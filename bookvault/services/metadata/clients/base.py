"""Base class for metadata API clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from ....errors import UpstreamError
from ....logging_manager import get_logger
from ..types import BookMetadata

logger = get_logger().getChild("services.metadata.clients")

# Sentinel for a 2xx response whose body is not JSON.
UNPARSEABLE = object()


class BaseMetadataClient(ABC):
    """Abstract base class for metadata API clients.

    Transport failures and non-2xx responses raise :class:`UpstreamError`.
    A successful response that does not describe a book yields ``None`` from
    :meth:`lookup_by_isbn13`; the two outcomes are never conflated.
    """

    name: str = "metadata"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize the client.

        Args:
            session: Optional requests session for connection pooling.
            api_key: API key for services that accept one.
            timeout_seconds: Timeout applied to each upstream request.
        """
        self._session = session or requests.Session()
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._owns_session = session is None

    @abstractmethod
    def lookup_by_isbn13(self, isbn: str) -> Optional[BookMetadata]:
        """Return normalized metadata for ``isbn`` or ``None`` when unknown."""
        ...

    def close(self) -> None:
        """Release resources."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "BaseMetadataClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _get_json(self, url: str, *, params: Optional[dict] = None) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Returns :data:`UNPARSEABLE` when a 2xx body is not valid JSON.
        """
        try:
            response = self._session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            logger.warning(
                "Metadata request timed out",
                extra={
                    "event": f"metadata.{self.name}.upstream_error",
                    "attributes": {"url": url, "timeout": self._timeout},
                },
            )
            raise UpstreamError(f"{self.name} request timed out after {self._timeout}s") from exc
        except requests.RequestException as exc:
            logger.warning(
                "Metadata request failed",
                extra={
                    "event": f"metadata.{self.name}.upstream_error",
                    "attributes": {"url": url, "error": str(exc)},
                },
            )
            raise UpstreamError(f"{self.name} request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Metadata request returned an error status",
                extra={
                    "event": f"metadata.{self.name}.upstream_error",
                    "status": response.status_code,
                    "attributes": {"url": url},
                },
            )
            raise UpstreamError(
                f"{self.name} request failed with status {response.status_code}"
            )

        try:
            return response.json()
        except ValueError:
            return UNPARSEABLE


__all__ = ["BaseMetadataClient", "UNPARSEABLE"]
