"""Transport layer for the Google Sheets and Drive REST APIs.

Defines the Transport protocol and its production implementation:
- Transport: the request-executing collaborator used by the sync engine
- HttpTransport: authenticated JSON transport over httpx

Transports do not retry. Any retry or backoff policy belongs to a wrapping
Transport implementation.
"""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

import certifi
import httpx
from loguru import logger

DEFAULT_TIMEOUT = 60


class TransportError(Exception):
    """Base exception for transport errors."""


class AuthenticationError(TransportError):
    """Raised when authentication fails (401/403)."""


class NotFoundError(TransportError):
    """Raised when a spreadsheet, sheet or file is not found (404)."""


class APIError(TransportError):
    """Raised when the API returns an error."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class Transport(ABC):
    """Abstract base class for executing API requests.

    Implementations return the parsed JSON body of a successful response and
    raise a TransportError subclass for anything else.
    """

    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute a request.

        Args:
            method: HTTP method ("GET", "POST", "PATCH", "DELETE")
            url: Absolute request URL
            params: Query string parameters
            json: JSON request body

        Returns:
            The parsed JSON response body ({} for empty bodies)
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close any open connections."""
        ...

    def __enter__(self) -> Transport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class HttpTransport(Transport):
    """Production transport that talks to Google APIs over HTTPS.

    Handles authentication, SSL, and HTTP error mapping.
    """

    def __init__(
        self,
        access_token: str,
        timeout: int = DEFAULT_TIMEOUT,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            access_token: OAuth2 access token with spreadsheets (and, for
                ACL management, drive) scope
            timeout: Request timeout in seconds
            transport: Optional httpx transport, e.g. httpx.MockTransport
        """
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._client = httpx.Client(
            timeout=timeout,
            verify=ssl_context,
            transport=transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )

    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request and decode the JSON body."""
        logger.trace("{} {}", method, url)
        try:
            response = self._client.request(method, url, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise AuthenticationError("Invalid or expired access token") from e
            if status == 403:
                raise AuthenticationError(
                    "Access denied. Check your scopes and permissions."
                ) from e
            if status == 404:
                raise NotFoundError(
                    "Resource not found. Check the ID and sharing permissions."
                ) from e
            body = e.response.text
            raise APIError(f"API error ({status}): {body}", status_code=status) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e

        if not response.content:
            return {}
        try:
            result: dict[str, Any] = response.json()
        except ValueError as e:
            raise TransportError(f"Response is not valid JSON: {e}") from e
        return result

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
