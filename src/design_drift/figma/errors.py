"""Typed errors raised by the Figma API client.

Every call made through the client ends either with a parsed payload or with
exactly one of these exceptions:

- FigmaAuthError: the credential was rejected (401/403)
- FigmaNotFoundError: the file, node or resource does not exist (404)
- FigmaRateLimitError: the rate limit was still exceeded after retrying (429)
- FigmaAPIError: anything else, including timeouts and network failures

FigmaConfigError is raised synchronously while building a client and never
as the outcome of a network call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from design_drift.utils.http_client import HTTPResponse


class FigmaError(Exception):
    """Base exception for all Figma client errors."""

    pass


class FigmaConfigError(FigmaError, ValueError):
    """Raised when the client is constructed with invalid configuration."""

    pass


class FigmaAPIError(FigmaError):
    """Raised when a Figma API call fails.

    Attributes:
        status_code: HTTP status code, or None for transport failures
        response_body: Raw response body text, if any
        url: Request URL
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str = "",
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.url = url

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.url:
            parts.append(f"url={self.url}")
        return " ".join(parts)


class FigmaAuthError(FigmaAPIError):
    """Raised when authentication fails (401, 403)."""

    pass


class FigmaNotFoundError(FigmaAPIError):
    """Raised when a resource is not found (404)."""

    def __init__(
        self, message: str, response_body: str = "", url: str | None = None
    ) -> None:
        super().__init__(message, 404, response_body, url)


class FigmaRateLimitError(FigmaAPIError):
    """Raised when the rate limit is exceeded (429).

    Attributes:
        retry_after: Seconds the server asked us to wait, if it said so
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        response_body: str = "",
        retry_after: float | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message, 429, response_body, url)
        self.retry_after = retry_after


class FigmaTimeoutError(FigmaAPIError):
    """Raised when a request exceeds the configured timeout."""

    pass


class FigmaConnectionError(FigmaAPIError):
    """Raised when the request could not reach the server."""

    pass


def error_from_response(
    response: HTTPResponse, *, retry_after: float | None = None
) -> FigmaAPIError:
    """Map a non-2xx response onto the matching typed error.

    Args:
        response: The failed HTTP response
        retry_after: Parsed Retry-After delay in seconds, used for 429s

    Returns:
        The typed error for the response status
    """
    body = response.text(errors="replace")
    message = f"Figma API error: {response.status} {response.reason} - {body}".strip()

    if response.status in (401, 403):
        return FigmaAuthError(message, response.status, body, response.url)
    if response.status == 404:
        return FigmaNotFoundError(message, body, response.url)
    if response.status == 429:
        return FigmaRateLimitError(message, body, retry_after, response.url)
    return FigmaAPIError(message, response.status, body, response.url)
