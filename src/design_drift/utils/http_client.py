"""Async HTTP transport used by the Figma API client.

This module wraps an aiohttp session with connection pooling and converts
aiohttp responses into a small immutable-ish HTTPResponse value, so the layers
above never touch aiohttp directly.

Example usage:
    async with HTTPClient() as client:
        response = await client.get(
            "https://api.figma.com/v1/me",
            headers={"X-Figma-Token": token},
        )
        data = response.json()
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aiohttp
from multidict import CIMultiDict
from yarl import URL

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HTTPClientConfig:
    """Configuration for the HTTP transport.

    Attributes:
        connect_timeout: Connection timeout in seconds
        read_timeout: Socket read timeout in seconds
        user_agent: User-Agent header value
        max_connections: Maximum number of connections in the pool
        max_connections_per_host: Maximum connections per host
        verify_ssl: Whether to verify SSL certificates
    """

    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    user_agent: str = "design-drift/0.1 (+figma)"
    max_connections: int = 50
    max_connections_per_host: int = 10
    verify_ssl: bool = True

    @property
    def default_headers(self) -> dict[str, str]:
        """Get default headers for all requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
        }


@dataclass
class HTTPResponse:
    """Response data read fully off the wire.

    Attributes:
        status: HTTP status code
        headers: Response headers (case-insensitive)
        content: Raw response content as bytes
        url: Final URL after redirects
        reason: HTTP reason phrase
    """

    status: int
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    content: bytes = b""
    url: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CIMultiDict):
            self.headers = CIMultiDict(self.headers)

    @classmethod
    async def from_aiohttp_response(
        cls, response: aiohttp.ClientResponse
    ) -> HTTPResponse:
        """Create HTTPResponse from an aiohttp response."""
        content = await response.read()
        return cls(
            status=response.status,
            headers=CIMultiDict(response.headers),
            content=content,
            url=str(response.url),
            reason=response.reason or "",
        )

    def json(self) -> Any:
        """Parse response content as JSON.

        Raises:
            ValueError: If content is not valid JSON
        """
        try:
            return json.loads(self.content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid JSON response: {e}") from e

    def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        """Get response content as text."""
        return self.content.decode(encoding, errors)

    @property
    def is_success(self) -> bool:
        """Check if response indicates success (2xx status)."""
        return 200 <= self.status < 300

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429


class HTTPClientError(Exception):
    """Base exception for transport failures."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.cause = cause


class HTTPConnectionError(HTTPClientError):
    """Raised when connection to the server fails."""

    pass


class HTTPTimeoutError(HTTPClientError):
    """Raised when the socket read times out."""

    pass


class HTTPClient:
    """Async HTTP client with connection pooling.

    The session is created lazily on first use, so the client works both
    as an async context manager and as a long-lived object closed with
    close().
    """

    def __init__(self, config: HTTPClientConfig | None = None) -> None:
        self.config = config or HTTPClientConfig()
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HTTPClient:
        await self._create_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def _create_session(self) -> None:
        if self._session is not None:
            return

        connector = aiohttp.TCPConnector(
            limit=self.config.max_connections,
            limit_per_host=self.config.max_connections_per_host,
            ssl=self.config.verify_ssl,
        )
        timeout = aiohttp.ClientTimeout(
            total=None,
            connect=self.config.connect_timeout,
            sock_read=self.config.read_timeout,
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers=self.config.default_headers,
        )
        logger.debug(
            "Created HTTP session with pool size %d", self.config.max_connections
        )

    async def close(self) -> None:
        """Close the session and release resources."""
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("Closed HTTP session")

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            await self._create_session()
        if self._session is None:
            raise RuntimeError("HTTP session not initialized")
        return self._session

    async def get(
        self,
        url: str | URL,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> HTTPResponse:
        """Perform a GET request.

        Args:
            url: The URL to request. Strings are sent exactly as given
                 (already percent-encoded).
            headers: Additional headers to send

        Returns:
            HTTPResponse with response data

        Raises:
            HTTPConnectionError: If connection fails
            HTTPTimeoutError: If the socket read times out
            HTTPClientError: For other transport errors
        """
        session = await self._ensure_session()
        target = url if isinstance(url, URL) else URL(url, encoded=True)

        kwargs: dict[str, Any] = {}
        if headers:
            kwargs["headers"] = dict(headers)

        logger.debug("HTTP GET %s", target)

        try:
            async with session.get(target, **kwargs) as response:
                http_response = await HTTPResponse.from_aiohttp_response(response)
                logger.debug("HTTP GET %s -> %d", target, http_response.status)
                return http_response

        except aiohttp.ClientConnectorError as e:
            logger.warning("Connection error for %s: %s", target, e)
            raise HTTPConnectionError(
                f"Failed to connect to {target}", url=str(target), cause=e
            ) from e

        except aiohttp.ServerTimeoutError as e:
            logger.warning("Timeout for %s: %s", target, e)
            raise HTTPTimeoutError(
                f"Request timed out for {target}", url=str(target), cause=e
            ) from e

        except aiohttp.ClientError as e:
            logger.warning("HTTP error for %s: %s", target, e)
            raise HTTPClientError(
                f"HTTP error for {target}: {e}", url=str(target), cause=e
            ) from e
