"""Request execution for the Figma API client.

The executor composes the client's building blocks around a single send:

    cache lookup -> in-flight dedup -> [proactive rate-limit wait ->
    auth header -> timed send -> classify -> backoff] * attempts -> cache store

Callers describe what to fetch with a RequestDescriptor and get back either a
validated pydantic model or exactly one typed FigmaAPIError subclass.

Example usage:
    descriptor = RequestDescriptor.build("/files/abc123", {"depth": 2})
    figma_file = await executor.execute(descriptor, FigmaFile)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from design_drift.figma.cache import ResponseCache
from design_drift.figma.dedup import InFlightRequests
from design_drift.figma.errors import (
    FigmaAPIError,
    FigmaAuthError,
    FigmaConnectionError,
    FigmaTimeoutError,
    error_from_response,
)
from design_drift.figma.rate_limit import RateLimitTracker
from design_drift.figma.retry import RetryPolicy, parse_retry_after
from design_drift.utils.http_client import (
    HTTPClient,
    HTTPClientError,
    HTTPResponse,
    HTTPTimeoutError,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from design_drift.figma.auth import TokenProvider
    from design_drift.figma.config import FigmaClientConfig

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

QueryValue = str | int | float | bool | Iterable[str] | None


def encode_segment(value: str) -> str:
    """Percent-encode a single path segment or query value."""
    return quote(str(value), safe="")


def _encode_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return encode_segment(str(value))
    # Lists of ids: encode each item, keep the separating commas literal
    return ",".join(encode_segment(item) for item in value)


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """A fully resolved API request.

    Attributes:
        path: URL path below the API base, already encoded (e.g. "/files/abc")
        params: Encoded query parameters, sorted by name
        method: HTTP method
    """

    path: str
    params: tuple[tuple[str, str], ...] = ()
    method: str = "GET"

    @classmethod
    def build(
        cls,
        path: str,
        params: Mapping[str, QueryValue] | None = None,
        method: str = "GET",
    ) -> RequestDescriptor:
        """Create a descriptor, dropping unset parameters.

        None and False values are omitted; True becomes "true"; iterables
        are encoded item by item and joined with commas.
        """
        encoded: list[tuple[str, str]] = []
        for name, value in (params or {}).items():
            if value is None or value is False:
                continue
            encoded.append((name, _encode_query_value(value)))
        return cls(path=path, params=tuple(sorted(encoded)), method=method.upper())

    @property
    def query(self) -> str:
        return "&".join(f"{name}={value}" for name, value in self.params)

    @property
    def key(self) -> str:
        """Canonical request key shared by the cache and the deduplicator."""
        query = self.query
        return f"{self.method} {self.path}?{query}" if query else f"{self.method} {self.path}"

    def url(self, base_url: str) -> str:
        query = self.query
        target = f"{base_url.rstrip('/')}{self.path}"
        return f"{target}?{query}" if query else target


class RequestExecutor:
    """Sends requests with auth, timeout, retries, caching and deduplication.

    Args:
        config: Client configuration
        auth: Token provider for auth headers and OAuth2 refresh
        http_client: Transport used to send requests
        rate_limits: Tracker updated from every response
        retry_policy: Backoff calculation
        sleep: Awaitable sleep used for backoff and throttling waits
        clock: Monotonic clock for cache expiry
    """

    def __init__(
        self,
        config: FigmaClientConfig,
        auth: TokenProvider,
        http_client: HTTPClient,
        *,
        rate_limits: RateLimitTracker | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.auth = auth
        self.http_client = http_client
        self.rate_limits = rate_limits or RateLimitTracker()
        self.retry_policy = retry_policy or RetryPolicy(config)
        self._sleep = sleep

        self.cache: ResponseCache | None = (
            ResponseCache(config.cache_ttl, clock=clock) if config.enable_cache else None
        )
        self.in_flight: InFlightRequests | None = (
            InFlightRequests() if config.deduplicate_requests else None
        )

    async def execute(
        self, descriptor: RequestDescriptor, response_model: type[ModelT]
    ) -> ModelT:
        """Execute a request and return the validated response model.

        Cache hits return a deep copy, so callers may mutate results freely.

        Raises:
            FigmaAuthError: Credential rejected
            FigmaNotFoundError: Resource does not exist
            FigmaRateLimitError: Still rate limited after all retries
            FigmaAPIError: Any other failure, including timeouts
        """
        key = descriptor.key

        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached.model_copy(deep=True)

        if self.in_flight is not None:
            return await self.in_flight.run(
                key, lambda: self._fetch(descriptor, response_model)
            )
        return await self._fetch(descriptor, response_model)

    async def _fetch(
        self, descriptor: RequestDescriptor, response_model: type[ModelT]
    ) -> ModelT:
        result = await self._send_with_retries(descriptor, response_model)
        if self.cache is not None:
            self.cache.set(descriptor.key, result.model_copy(deep=True))
        return result

    async def _send_with_retries(
        self, descriptor: RequestDescriptor, response_model: type[ModelT]
    ) -> ModelT:
        url = descriptor.url(self.config.base_url)
        attempt = 0
        refreshed = False

        while True:
            await self.rate_limits.wait_if_needed(
                self.config.proactive_rate_limit_threshold, self._sleep
            )
            token = self.auth.token

            try:
                payload = await self._send_once(url, token)
                return self._parse(payload, response_model, url)

            except FigmaAuthError as e:
                if e.status_code == 401 and self.auth.can_refresh and not refreshed:
                    refreshed = True
                    await self.auth.refresh(token)
                    logger.info("Retrying %s with refreshed token", descriptor.key)
                    continue
                logger.error("%s failed: %s", descriptor.key, e)
                raise

            except FigmaAPIError as e:
                attempt += 1
                if not self.retry_policy.should_retry(e, attempt):
                    if self.retry_policy.is_retryable(e):
                        logger.error(
                            "%s failed after %d attempts: %s",
                            descriptor.key,
                            attempt,
                            e,
                        )
                    raise

                delay = self.retry_policy.calculate_delay(attempt, e)
                logger.warning(
                    "%s failed (attempt %d/%d): %s. Retrying in %.2fs",
                    descriptor.key,
                    attempt,
                    self.retry_policy.max_retries + 1,
                    e,
                    delay,
                )
                await self._sleep(delay)

    async def _send_once(self, url: str, token: str) -> tuple[HTTPResponse, Any]:
        """Send one attempt and classify its outcome.

        Returns:
            The response and its decoded JSON body

        Raises:
            FigmaAPIError: Typed error for any non-2xx or transport failure
        """
        timeout = self.config.timeout
        try:
            async with asyncio.timeout(timeout):
                response = await self.http_client.get(
                    url, headers=self.auth.headers(token)
                )
        except TimeoutError as e:
            raise FigmaTimeoutError(
                f"Figma API request timed out after {timeout:g}s", url=url
            ) from e
        except HTTPTimeoutError as e:
            raise FigmaTimeoutError(
                f"Figma API request timed out waiting for data: {e}", url=url
            ) from e
        except HTTPClientError as e:
            raise FigmaConnectionError(
                f"Network error calling Figma API: {e}", url=url
            ) from e

        self.rate_limits.update(response.headers)

        if not response.is_success:
            retry_after = None
            if response.is_rate_limited:
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
            raise error_from_response(response, retry_after=retry_after)

        try:
            return response, response.json()
        except ValueError as e:
            raise FigmaAPIError(
                str(e), response.status, response.text(errors="replace"), url
            ) from e

    @staticmethod
    def _parse(
        sent: tuple[HTTPResponse, Any], response_model: type[ModelT], url: str
    ) -> ModelT:
        response, payload = sent
        try:
            return response_model.model_validate(payload)
        except ValidationError as e:
            raise FigmaAPIError(
                f"Unexpected {response_model.__name__} payload: {e}",
                response.status,
                response.text(errors="replace"),
                url,
            ) from e

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()
