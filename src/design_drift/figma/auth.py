"""Credential handling for the Figma API client.

Two schemes are supported:

- personal access tokens, sent as ``X-Figma-Token: <token>``
- OAuth2 access tokens, sent as ``Authorization: Bearer <token>``

In OAuth2 mode an optional refresher can be supplied. It is called when the
API answers 401, and the token it returns replaces the current one in place.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Union

from design_drift.figma.config import AuthType
from design_drift.figma.errors import FigmaAuthError, FigmaConfigError

logger = logging.getLogger(__name__)

PERSONAL_TOKEN_HEADER = "X-Figma-Token"

# Sync or async zero-argument callable returning a fresh access token
TokenRefresher = Callable[[], Union[str, Awaitable[str]]]


class TokenProvider:
    """Holds the current access token and builds auth headers.

    Args:
        access_token: Initial access token
        auth_type: Authentication scheme
        refresher: Called to obtain a new token after a 401 (OAuth2 only)

    Raises:
        FigmaConfigError: If the access token is empty or whitespace
    """

    def __init__(
        self,
        access_token: str,
        auth_type: AuthType = AuthType.PERSONAL,
        refresher: TokenRefresher | None = None,
    ) -> None:
        if not access_token or not access_token.strip():
            raise FigmaConfigError("Access token is required")
        self._token = access_token
        self.auth_type = auth_type
        self._refresher = refresher
        self._lock = asyncio.Lock()

    @property
    def token(self) -> str:
        return self._token

    @property
    def can_refresh(self) -> bool:
        """Whether a 401 may be answered with a token refresh."""
        return self.auth_type is AuthType.OAUTH2 and self._refresher is not None

    def headers(self, token: str | None = None) -> dict[str, str]:
        """Build the auth header for token (defaults to the current token)."""
        value = token if token is not None else self._token
        if self.auth_type is AuthType.OAUTH2:
            return {"Authorization": f"Bearer {value}"}
        return {PERSONAL_TOKEN_HEADER: value}

    async def refresh(self, stale_token: str) -> str:
        """Replace stale_token with a freshly issued one.

        Callers that hit a 401 concurrently with the same token share a single
        refresher invocation: whoever gets the lock second sees the token has
        already changed and reuses it.

        Args:
            stale_token: The token that was rejected

        Returns:
            The token to retry with

        Raises:
            FigmaAuthError: If refreshing is not possible or yields no token
            Exception: Whatever the refresher raises, unchanged
        """
        if not self.can_refresh or self._refresher is None:
            raise FigmaAuthError("Token refresh is not configured", 401)

        async with self._lock:
            if self._token != stale_token:
                return self._token

            logger.info("Access token rejected; refreshing OAuth2 token")
            result = self._refresher()
            if inspect.isawaitable(result):
                result = await result

            if not isinstance(result, str) or not result.strip():
                raise FigmaAuthError("Token refresh returned an empty access token", 401)

            self._token = result
            return result
