"""Tests for TokenProvider header building and OAuth2 refresh."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from design_drift.figma.auth import PERSONAL_TOKEN_HEADER, TokenProvider
from design_drift.figma.config import AuthType
from design_drift.figma.errors import FigmaAuthError, FigmaConfigError


class TestTokenProviderInit:
    @pytest.mark.parametrize("token", ["", "   ", "\t\n"])
    def test_empty_token_rejected(self, token: str) -> None:
        with pytest.raises(FigmaConfigError, match="Access token is required"):
            TokenProvider(token)

    def test_personal_cannot_refresh(self) -> None:
        provider = TokenProvider("tok", AuthType.PERSONAL, refresher=lambda: "new")

        assert not provider.can_refresh

    def test_oauth_without_refresher_cannot_refresh(self) -> None:
        assert not TokenProvider("tok", AuthType.OAUTH2).can_refresh

    def test_oauth_with_refresher_can_refresh(self) -> None:
        assert TokenProvider("tok", AuthType.OAUTH2, refresher=lambda: "new").can_refresh


class TestTokenProviderHeaders:
    def test_personal_header(self) -> None:
        provider = TokenProvider("figd_abc")

        assert provider.headers() == {PERSONAL_TOKEN_HEADER: "figd_abc"}

    def test_oauth_bearer_header(self) -> None:
        provider = TokenProvider("oauth-abc", AuthType.OAUTH2)

        assert provider.headers() == {"Authorization": "Bearer oauth-abc"}

    def test_explicit_token_overrides_current(self) -> None:
        provider = TokenProvider("current", AuthType.OAUTH2)

        assert provider.headers("other") == {"Authorization": "Bearer other"}


@pytest.mark.asyncio
class TestTokenProviderRefresh:
    async def test_sync_refresher(self) -> None:
        refresher = MagicMock(return_value="fresh")
        provider = TokenProvider("stale", AuthType.OAUTH2, refresher)

        assert await provider.refresh("stale") == "fresh"
        assert provider.token == "fresh"
        refresher.assert_called_once_with()

    async def test_async_refresher(self) -> None:
        refresher = AsyncMock(return_value="fresh")
        provider = TokenProvider("stale", AuthType.OAUTH2, refresher)

        assert await provider.refresh("stale") == "fresh"
        refresher.assert_awaited_once()

    async def test_refresh_not_configured(self) -> None:
        provider = TokenProvider("tok")

        with pytest.raises(FigmaAuthError, match="not configured"):
            await provider.refresh("tok")

    async def test_empty_refresh_result_rejected(self) -> None:
        provider = TokenProvider("stale", AuthType.OAUTH2, lambda: "  ")

        with pytest.raises(FigmaAuthError, match="empty access token"):
            await provider.refresh("stale")

        assert provider.token == "stale"

    async def test_refresher_error_propagates_unchanged(self) -> None:
        class RefreshFailed(Exception):
            pass

        provider = TokenProvider(
            "stale", AuthType.OAUTH2, AsyncMock(side_effect=RefreshFailed("denied"))
        )

        with pytest.raises(RefreshFailed, match="denied"):
            await provider.refresh("stale")

    async def test_already_refreshed_token_reused(self) -> None:
        refresher = MagicMock(return_value="second")
        provider = TokenProvider("stale", AuthType.OAUTH2, lambda: "first")
        await provider.refresh("stale")
        provider._refresher = refresher

        assert await provider.refresh("stale") == "first"
        refresher.assert_not_called()

    async def test_concurrent_refreshes_share_one_call(self) -> None:
        calls = 0

        async def refresher() -> str:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0)
            return "fresh"

        provider = TokenProvider("stale", AuthType.OAUTH2, refresher)

        results = await asyncio.gather(*(provider.refresh("stale") for _ in range(4)))

        assert calls == 1
        assert results == ["fresh"] * 4
