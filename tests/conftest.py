"""Shared pytest fixtures for design_drift tests.

Fixtures are organized into categories:
- Sample Figma payloads
- HTTP response factories and a mock transport
- Client factories with deterministic timing

Usage:
    # In any test file, fixtures are automatically available:
    async def test_example(make_client, mock_http_client, make_response):
        mock_http_client.get.side_effect = [make_response(200, {"name": "F"})]
        client = make_client()
        assert (await client.get_file("abc")).name == "F"
"""

from __future__ import annotations

import json
import random
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from design_drift.figma.client import FigmaClient
from design_drift.figma.config import FigmaClientConfig
from design_drift.utils.http_client import HTTPClient, HTTPResponse

# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_file_data() -> dict[str, Any]:
    """Minimal GET /files/{key} payload with one component and one style."""
    return {
        "name": "Design System",
        "lastModified": "2024-05-01T12:00:00Z",
        "version": "1234567890",
        "document": {
            "id": "0:0",
            "name": "Document",
            "type": "DOCUMENT",
            "children": [
                {
                    "id": "1:1",
                    "name": "Button",
                    "type": "COMPONENT",
                    "componentPropertyDefinitions": {
                        "Size": {
                            "type": "VARIANT",
                            "defaultValue": "md",
                            "variantOptions": ["sm", "md", "lg"],
                        }
                    },
                }
            ],
        },
        "components": {
            "1:1": {
                "key": "comp-key-1",
                "name": "Button",
                "description": "Primary action",
                "documentationLinks": [],
            }
        },
        "styles": {
            "S:1": {
                "key": "style-key-1",
                "name": "Brand/Primary",
                "styleType": "FILL",
                "description": "",
            }
        },
    }


@pytest.fixture
def sample_variables_data() -> dict[str, Any]:
    """GET /files/{key}/variables/local payload with one color variable."""
    return {
        "status": 200,
        "error": False,
        "meta": {
            "variables": {
                "VariableID:1:2": {
                    "id": "VariableID:1:2",
                    "name": "color/primary",
                    "key": "var-key",
                    "resolvedType": "COLOR",
                    "variableCollectionId": "VariableCollectionId:1:1",
                    "valuesByMode": {"1:0": {"r": 1, "g": 0, "b": 0, "a": 1}},
                }
            },
            "variableCollections": {
                "VariableCollectionId:1:1": {
                    "id": "VariableCollectionId:1:1",
                    "name": "Colors",
                    "modes": [{"modeId": "1:0", "name": "Light"}],
                    "defaultModeId": "1:0",
                }
            },
        },
    }


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def make_response() -> Callable[..., HTTPResponse]:
    """Factory fixture building HTTPResponse objects.

    Usage:
        def test_example(make_response):
            ok = make_response(200, {"name": "File"})
            limited = make_response(429, "slow down", headers={"Retry-After": "5"})
    """

    def _make(
        status: int = 200,
        body: Any = None,
        *,
        headers: dict[str, str] | None = None,
        reason: str = "",
        url: str = "https://api.figma.com/v1/test",
    ) -> HTTPResponse:
        if body is None:
            content = b"{}" if 200 <= status < 300 else b""
        elif isinstance(body, bytes):
            content = body
        elif isinstance(body, str):
            content = body.encode()
        else:
            content = json.dumps(body).encode()
        return HTTPResponse(
            status=status,
            headers=headers or {},
            content=content,
            url=url,
            reason=reason,
        )

    return _make


@pytest.fixture
def mock_http_client() -> MagicMock:
    """Mock transport; set get.side_effect / get.return_value per test."""
    client = MagicMock(spec=HTTPClient)
    client.get = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def sleep_mock() -> AsyncMock:
    """Records backoff and throttling waits without actually sleeping."""
    return AsyncMock(return_value=None)


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def make_client(
    mock_http_client: MagicMock, sleep_mock: AsyncMock
) -> Callable[..., FigmaClient]:
    """Factory fixture creating a FigmaClient wired to the mock transport.

    Caching and deduplication are off unless enabled explicitly, mirroring
    how most tests want every call to reach the transport.

    Usage:
        def test_example(make_client):
            client = make_client(max_retries=1, enable_cache=True)
    """

    def _make(
        access_token: str = "test-token",
        *,
        token_refresher: Any = None,
        clock: Callable[[], float] | None = None,
        **config_overrides: Any,
    ) -> FigmaClient:
        config_overrides.setdefault("enable_cache", False)
        config_overrides.setdefault("deduplicate_requests", False)
        kwargs: dict[str, Any] = {}
        if clock is not None:
            kwargs["clock"] = clock
        return FigmaClient(
            access_token,
            FigmaClientConfig(**config_overrides),
            token_refresher=token_refresher,
            http_client=mock_http_client,
            rng=random.Random(42),
            sleep=sleep_mock,
            **kwargs,
        )

    return _make


class FakeClock:
    """Manually advanced clock for cache and rate-limit tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
