"""Utility functions and helpers."""

from design_drift.utils.http_client import (
    HTTPClient,
    HTTPClientConfig,
    HTTPClientError,
    HTTPConnectionError,
    HTTPResponse,
    HTTPTimeoutError,
)

__all__ = [
    "HTTPClient",
    "HTTPClientConfig",
    "HTTPClientError",
    "HTTPConnectionError",
    "HTTPResponse",
    "HTTPTimeoutError",
]
