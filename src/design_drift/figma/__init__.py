"""Resilient client for the Figma REST API.

This package provides the client the scanners use to read design files:
- FigmaClient: one method per endpoint
- RequestExecutor: auth, timeout, retry, caching and deduplication
- RetryPolicy: jittered exponential backoff
- RateLimitTracker: proactive throttling from rate-limit headers
- Typed errors for every failure outcome
"""

from design_drift.figma.auth import TokenProvider, TokenRefresher
from design_drift.figma.cache import ResponseCache
from design_drift.figma.client import FigmaClient, create_figma_client
from design_drift.figma.config import AuthType, FigmaClientConfig
from design_drift.figma.dedup import InFlightRequests
from design_drift.figma.errors import (
    FigmaAPIError,
    FigmaAuthError,
    FigmaConfigError,
    FigmaConnectionError,
    FigmaError,
    FigmaNotFoundError,
    FigmaRateLimitError,
    FigmaTimeoutError,
)
from design_drift.figma.executor import RequestDescriptor, RequestExecutor
from design_drift.figma.rate_limit import RateLimitInfo, RateLimitTracker
from design_drift.figma.retry import RetryPolicy, parse_retry_after

__all__ = [
    # Client
    "FigmaClient",
    "create_figma_client",
    "AuthType",
    "FigmaClientConfig",
    # Building blocks
    "InFlightRequests",
    "RateLimitInfo",
    "RateLimitTracker",
    "RequestDescriptor",
    "RequestExecutor",
    "ResponseCache",
    "RetryPolicy",
    "TokenProvider",
    "TokenRefresher",
    "parse_retry_after",
    # Errors
    "FigmaAPIError",
    "FigmaAuthError",
    "FigmaConfigError",
    "FigmaConnectionError",
    "FigmaError",
    "FigmaNotFoundError",
    "FigmaRateLimitError",
    "FigmaTimeoutError",
]
