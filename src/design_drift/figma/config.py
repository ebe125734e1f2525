"""Configuration for the Figma API client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from design_drift.figma.errors import FigmaConfigError

FIGMA_API_BASE_URL = "https://api.figma.com/v1"
DEFAULT_BATCH_SIZE = 100


class AuthType(str, Enum):
    """Authentication scheme used to call the API."""

    PERSONAL = "personal"
    OAUTH2 = "oauth2"


@dataclass(frozen=True, slots=True)
class FigmaClientConfig:
    """Tunable behaviour of a FigmaClient.

    All durations are in seconds.

    Attributes:
        auth_type: Personal access token or OAuth2 bearer token
        base_url: REST API root
        timeout: Per-attempt request timeout
        max_retries: Retries after the first attempt for transient failures
        initial_retry_delay: Delay before the first retry
        max_retry_delay: Cap applied to computed backoff delays
        max_jitter: Upper bound (exclusive) of random jitter added per retry
        enable_cache: Whether successful responses are cached
        cache_ttl: How long a cached response stays valid
        deduplicate_requests: Whether concurrent identical calls share one request
        proactive_rate_limit_threshold: Wait for the rate-limit reset once the
            remaining quota drops to this value (0 disables)
        batch_size: Default number of node ids per batched nodes request
    """

    auth_type: AuthType = AuthType.PERSONAL
    base_url: str = FIGMA_API_BASE_URL
    timeout: float = 30.0
    max_retries: int = 3
    initial_retry_delay: float = 1.0
    max_retry_delay: float = 30.0
    max_jitter: float = 0.5
    enable_cache: bool = True
    cache_ttl: float = 60.0
    deduplicate_requests: bool = True
    proactive_rate_limit_threshold: int = 0
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.auth_type, AuthType):
            try:
                object.__setattr__(self, "auth_type", AuthType(self.auth_type))
            except ValueError as e:
                raise FigmaConfigError(
                    f"auth_type must be one of "
                    f"{', '.join(t.value for t in AuthType)}"
                ) from e
        if not self.base_url:
            raise FigmaConfigError("base_url is required")
        if self.timeout <= 0:
            raise FigmaConfigError("timeout must be positive")
        if self.max_retries < 0:
            raise FigmaConfigError("max_retries must be non-negative")
        if self.initial_retry_delay < 0:
            raise FigmaConfigError("initial_retry_delay must be non-negative")
        if self.max_retry_delay < self.initial_retry_delay:
            raise FigmaConfigError("max_retry_delay must be >= initial_retry_delay")
        if self.max_jitter < 0:
            raise FigmaConfigError("max_jitter must be non-negative")
        if self.cache_ttl < 0:
            raise FigmaConfigError("cache_ttl must be non-negative")
        if self.proactive_rate_limit_threshold < 0:
            raise FigmaConfigError(
                "proactive_rate_limit_threshold must be non-negative"
            )
        if self.batch_size <= 0:
            raise FigmaConfigError("batch_size must be positive")
