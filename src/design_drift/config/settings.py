"""Environment-backed settings for the Figma client using pydantic-settings.

Every option can be set through a FIGMA_-prefixed environment variable or a
.env file in the working directory.

Example:
    export FIGMA_ACCESS_TOKEN=figd_...
    export FIGMA_AUTH_TYPE=oauth2
    export FIGMA_MAX_RETRIES=5
    export FIGMA_ENABLE_CACHE=false
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from design_drift.figma.config import (
    DEFAULT_BATCH_SIZE,
    FIGMA_API_BASE_URL,
    AuthType,
    FigmaClientConfig,
)


class FigmaSettings(BaseSettings):
    """Figma client settings loaded from the environment.

    Durations are in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIGMA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials
    access_token: str = ""
    auth_type: AuthType = AuthType.PERSONAL

    # Transport
    base_url: str = FIGMA_API_BASE_URL
    timeout: float = 30.0

    # Retry
    max_retries: int = 3
    initial_retry_delay: float = 1.0
    max_retry_delay: float = 30.0

    # Caching and deduplication
    enable_cache: bool = True
    cache_ttl: float = 60.0
    deduplicate_requests: bool = True

    # Rate limiting and batching
    proactive_rate_limit_threshold: int = 0
    batch_size: int = DEFAULT_BATCH_SIZE

    def to_client_config(self) -> FigmaClientConfig:
        """Build the client configuration from these settings.

        Raises:
            FigmaConfigError: If any value is out of range
        """
        return FigmaClientConfig(
            auth_type=self.auth_type,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=self.max_retries,
            initial_retry_delay=self.initial_retry_delay,
            max_retry_delay=self.max_retry_delay,
            enable_cache=self.enable_cache,
            cache_ttl=self.cache_ttl,
            deduplicate_requests=self.deduplicate_requests,
            proactive_rate_limit_threshold=self.proactive_rate_limit_threshold,
            batch_size=self.batch_size,
        )


@lru_cache
def get_settings() -> FigmaSettings:
    """Get cached settings instance."""
    return FigmaSettings()
