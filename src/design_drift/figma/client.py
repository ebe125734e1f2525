"""Figma REST API client.

One thin method per endpoint. Every method builds a RequestDescriptor and
hands it to the RequestExecutor, which owns authentication, timeouts,
retries, rate limiting, caching and deduplication.

Example usage:
    async with FigmaClient(token) as client:
        figma_file = await client.get_file("abc123", depth=2)
        nodes = await client.get_nodes_batched("abc123", node_ids)

    # OAuth2 with refresh
    client = FigmaClient(
        oauth_token,
        FigmaClientConfig(auth_type=AuthType.OAUTH2),
        token_refresher=refresh_oauth_token,
    )
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from functools import partial
from typing import TYPE_CHECKING, Any, Literal

from design_drift.figma.auth import TokenProvider, TokenRefresher
from design_drift.figma.batching import fetch_nodes_in_batches
from design_drift.figma.config import FigmaClientConfig
from design_drift.figma.executor import (
    RequestDescriptor,
    RequestExecutor,
    encode_segment,
)
from design_drift.figma.models import (
    FigmaComponentResponse,
    FigmaComponentSetResponse,
    FigmaComponentSetsResponse,
    FigmaCommentsResponse,
    FigmaDevResourcesResponse,
    FigmaFile,
    FigmaFileComponentsResponse,
    FigmaFileMetaResponse,
    FigmaFileStylesResponse,
    FigmaFileVersionsResponse,
    FigmaImageFillsResponse,
    FigmaImageResponse,
    FigmaNodesResponse,
    FigmaProjectFilesResponse,
    FigmaStyleResponse,
    FigmaTeamComponentSetsResponse,
    FigmaTeamComponentsResponse,
    FigmaTeamProjectsResponse,
    FigmaTeamStylesResponse,
    FigmaUser,
    FigmaVariablesResponse,
)
from design_drift.figma.rate_limit import RateLimitInfo, RateLimitTracker
from design_drift.figma.retry import RetryPolicy
from design_drift.utils.http_client import HTTPClient

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from design_drift.config.settings import FigmaSettings

logger = logging.getLogger(__name__)

FIGMA_WEB_URL = "https://www.figma.com/file"

ImageFormat = Literal["jpg", "png", "svg", "pdf"]


class FigmaClient:
    """Async client for the Figma REST API.

    Args:
        access_token: Personal access token or OAuth2 access token
        config: Client behaviour. Uses defaults if not provided.
        token_refresher: Sync or async callable returning a new OAuth2 token
        http_client: Optional transport. A private one is created (and
                     closed on exit) if not provided.
        rng: Random source for retry jitter
        sleep: Awaitable sleep used for backoff and throttling
        clock: Monotonic clock used for cache expiry

    Raises:
        FigmaConfigError: If the access token is empty
    """

    def __init__(
        self,
        access_token: str,
        config: FigmaClientConfig | None = None,
        *,
        token_refresher: TokenRefresher | None = None,
        http_client: HTTPClient | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or FigmaClientConfig()
        self._auth = TokenProvider(
            access_token, self.config.auth_type, token_refresher
        )

        self._owns_http_client = http_client is None
        self._http_client = http_client or HTTPClient()
        self._rate_limits = RateLimitTracker()

        self._executor = RequestExecutor(
            self.config,
            self._auth,
            self._http_client,
            rate_limits=self._rate_limits,
            retry_policy=RetryPolicy(self.config, rng),
            sleep=sleep,
            clock=clock,
        )

        logger.debug(
            "Initialized FigmaClient (auth=%s, max_retries=%d, cache=%s, dedup=%s)",
            self.config.auth_type.value,
            self.config.max_retries,
            self.config.enable_cache,
            self.config.deduplicate_requests,
        )

    async def __aenter__(self) -> FigmaClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http_client:
            await self._http_client.close()

    async def _get(
        self,
        path: str,
        response_model: Any,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return await self._executor.execute(
            RequestDescriptor.build(path, params), response_model
        )

    # =========================================================================
    # Client state
    # =========================================================================

    def get_rate_limit_info(self) -> RateLimitInfo | None:
        """Latest rate-limit snapshot reported by the API, if any."""
        return self._rate_limits.info

    def clear_cache(self) -> None:
        """Invalidate every cached response."""
        self._executor.clear_cache()

    @staticmethod
    def get_figma_url(file_key: str, node_id: str | None = None) -> str:
        """Build the web URL of a file, optionally focused on a node."""
        base = f"{FIGMA_WEB_URL}/{file_key}"
        if node_id:
            return f"{base}?node-id={encode_segment(node_id)}"
        return base

    # =========================================================================
    # Files and nodes
    # =========================================================================

    async def get_file(
        self,
        file_key: str,
        *,
        version: str | None = None,
        depth: int | None = None,
        geometry: Literal["paths"] | None = None,
        plugin_data: str | None = None,
        branch_data: bool = False,
    ) -> FigmaFile:
        """Fetch a whole file document.

        Args:
            file_key: File to fetch
            version: Specific version id
            depth: How deep into the node tree to traverse
            geometry: "paths" to include vector data
            plugin_data: Plugin ids (or "shared") whose data to include
            branch_data: Include branch metadata
        """
        return await self._get(
            f"/files/{encode_segment(file_key)}",
            FigmaFile,
            {
                "version": version,
                "depth": depth,
                "geometry": geometry,
                "plugin_data": plugin_data,
                "branch_data": branch_data,
            },
        )

    async def get_nodes(
        self,
        file_key: str,
        ids: Sequence[str],
        *,
        depth: int | None = None,
        geometry: Literal["paths"] | None = None,
        plugin_data: str | None = None,
    ) -> FigmaNodesResponse:
        """Fetch specific nodes of a file by id."""
        return await self._get(
            f"/files/{encode_segment(file_key)}/nodes",
            FigmaNodesResponse,
            {
                "ids": list(ids),
                "depth": depth,
                "geometry": geometry,
                "plugin_data": plugin_data,
            },
        )

    async def get_nodes_batched(
        self,
        file_key: str,
        ids: Sequence[str],
        *,
        batch_size: int | None = None,
        depth: int | None = None,
        geometry: Literal["paths"] | None = None,
        plugin_data: str | None = None,
    ) -> FigmaNodesResponse:
        """Fetch any number of nodes, chunked into bounded requests.

        Args:
            file_key: File containing the nodes
            ids: Node ids; duplicates are fetched once
            batch_size: Ids per request, defaults to config.batch_size

        Raises:
            FigmaConfigError: If batch_size is not positive
            FigmaAPIError: The first failing chunk's error
        """
        fetch_chunk = partial(
            self.get_nodes,
            file_key,
            depth=depth,
            geometry=geometry,
            plugin_data=plugin_data,
        )
        return await fetch_nodes_in_batches(
            ids,
            batch_size if batch_size is not None else self.config.batch_size,
            fetch_chunk,
        )

    async def get_file_meta(self, file_key: str) -> FigmaFileMetaResponse:
        """Fetch lightweight file metadata without the document tree."""
        return await self._get(
            f"/files/{encode_segment(file_key)}/meta", FigmaFileMetaResponse
        )

    async def get_file_versions(self, file_key: str) -> FigmaFileVersionsResponse:
        return await self._get(
            f"/files/{encode_segment(file_key)}/versions", FigmaFileVersionsResponse
        )

    async def get_comments(self, file_key: str) -> FigmaCommentsResponse:
        return await self._get(
            f"/files/{encode_segment(file_key)}/comments", FigmaCommentsResponse
        )

    async def get_dev_resources(
        self, file_key: str, *, node_id: str | None = None
    ) -> FigmaDevResourcesResponse:
        """Fetch dev resources (links attached to nodes), optionally for one node."""
        return await self._get(
            f"/files/{encode_segment(file_key)}/dev_resources",
            FigmaDevResourcesResponse,
            {"node_id": node_id},
        )

    # =========================================================================
    # Images
    # =========================================================================

    async def get_image_urls(
        self,
        file_key: str,
        ids: Sequence[str],
        *,
        format: ImageFormat | None = None,
        scale: float | None = None,
    ) -> FigmaImageResponse:
        """Render nodes and return temporary image URLs keyed by node id."""
        return await self._get(
            f"/images/{encode_segment(file_key)}",
            FigmaImageResponse,
            {"ids": list(ids), "format": format, "scale": scale},
        )

    async def get_image_fills(self, file_key: str) -> FigmaImageFillsResponse:
        """Fetch download URLs for every image fill in a file.

        The returned URLs expire after at most 14 days.
        """
        return await self._get(
            f"/files/{encode_segment(file_key)}/images", FigmaImageFillsResponse
        )

    # =========================================================================
    # Library content in a file
    # =========================================================================

    async def get_file_components(self, file_key: str) -> FigmaFileComponentsResponse:
        return await self._get(
            f"/files/{encode_segment(file_key)}/components",
            FigmaFileComponentsResponse,
        )

    async def get_file_styles(self, file_key: str) -> FigmaFileStylesResponse:
        return await self._get(
            f"/files/{encode_segment(file_key)}/styles", FigmaFileStylesResponse
        )

    async def get_file_component_sets(
        self, file_key: str
    ) -> FigmaComponentSetsResponse:
        return await self._get(
            f"/files/{encode_segment(file_key)}/component_sets",
            FigmaComponentSetsResponse,
        )

    async def get_local_variables(self, file_key: str) -> FigmaVariablesResponse:
        return await self._get(
            f"/files/{encode_segment(file_key)}/variables/local",
            FigmaVariablesResponse,
        )

    async def get_published_variables(self, file_key: str) -> FigmaVariablesResponse:
        """Fetch variables published from a file to its team library."""
        return await self._get(
            f"/files/{encode_segment(file_key)}/variables/published",
            FigmaVariablesResponse,
        )

    # =========================================================================
    # Single library items
    # =========================================================================

    async def get_component(self, component_key: str) -> FigmaComponentResponse:
        return await self._get(
            f"/components/{encode_segment(component_key)}", FigmaComponentResponse
        )

    async def get_style(self, style_key: str) -> FigmaStyleResponse:
        return await self._get(
            f"/styles/{encode_segment(style_key)}", FigmaStyleResponse
        )

    async def get_component_set(
        self, component_set_key: str
    ) -> FigmaComponentSetResponse:
        return await self._get(
            f"/component_sets/{encode_segment(component_set_key)}",
            FigmaComponentSetResponse,
        )

    # =========================================================================
    # Teams and projects
    # =========================================================================

    async def get_team_projects(self, team_id: str) -> FigmaTeamProjectsResponse:
        return await self._get(
            f"/teams/{encode_segment(team_id)}/projects", FigmaTeamProjectsResponse
        )

    async def get_project_files(self, project_id: str) -> FigmaProjectFilesResponse:
        return await self._get(
            f"/projects/{encode_segment(project_id)}/files", FigmaProjectFilesResponse
        )

    async def get_team_components(
        self,
        team_id: str,
        *,
        after: str | None = None,
        page_size: int | None = None,
    ) -> FigmaTeamComponentsResponse:
        """Fetch one page of a team's published components."""
        return await self._get(
            f"/teams/{encode_segment(team_id)}/components",
            FigmaTeamComponentsResponse,
            {"after": after, "page_size": page_size},
        )

    async def get_team_styles(
        self,
        team_id: str,
        *,
        after: str | None = None,
        page_size: int | None = None,
    ) -> FigmaTeamStylesResponse:
        """Fetch one page of a team's published styles."""
        return await self._get(
            f"/teams/{encode_segment(team_id)}/styles",
            FigmaTeamStylesResponse,
            {"after": after, "page_size": page_size},
        )

    async def get_team_component_sets(
        self,
        team_id: str,
        *,
        after: str | None = None,
        page_size: int | None = None,
    ) -> FigmaTeamComponentSetsResponse:
        """Fetch one page of a team's published component sets."""
        return await self._get(
            f"/teams/{encode_segment(team_id)}/component_sets",
            FigmaTeamComponentSetsResponse,
            {"after": after, "page_size": page_size},
        )

    # =========================================================================
    # Users
    # =========================================================================

    async def get_me(self) -> FigmaUser:
        """Fetch the user the access token belongs to."""
        return await self._get("/me", FigmaUser)


def create_figma_client(
    settings: FigmaSettings | None = None,
    *,
    token_refresher: TokenRefresher | None = None,
    http_client: HTTPClient | None = None,
) -> FigmaClient:
    """Create a FigmaClient from environment-backed settings.

    Args:
        settings: Settings to use, defaults to get_settings()
        token_refresher: OAuth2 refresh callback
        http_client: Optional shared transport

    Raises:
        FigmaConfigError: If no access token is configured
    """
    from design_drift.config.settings import get_settings

    settings = settings or get_settings()
    return FigmaClient(
        settings.access_token,
        settings.to_client_config(),
        token_refresher=token_refresher,
        http_client=http_client,
    )
