"""Chunked fetching of large node id sets.

The nodes endpoint accepts a bounded number of ids per request. These helpers
split an id list into chunks, fetch each chunk through the normal client
stack, and merge the per-chunk node maps back into one response.

A chunk that fails aborts the whole batch with that chunk's error; partial
results are never returned.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from design_drift.figma.errors import FigmaConfigError
from design_drift.figma.models import FigmaNodesResponse

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence

logger = logging.getLogger(__name__)


def chunked(items: Sequence[str], size: int) -> list[list[str]]:
    """Split items into consecutive chunks of at most size elements."""
    if size <= 0:
        raise FigmaConfigError("batch_size must be positive")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def unique_ids(ids: Iterable[str]) -> list[str]:
    """Drop duplicate ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


def merge_nodes_responses(responses: Sequence[FigmaNodesResponse]) -> FigmaNodesResponse:
    """Merge chunk responses into one, keyed by node id.

    The file name is taken from the first chunk.
    """
    merged = FigmaNodesResponse(name=responses[0].name if responses else "")
    for response in responses:
        merged.nodes.update(response.nodes)
    return merged


async def fetch_nodes_in_batches(
    ids: Iterable[str],
    batch_size: int,
    fetch_chunk: Callable[[list[str]], Awaitable[FigmaNodesResponse]],
) -> FigmaNodesResponse:
    """Fetch nodes chunk by chunk and merge the results.

    Chunks are fetched sequentially so the batch stays within the rate
    limit the executor is tracking.

    Args:
        ids: Node ids to fetch
        batch_size: Maximum ids per request
        fetch_chunk: Coroutine function fetching a single chunk

    Returns:
        Merged response containing every requested node

    Raises:
        FigmaConfigError: If batch_size is not positive
        FigmaAPIError: The error of the first chunk that failed
    """
    chunks = chunked(unique_ids(ids), batch_size)
    if not chunks:
        return FigmaNodesResponse()

    responses: list[FigmaNodesResponse] = []
    for index, chunk in enumerate(chunks, start=1):
        logger.debug("Fetching node chunk %d/%d (%d ids)", index, len(chunks), len(chunk))
        responses.append(await fetch_chunk(chunk))

    return merge_nodes_responses(responses)
