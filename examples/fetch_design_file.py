"""Example script fetching a design file's library content from Figma.

This script shows how to:
- Build a client from FIGMA_* environment variables (or a .env file)
- Fetch a file, its local variables and a batch of nodes
- Handle the typed errors the client raises

Usage:
    export FIGMA_ACCESS_TOKEN=figd_...
    python examples/fetch_design_file.py <file_key> [node_id ...]
"""

from __future__ import annotations

import asyncio
import logging
import sys

from design_drift.figma import (
    FigmaAPIError,
    FigmaAuthError,
    FigmaConfigError,
    FigmaNotFoundError,
    create_figma_client,
)

logger = logging.getLogger("fetch_design_file")


async def main(file_key: str, node_ids: list[str]) -> int:
    try:
        client = create_figma_client()
    except FigmaConfigError as e:
        logger.error("Configuration error: %s (set FIGMA_ACCESS_TOKEN)", e)
        return 2

    async with client:
        try:
            figma_file = await client.get_file(file_key, depth=2)
            variables = await client.get_local_variables(file_key)
            nodes = (
                await client.get_nodes_batched(file_key, node_ids)
                if node_ids
                else None
            )
        except FigmaAuthError as e:
            logger.error("Access token rejected: %s", e)
            return 1
        except FigmaNotFoundError:
            logger.error("File %s not found", file_key)
            return 1
        except FigmaAPIError as e:
            logger.error("Figma request failed: %s", e)
            return 1

        print(f"File: {figma_file.name} (version {figma_file.version})")
        print(f"  URL:         {client.get_figma_url(file_key)}")
        print(f"  Components:  {len(figma_file.components)}")
        print(f"  Styles:      {len(figma_file.styles)}")
        print(f"  Variables:   {len(variables.meta.variables)}")
        print(f"  Collections: {len(variables.meta.variable_collections)}")

        if nodes is not None:
            print(f"\nNodes ({len(nodes.nodes)}):")
            for node_id, entry in nodes.nodes.items():
                if entry is None:
                    print(f"  {node_id}: missing")
                else:
                    print(f"  {node_id}: {entry.document.type} {entry.document.name}")

        info = client.get_rate_limit_info()
        if info is not None:
            print(f"\nRate limit: {info.remaining} requests left")

    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2:])))
