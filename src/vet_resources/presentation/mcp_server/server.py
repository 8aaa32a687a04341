"""
Veteran Resources MCP Server

A Model Context Protocol server over the veteran resource directory.

Features:
- Filtered directory search with pagination
- Symptom-based recommendations with provider diversity
- Single-resource lookup and category overview

Architecture:
- instructions.py: SERVER_INSTRUCTIONS for AI agents
- tools/: tool implementations
- container: DI container (dependency-injector) for service lifecycle
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from vet_resources.config import Settings
from vet_resources.container import ApplicationContainer

from .instructions import SERVER_INSTRUCTIONS
from .tools import register_all_tools

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

logger = logging.getLogger(__name__)

SERVER_NAME = "vet-resources"

def _make_lifespan(
    container: ApplicationContainer,
) -> Callable[[FastMCP[Any]], AbstractAsyncContextManager[ApplicationContainer]]:
    """Create a FastMCP lifespan handler bound to *container*."""

    @asynccontextmanager
    async def _lifespan(server: FastMCP[Any]) -> AsyncIterator[ApplicationContainer]:
        logger.info("Lifecycle: startup")
        try:
            yield container
        finally:
            remote = container.remote_client()
            if remote is not None:
                await remote.close()
            logger.info("Lifecycle: shutdown")

    return _lifespan


def create_server(
    settings: Settings | None = None,
    container: ApplicationContainer | None = None,
    name: str = SERVER_NAME,
) -> FastMCP:
    """
    Create and configure the MCP server.

    Args:
        settings: Runtime settings; ``Settings.from_env()`` when omitted.
            Ignored if ``container`` is given.
        container: Pre-built container (tests override providers on it).
        name: Server name.

    Returns:
        Configured FastMCP server instance.
    """
    logger.info("Initializing Veteran Resources MCP Server...")

    if container is None:
        container = ApplicationContainer()
        container.config.from_dict((settings or Settings.from_env()).to_container_config())

    mcp = FastMCP(
        name,
        instructions=SERVER_INSTRUCTIONS,
        lifespan=_make_lifespan(container),
    )

    register_all_tools(
        mcp,
        search_service=container.search_service(),
        recommendation_service=container.recommendation_service(),
    )

    logger.info("Veteran Resources MCP Server initialized successfully")
    return mcp


def main():
    """Run the MCP server over stdio."""
    settings = Settings.from_env()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    server = create_server(settings)
    server.run()


if __name__ == "__main__":
    main()
