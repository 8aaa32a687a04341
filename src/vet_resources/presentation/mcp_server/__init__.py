"""
Veteran Resources MCP Server

Usage as standalone server:
    python -m vet_resources.presentation.mcp_server

Or in mcp.json:
    {
        "servers": {
            "vet-resources": {
                "type": "stdio",
                "command": "vet-resources-mcp"
            }
        }
    }

Usage for integration:
    from vet_resources.presentation.mcp_server import create_server, register_all_tools

    server = create_server()
    server.run()
"""

from __future__ import annotations

from .server import create_server, main
from .tools import register_all_tools

__all__ = ["create_server", "main", "register_all_tools"]
