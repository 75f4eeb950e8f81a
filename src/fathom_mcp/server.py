"""
Fathom MCP Server — tool registry setup.

One ``MCPServer`` is built per process and shared by every transport.
"""

from __future__ import annotations

from .fathom_client import FathomClient
from .mcp_base import MCPServer
from .tools import build_tools

SERVER_NAME = "mcp-fathom-server"
SERVER_VERSION = "2.0.0"


def create_server(client: FathomClient) -> MCPServer:
    return MCPServer(name=SERVER_NAME, version=SERVER_VERSION, tools=build_tools(client))
