"""MCP server exposing the Fathom meeting-recording API."""

from .fathom_client import FathomClient
from .mcp_base import MCPServer
from .server import SERVER_NAME, SERVER_VERSION, create_server

__version__ = SERVER_VERSION

__all__ = ["FathomClient", "MCPServer", "SERVER_NAME", "SERVER_VERSION", "create_server", "__version__"]
