"""Common base for tools backed by the Fathom client."""

from __future__ import annotations

from typing import Generic

from ..fathom_client import FathomClient
from ..mcp_base import MCPTool, TParams, TResult


class FathomTool(MCPTool[TParams, TResult], Generic[TParams, TResult]):
    """An MCP tool that calls the shared ``FathomClient``."""

    def __init__(self, client: FathomClient) -> None:
        self.client = client
