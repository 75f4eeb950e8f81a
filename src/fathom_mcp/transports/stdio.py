"""
Process-local stdio transport.

Newline-delimited JSON-RPC: one frame per line on stdin, responses and
notifications written to stdout. Serves a single embedded client, so the
session is implicit and lives as long as stdin stays open.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, TextIO

from ..json_rpc import error_response
from ..mcp_base import ErrorCodes, MCPServer
from .base import Transport

logger = logging.getLogger(__name__)


class StdioTransport(Transport):
    kind = "stdio"

    def __init__(
        self,
        server: MCPServer,
        reader: asyncio.StreamReader | None = None,
        output: TextIO | None = None,
    ) -> None:
        super().__init__(server)
        self._reader = reader
        self._output = output or sys.stdout

    async def _connect_stdin(self) -> asyncio.StreamReader:
        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await asyncio.get_running_loop().connect_read_pipe(lambda: protocol, sys.stdin)
        return reader

    async def run(self) -> None:
        """Main loop: read a line, dispatch, write the response."""
        reader = self._reader or await self._connect_stdin()
        logger.info("Fathom MCP Server started on stdio")

        try:
            while not self.closed:
                line = await reader.readline()
                if not line:
                    break  # stdin closed

                try:
                    line_str = line.decode("utf-8").strip()
                    if not line_str:
                        continue
                    request = json.loads(line_str)
                except (UnicodeDecodeError, json.JSONDecodeError):
                    await self.send(error_response(None, ErrorCodes.PARSE_ERROR, "Invalid JSON"))
                    continue

                try:
                    response = await self.dispatch(request)
                except Exception:
                    logger.exception("Error handling stdio message")
                    request_id = request.get("id") if isinstance(request, dict) else None
                    response = error_response(request_id, ErrorCodes.INTERNAL_ERROR, "Internal server error")
                if response is not None:
                    await self.send(response)
        finally:
            await self.close()

    async def send(self, message: dict[str, Any]) -> None:
        if self.closed:
            return
        self._output.write(json.dumps(message) + "\n")
        self._output.flush()
