"""
Legacy HTTP+SSE transport (protocol version 2024-11-05).

The client opens ``GET /sse`` and receives an ``endpoint`` event naming
``/messages?sessionId=<id>``. Client frames are POSTed there and answered
with 202; responses travel back on the event stream.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator
from uuid import uuid4

from starlette.responses import JSONResponse, PlainTextResponse, Response

from ..json_rpc import error_response
from ..mcp_base import ErrorCodes, MCPServer
from .base import Transport

logger = logging.getLogger(__name__)

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"}


def sse_frame(event: str, data: str) -> str:
    """Encode one server-sent event."""
    return f"event: {event}\ndata: {data}\n\n"


class SSETransport(Transport):
    """One long-lived event stream plus a POST side channel."""

    kind = "sse"

    def __init__(self, server: MCPServer, endpoint: str = "/messages") -> None:
        super().__init__(server)
        self.session_id = uuid4().hex
        self.endpoint = f"{endpoint}?sessionId={self.session_id}"
        self._outbound: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._pending: set[asyncio.Task[None]] = set()

    async def stream(self) -> AsyncIterator[str]:
        """Yield SSE frames until the session closes or the client goes away."""
        try:
            yield sse_frame("endpoint", self.endpoint)
            while True:
                message = await self._outbound.get()
                if message is None:
                    break
                yield sse_frame("message", json.dumps(message))
        finally:
            await self.close()

    async def handle_post_message(self, body: Any) -> Response:
        """Accept one posted frame; its response goes out on the stream."""
        if self.closed:
            return PlainTextResponse("Session closed", status_code=404)
        if isinstance(body, list) or not isinstance(body, dict):
            return JSONResponse(
                error_response(None, ErrorCodes.INVALID_REQUEST, "Invalid message"),
                status_code=400,
            )

        task = asyncio.create_task(self._process(body))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return PlainTextResponse("Accepted", status_code=202)

    async def _process(self, message: dict[str, Any]) -> None:
        try:
            response = await self.dispatch(message)
        except Exception:
            logger.exception("Error handling SSE message (session=%s)", self.session_id)
            response = error_response(message.get("id"), ErrorCodes.INTERNAL_ERROR, "Internal server error")
        if response is not None:
            await self.send(response)

    async def send(self, message: dict[str, Any]) -> None:
        if self.closed:
            logger.debug("Dropping frame for closed SSE session %s", self.session_id)
            return
        self._outbound.put_nowait(message)

    async def _release(self) -> None:
        # Ends the stream generator if it is still running
        self._outbound.put_nowait(None)
