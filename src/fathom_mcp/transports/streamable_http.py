"""
Streamable HTTP transport (protocol version 2025-03-26).

All traffic for a session goes through one endpoint:
  POST   — client frames; answered as JSON, or as an SSE stream when the
           client accepts ``text/event-stream``
  GET    — standalone SSE stream for server-initiated frames
  DELETE — terminate the session

The session id is generated when the ``initialize`` request is handled and
returned in the ``Mcp-Session-Id`` header.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Callable
from uuid import uuid4

from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse

from ..json_rpc import error_response, is_initialize_request, is_valid_request
from ..mcp_base import ErrorCodes, MCPServer
from .base import Transport
from .sse import SSE_HEADERS, sse_frame

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"
ALLOWED_METHODS = ("GET", "POST", "DELETE")


def _error(status_code: int, code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(error_response(None, code, message), status_code=status_code, headers=headers)


class StreamableHTTPTransport(Transport):
    """Stateful request/response transport with optional server push."""

    kind = "streamable-http"

    def __init__(
        self,
        server: MCPServer,
        on_initialized: Callable[[StreamableHTTPTransport], None] | None = None,
    ) -> None:
        super().__init__(server)
        self.initialized = False
        self.on_initialized = on_initialized
        self._push_queue: asyncio.Queue[dict[str, Any] | None] | None = None
        self._pending: set[asyncio.Task[None]] = set()

    # ── Entry point ──────────────────────────────────────────────────────────

    async def handle_request(self, request: Request, body: Any = None) -> Response:
        """Handle one HTTP request for this session. *body* is the decoded POST payload."""
        if self.closed:
            return _error(404, ErrorCodes.SERVER_ERROR, "Session not found")
        if request.method == "POST":
            return await self._handle_post(request, body)
        if request.method == "GET":
            return self._handle_get(request)
        if request.method == "DELETE":
            await self.close()
            return Response(status_code=200)
        return _error(
            405,
            ErrorCodes.SERVER_ERROR,
            "Method not allowed.",
            headers={"Allow": ", ".join(ALLOWED_METHODS)},
        )

    # ── POST ─────────────────────────────────────────────────────────────────

    async def _handle_post(self, request: Request, body: Any) -> Response:
        messages = body if isinstance(body, list) else [body]
        if not messages:
            return _error(400, ErrorCodes.INVALID_REQUEST, "Invalid Request: empty batch")

        initializing = any(is_initialize_request(m) for m in messages)
        if initializing:
            if self.initialized:
                return _error(400, ErrorCodes.INVALID_REQUEST, "Invalid Request: Server already initialized")
            if len(messages) > 1:
                return _error(
                    400, ErrorCodes.INVALID_REQUEST, "Invalid Request: Only one initialization request is allowed"
                )
            self.session_id = uuid4().hex
        elif not self.initialized:
            return _error(400, ErrorCodes.SERVER_ERROR, "Bad Request: Server not initialized")

        has_requests = any(is_valid_request(m) for m in messages)
        if not has_requests:
            for message in messages:
                await self.dispatch(message)
            return Response(status_code=202, headers=self._session_headers())

        accept = request.headers.get("accept", "")
        if "text/event-stream" in accept:
            return self._stream_responses(messages, initializing)

        responses = []
        for message in messages:
            response = await self.dispatch(message)
            if response is not None:
                responses.append(response)
        if initializing:
            self._mark_initialized(responses)

        payload: Any = responses if isinstance(body, list) else responses[0]
        return JSONResponse(payload, headers=self._session_headers())

    def _stream_responses(self, messages: list[Any], initializing: bool) -> StreamingResponse:
        """Answer a POST as an SSE stream carrying related notifications, then the responses."""
        queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

        async def _notify(frame: dict[str, Any]) -> None:
            queue.put_nowait(frame)

        async def _run() -> None:
            responses = []
            try:
                for message in messages:
                    response = await self.dispatch(message, notify=_notify)
                    if response is not None:
                        responses.append(response)
                        queue.put_nowait(response)
                if initializing:
                    self._mark_initialized(responses)
            except Exception:
                logger.exception("Error handling streamed request (session=%s)", self.session_id)
                queue.put_nowait(error_response(None, ErrorCodes.INTERNAL_ERROR, "Internal server error"))
            finally:
                queue.put_nowait(None)

        async def _frames() -> AsyncIterator[str]:
            worker = asyncio.create_task(_run())
            self._pending.add(worker)
            worker.add_done_callback(self._pending.discard)
            try:
                while True:
                    frame = await queue.get()
                    if frame is None:
                        break
                    yield sse_frame("message", json.dumps(frame))
            finally:
                # A disconnected client does not cancel the dispatch; its result is dropped
                if not worker.done():
                    logger.debug("Client left before response (session=%s)", self.session_id)

        return StreamingResponse(
            _frames(),
            media_type="text/event-stream",
            headers={**SSE_HEADERS, **self._session_headers()},
        )

    def _mark_initialized(self, responses: list[dict[str, Any]]) -> None:
        if any("result" in r for r in responses):
            self.initialized = True
            logger.info("StreamableHTTP session initialized with ID: %s", self.session_id)
            if self.on_initialized is not None:
                self.on_initialized(self)

    # ── GET ──────────────────────────────────────────────────────────────────

    def _handle_get(self, request: Request) -> Response:
        if "text/event-stream" not in request.headers.get("accept", ""):
            return _error(406, ErrorCodes.SERVER_ERROR, "Not Acceptable: Client must accept text/event-stream")
        if not self.initialized:
            return _error(400, ErrorCodes.SERVER_ERROR, "Bad Request: Server not initialized")
        if self._push_queue is not None:
            return _error(409, ErrorCodes.SERVER_ERROR, "Conflict: Only one SSE stream is allowed per session")

        queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._push_queue = queue

        async def _frames() -> AsyncIterator[str]:
            try:
                while True:
                    frame = await queue.get()
                    if frame is None:
                        break
                    yield sse_frame("message", json.dumps(frame))
            finally:
                if self._push_queue is queue:
                    self._push_queue = None

        return StreamingResponse(
            _frames(),
            media_type="text/event-stream",
            headers={**SSE_HEADERS, **self._session_headers()},
        )

    # ── Push / teardown ──────────────────────────────────────────────────────

    async def send(self, message: dict[str, Any]) -> None:
        """Push a server-initiated frame on the standalone stream, if one is open."""
        if self.closed or self._push_queue is None:
            logger.debug("No open stream for session %s; dropping frame", self.session_id)
            return
        self._push_queue.put_nowait(message)

    async def _release(self) -> None:
        if self._push_queue is not None:
            self._push_queue.put_nowait(None)
            self._push_queue = None

    def _session_headers(self) -> dict[str, str]:
        return {SESSION_HEADER: self.session_id} if self.session_id else {}
