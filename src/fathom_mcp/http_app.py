"""
HTTP application: both MCP transports and a health check on one listener.

Endpoints:
1. /mcp       — streamable HTTP (2025-03-26); GET, POST, DELETE
2. /sse       — legacy event stream (2024-11-05); GET
   /messages  — legacy side channel; POST ?sessionId=<id>
3. /health    — static service status
"""

from __future__ import annotations

import json
import logging
import socket
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from .config import Settings
from .fathom_client import FathomClient
from .json_rpc import error_response, is_initialize_request
from .mcp_base import ErrorCodes, MCPServer
from .server import SERVER_NAME, create_server
from .sessions import ProtocolMismatchError, SessionManager
from .transports import SESSION_HEADER, SSETransport, StreamableHTTPTransport
from .transports.sse import SSE_HEADERS

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/messages"
MISMATCH_MESSAGE = "Bad Request: Session exists but uses a different transport protocol"
NO_SESSION_MESSAGE = "Bad Request: No valid session ID provided or not an initialize request"


def _bad_request(message: str, code: int = ErrorCodes.SERVER_ERROR) -> JSONResponse:
    return JSONResponse(error_response(None, code, message), status_code=400)


def _internal_error() -> JSONResponse:
    return JSONResponse(
        error_response(None, ErrorCodes.INTERNAL_ERROR, "Internal server error"),
        status_code=500,
    )


async def _read_json(request: Request) -> Any:
    """Decode the request body; raises ValueError on malformed JSON."""
    raw = await request.body()
    return json.loads(raw)


class MCPHTTPServer(uvicorn.Server):
    """
    Uvicorn server that closes every MCP session before draining connections.

    Open /sse and GET /mcp streams only end when their session closes, and
    uvicorn waits on them before the lifespan shutdown runs.
    """

    def __init__(self, config: uvicorn.Config, manager: SessionManager) -> None:
        super().__init__(config)
        self.manager = manager

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        logger.info("Closing %d session(s) before shutdown", len(self.manager))
        await self.manager.close_all()
        await super().shutdown(sockets=sockets)


def create_app(
    settings: Settings | None = None,
    client: FathomClient | None = None,
    server: MCPServer | None = None,
    manager: SessionManager | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Either *settings* or a ready *client* must be given; tests inject a
    client (and optionally the server and session manager) directly.
    """
    if client is None:
        if settings is None:
            raise ValueError("create_app needs settings or a client")
        client = FathomClient(settings.api_key, base_url=settings.base_url, timeout=settings.timeout)
    server = server or create_server(client)
    manager = manager or SessionManager(server)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Close every session, then the upstream client, on shutdown."""
        try:
            yield
        finally:
            logger.info("Shutting down server...")
            await manager.close_all()
            aclose = getattr(client, "aclose", None)
            if aclose is not None:
                await aclose()
            logger.info("Server shutdown complete")

    app = FastAPI(title=SERVER_NAME, lifespan=lifespan)
    app.state.client = client
    app.state.mcp_server = server
    app.state.sessions = manager

    # Browser-based clients need to read the session header
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": SERVER_NAME}

    # ── Streamable HTTP ──────────────────────────────────────────────────────

    @app.api_route("/mcp", methods=["GET", "POST", "DELETE", "PUT", "PATCH", "HEAD", "OPTIONS"])
    async def mcp_endpoint(request: Request) -> Response:
        logger.debug("Received %s request to /mcp", request.method)
        try:
            body: Any = None
            if request.method == "POST":
                try:
                    body = await _read_json(request)
                except ValueError:
                    return _bad_request("Parse error: Invalid JSON", ErrorCodes.PARSE_ERROR)

            session_id = request.headers.get(SESSION_HEADER)
            transport = None
            if session_id:
                try:
                    transport = manager.get(session_id, StreamableHTTPTransport.kind)
                except ProtocolMismatchError:
                    return _bad_request(MISMATCH_MESSAGE)

            if transport is None:
                if not session_id and request.method == "POST" and is_initialize_request(body):
                    transport = manager.create_streamable()
                else:
                    return _bad_request(NO_SESSION_MESSAGE)

            return await transport.handle_request(request, body)
        except Exception:
            logger.exception("Error handling MCP request")
            return _internal_error()

    # ── Legacy HTTP+SSE ──────────────────────────────────────────────────────

    @app.get("/sse")
    async def sse_endpoint() -> StreamingResponse:
        logger.info("Received GET request to /sse (deprecated SSE transport)")
        transport = manager.create_sse(MESSAGES_PATH)
        return StreamingResponse(transport.stream(), media_type="text/event-stream", headers=SSE_HEADERS)

    @app.post(MESSAGES_PATH)
    async def messages_endpoint(request: Request) -> Response:
        try:
            session_id = request.query_params.get("sessionId", "")
            try:
                transport = manager.get(session_id, SSETransport.kind) if session_id else None
            except ProtocolMismatchError:
                return _bad_request(MISMATCH_MESSAGE)
            if transport is None:
                return PlainTextResponse("No transport found for sessionId", status_code=400)

            try:
                body = await _read_json(request)
            except ValueError:
                return _bad_request("Parse error: Invalid JSON", ErrorCodes.PARSE_ERROR)
            return await transport.handle_post_message(body)
        except Exception:
            logger.exception("Error handling SSE message")
            return _internal_error()

    return app
