"""
Session/transport registry.

Maps server-generated session ids to their active transport. The mapping is
only touched from the event loop; every insert and delete is a single
synchronous step, so no lock is needed.
"""

from __future__ import annotations

import logging

from .mcp_base import MCPServer
from .transports import SSETransport, StreamableHTTPTransport, Transport

logger = logging.getLogger(__name__)


class ProtocolMismatchError(Exception):
    """A session id belongs to a transport of a different kind."""

    def __init__(self, session_id: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Session {session_id} uses the {actual} transport, not {expected}"
        )
        self.session_id = session_id
        self.expected = expected
        self.actual = actual


class SessionManager:
    """Owns the session-id → transport mapping for one process."""

    def __init__(self, server: MCPServer) -> None:
        self.server = server
        self._transports: dict[str, Transport] = {}

    def __len__(self) -> int:
        return len(self._transports)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._transports

    def get(self, session_id: str, kind: str) -> Transport | None:
        """Return the active transport for *session_id*, or None if there is none.

        Raises:
            ProtocolMismatchError: the session exists but speaks another protocol
        """
        transport = self._transports.get(session_id)
        if transport is None:
            return None
        if transport.kind != kind:
            raise ProtocolMismatchError(session_id, kind, transport.kind)
        return transport

    def register(self, transport: Transport) -> None:
        if transport.session_id is None:
            raise ValueError("Cannot register a transport without a session id")
        if transport.session_id in self._transports:
            raise ValueError(f"Session {transport.session_id} is already registered")
        self._transports[transport.session_id] = transport
        logger.info("Registered %s session %s", transport.kind, transport.session_id)

    def remove(self, transport: Transport) -> None:
        sid = transport.session_id
        if sid is not None and self._transports.get(sid) is transport:
            del self._transports[sid]
            logger.info("Transport closed for session %s, removed from sessions", sid)

    # ── Factories ────────────────────────────────────────────────────────────

    def create_streamable(self) -> StreamableHTTPTransport:
        """A new streamable transport; registered only once ``initialize`` succeeds."""
        transport = StreamableHTTPTransport(self.server, on_initialized=self.register)
        transport.on_close = self.remove
        return transport

    def create_sse(self, endpoint: str = "/messages") -> SSETransport:
        """A new legacy SSE transport, registered immediately."""
        transport = SSETransport(self.server, endpoint=endpoint)
        transport.on_close = self.remove
        self.register(transport)
        return transport

    # ── Shutdown ─────────────────────────────────────────────────────────────

    async def close_all(self) -> None:
        """Close every session; one failure does not stop the others."""
        for session_id, transport in list(self._transports.items()):
            try:
                logger.info("Closing transport for session %s", session_id)
                await transport.close()
            except Exception:
                logger.exception("Error closing transport for session %s", session_id)
            finally:
                self._transports.pop(session_id, None)
