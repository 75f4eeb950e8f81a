"""Transport base class shared by the stdio, streamable HTTP and SSE transports."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar

from ..mcp_base import MCPServer, Notifier, RequestContext

logger = logging.getLogger(__name__)


class Transport(ABC):
    """
    Carries JSON-RPC frames for one session.

    Frames are dispatched one at a time in arrival order. Once closed, a
    transport drops anything it is asked to send.
    """

    kind: ClassVar[str] = ""

    def __init__(self, server: MCPServer) -> None:
        self.server = server
        self.session_id: str | None = None
        self.closed = False
        self.on_close: Callable[[Transport], None] | None = None
        self._dispatch_lock = asyncio.Lock()

    async def dispatch(self, message: Any, notify: Notifier | None = None) -> dict[str, Any] | None:
        """Hand one frame to the shared dispatcher, serialized per session."""
        async with self._dispatch_lock:
            context = RequestContext(session_id=self.session_id, notify=notify or self.send)
            return await self.server.handle_message(message, context)

    @abstractmethod
    async def send(self, message: dict[str, Any]) -> None:
        """Deliver a server-to-client frame."""

    async def _release(self) -> None:
        """Free transport resources. Subclasses override as needed."""

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self._release()
        finally:
            logger.info("%s transport closed (session=%s)", self.kind, self.session_id)
            if self.on_close is not None:
                self.on_close(self)
