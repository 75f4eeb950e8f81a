"""Transports carrying MCP frames: stdio, streamable HTTP and legacy HTTP+SSE."""

from .base import Transport
from .sse import SSETransport
from .stdio import StdioTransport
from .streamable_http import SESSION_HEADER, StreamableHTTPTransport

__all__ = ["SESSION_HEADER", "SSETransport", "StdioTransport", "StreamableHTTPTransport", "Transport"]
