"""
JSON-RPC 2.0 Message Utilities

Low-level JSON-RPC message handling shared by the dispatcher and every
transport (stdio, streamable HTTP, legacy SSE).
"""

from __future__ import annotations

from typing import Any

JSONRPC_VERSION = "2.0"


def success_response(request_id: str | int | None, result: Any) -> dict[str, Any]:
    """Create a JSON-RPC success response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(
    request_id: str | int | None,
    code: int,
    message: str,
    data: Any = None,
) -> dict[str, Any]:
    """Create a JSON-RPC error response."""
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def notification(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a JSON-RPC notification (no id, no response expected)."""
    msg: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        msg["params"] = params
    return msg


def is_valid_request(msg: Any) -> bool:
    """Validate that a parsed value is a JSON-RPC 2.0 request."""
    return (
        isinstance(msg, dict)
        and msg.get("jsonrpc") == JSONRPC_VERSION
        and isinstance(msg.get("method"), str)
        and ("id" in msg and isinstance(msg["id"], (str, int)))
    )


def is_notification(msg: Any) -> bool:
    """A request-shaped message without an id."""
    return (
        isinstance(msg, dict)
        and msg.get("jsonrpc") == JSONRPC_VERSION
        and isinstance(msg.get("method"), str)
        and "id" not in msg
    )


def is_response(msg: Any) -> bool:
    """A reply the client sent back for a server-initiated request."""
    return (
        isinstance(msg, dict)
        and msg.get("jsonrpc") == JSONRPC_VERSION
        and "method" not in msg
        and ("result" in msg or "error" in msg)
    )


def is_initialize_request(msg: Any) -> bool:
    """True for a single (non-batched) ``initialize`` request."""
    return is_valid_request(msg) and msg["method"] == "initialize"
