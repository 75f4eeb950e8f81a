"""Tests for the session registry."""

from __future__ import annotations

import pytest

from fathom_mcp.sessions import ProtocolMismatchError, SessionManager
from fathom_mcp.transports import SSETransport, StreamableHTTPTransport


@pytest.fixture()
def manager(server) -> SessionManager:
    return SessionManager(server)


async def test_sse_sessions_registered_immediately(manager) -> None:
    transport = manager.create_sse()

    assert transport.session_id in manager
    assert manager.get(transport.session_id, SSETransport.kind) is transport
    assert transport.endpoint == f"/messages?sessionId={transport.session_id}"


async def test_streamable_registered_only_after_initialize(manager) -> None:
    transport = manager.create_streamable()
    assert len(manager) == 0

    transport.session_id = "abc"
    transport._mark_initialized([{"jsonrpc": "2.0", "id": 1, "result": {}}])

    assert manager.get("abc", StreamableHTTPTransport.kind) is transport


async def test_failed_initialize_not_registered(manager) -> None:
    transport = manager.create_streamable()
    transport.session_id = "abc"
    transport._mark_initialized([{"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "x"}}])

    assert "abc" not in manager


async def test_kind_mismatch(manager) -> None:
    transport = manager.create_sse()

    with pytest.raises(ProtocolMismatchError):
        manager.get(transport.session_id, StreamableHTTPTransport.kind)


async def test_unknown_session(manager) -> None:
    assert manager.get("nope", SSETransport.kind) is None


async def test_session_ids_unique(manager) -> None:
    ids = {manager.create_sse().session_id for _ in range(50)}
    assert len(ids) == 50
    assert len(manager) == 50


async def test_close_removes_session(manager) -> None:
    transport = manager.create_sse()
    await transport.close()
    await transport.close()

    assert transport.session_id not in manager
    assert transport.closed is True


async def test_remove_ignores_stale_transport(manager, server) -> None:
    current = manager.create_sse()
    stale = SSETransport(server)
    stale.session_id = current.session_id

    manager.remove(stale)

    assert manager.get(current.session_id, SSETransport.kind) is current


async def test_duplicate_registration_rejected(manager) -> None:
    transport = manager.create_sse()
    with pytest.raises(ValueError):
        manager.register(transport)


async def test_close_all(manager) -> None:
    transports = [manager.create_sse() for _ in range(3)]

    await manager.close_all()

    assert len(manager) == 0
    assert all(t.closed for t in transports)
