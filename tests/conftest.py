"""
Shared fixtures for the Fathom MCP server tests.

Provides a recording fake of ``FathomClient`` (no network), meeting record
factories, and a server wired to the fake.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from fathom_mcp.fathom_client import FathomAPIError
from fathom_mcp.fathom_types import (
    CreateWebhookResponse,
    ListMeetingsResponse,
    ListTeamMembersResponse,
    ListTeamsResponse,
    Meeting,
    MeetingFilters,
    Team,
    TeamMember,
    Webhook,
    WebhookConfig,
)
from fathom_mcp.mcp_base import MCPServer
from fathom_mcp.server import create_server

# ─── Fake Client ─────────────────────────────────────────────────────────────


class FakeFathomClient:
    """In-memory stand-in for ``FathomClient`` that records every call.

    ``transcript_errors`` maps a recording id to an exception raised by
    ``get_meeting_transcript``; ``transcript_gates`` maps a recording id to an
    event the fetch waits on before returning.
    """

    def __init__(
        self,
        meetings: list[Meeting] | None = None,
        transcripts: dict[str, str] | None = None,
        next_cursor: str | None = None,
    ) -> None:
        self.meetings = list(meetings or [])
        self.transcripts = dict(transcripts or {})
        self.next_cursor = next_cursor
        self.transcript_errors: dict[str, Exception] = {}
        self.transcript_gates: dict[str, asyncio.Event] = {}
        self.teams: list[Team] = []
        self.members: dict[str, list[TeamMember]] = {}
        self.webhooks: dict[str, Webhook] = {}

        self.list_calls: list[MeetingFilters | None] = []
        self.transcript_calls: list[str] = []
        self.cancelled_fetches: list[str] = []
        self.member_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self._webhook_seq = 0

    async def list_meetings(self, filters: MeetingFilters | None = None) -> ListMeetingsResponse:
        self.list_calls.append(filters)
        return ListMeetingsResponse(items=list(self.meetings), next_cursor=self.next_cursor)

    async def get_meeting_transcript(self, recording_id: str) -> str:
        self.transcript_calls.append(recording_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            gate = self.transcript_gates.get(recording_id)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            self.cancelled_fetches.append(recording_id)
            raise
        finally:
            self.in_flight -= 1
        if recording_id in self.transcript_errors:
            raise self.transcript_errors[recording_id]
        return self.transcripts.get(recording_id, "")

    async def list_teams(self, cursor: str | None = None) -> ListTeamsResponse:
        return ListTeamsResponse(items=list(self.teams))

    async def list_team_members(self, team_id: str, cursor: str | None = None) -> ListTeamMembersResponse:
        self.member_calls.append(team_id)
        return ListTeamMembersResponse(items=list(self.members.get(team_id, [])))

    async def create_webhook(self, config: WebhookConfig) -> CreateWebhookResponse:
        self._webhook_seq += 1
        webhook = Webhook(id=f"wh_{self._webhook_seq}", **config.model_dump())
        self.webhooks[str(webhook.id)] = webhook
        return CreateWebhookResponse(webhook=webhook, secret=f"whsec_{self._webhook_seq}")

    async def delete_webhook(self, webhook_id: str) -> None:
        if webhook_id not in self.webhooks:
            raise FathomAPIError("Webhook not found", 404)
        del self.webhooks[webhook_id]

    async def aclose(self) -> None:
        self.closed = True


# ─── Fixtures ────────────────────────────────────────────────────────────────


@pytest.fixture()
def make_meeting() -> Callable[..., Meeting]:
    """Factory for meeting records; every field can be overridden."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> Meeting:
        counter["n"] += 1
        n = counter["n"]
        fields: dict[str, Any] = {
            "title": f"Weekly sync {n}",
            "created_at": f"2025-01-{n:02d}T10:00:00Z",
            "scheduled_start_time": f"2025-01-{n:02d}T10:00:00Z",
            "share_url": f"https://fathom.video/share/{n}",
            "url": f"https://fathom.video/calls/{n}",
            "recording_id": str(1000 + n),
            "calendar_invitees": [{"name": "Ada", "email": "ada@example.com"}],
            "recorded_by": {"name": "Ada", "email": "ada@example.com"},
            "default_summary": "Routine status updates.",
            "action_items": [],
        }
        fields.update(overrides)
        return Meeting(**fields)

    return _make


@pytest.fixture()
def fake_client() -> FakeFathomClient:
    """An empty fake client; tests populate it as needed."""
    return FakeFathomClient()


@pytest.fixture()
def server(fake_client: FakeFathomClient) -> MCPServer:
    """The production tool set backed by the fake client."""
    return create_server(fake_client)  # type: ignore[arg-type]
