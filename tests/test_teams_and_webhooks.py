"""Tests for the team and webhook tools."""

from __future__ import annotations

import json

from fathom_mcp.fathom_types import Team, TeamMember
from fathom_mcp.tools.webhooks import SECRET_NOTE


async def test_list_teams(server, fake_client) -> None:
    fake_client.teams = [Team(id="t1", name="Sales"), Team(id="t2", name="Eng")]

    result = await server.call_tool("list_teams", {})

    assert result.success is True
    assert result.data.total_teams == 2
    assert [team.name for team in result.data.teams] == ["Sales", "Eng"]
    assert result.data.has_more is False


async def test_list_team_members(server, fake_client) -> None:
    fake_client.members = {"t1": [TeamMember(email="ada@example.com", name="Ada")]}

    result = await server.call_tool("list_team_members", {"team_id": "t1"})

    assert fake_client.member_calls == ["t1"]
    assert result.data.team_id == "t1"
    assert result.data.total_members == 1
    assert result.data.members[0].email == "ada@example.com"


async def test_team_members_requires_team_id(server, fake_client) -> None:
    result = await server.call_tool("list_team_members", {})

    assert result.success is False
    assert fake_client.member_calls == []


async def test_create_webhook_returns_secret_once(server, fake_client) -> None:
    result = await server.call_tool("create_webhook", {"url": "https://hooks.example.com/in"})

    assert result.success is True
    payload = json.loads(result.to_content()["content"][0]["text"])
    assert payload["secret"] == "whsec_1"
    assert payload["note"] == SECRET_NOTE
    assert payload["webhook"]["url"] == "https://hooks.example.com/in"
    assert payload["webhook"]["include_transcript"] is False
    assert payload["webhook"]["include_summary"] is True


async def test_webhook_round_trip(server, fake_client) -> None:
    created = await server.call_tool(
        "create_webhook", {"url": "https://hooks.example.com/in", "include_transcript": True}
    )
    webhook_id = str(created.data.webhook.id)

    deleted = await server.call_tool("delete_webhook", {"webhook_id": webhook_id})
    assert deleted.success is True
    assert deleted.data.webhook_id == webhook_id
    assert deleted.data.message == "Webhook deleted successfully"

    again = await server.call_tool("delete_webhook", {"webhook_id": webhook_id})
    assert again.success is False
    assert again.error == "Fathom API error: Webhook not found"
