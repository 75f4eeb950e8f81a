"""
Fathom tools (7):
  list_meetings          — list meetings with filters
  search_meetings        — keyword search, optionally inside transcripts
  get_meeting_transcript — full transcript of one recording
  list_teams             — teams visible to the API key
  list_team_members      — members of one team
  create_webhook         — register a meeting-ready webhook
  delete_webhook         — remove a webhook
"""

from __future__ import annotations

from typing import Any

from ..fathom_client import FathomClient
from ..mcp_base import MCPTool
from .get_meeting_transcript import GetMeetingTranscript
from .list_meetings import ListMeetings
from .list_team_members import ListTeamMembers
from .list_teams import ListTeams
from .search_meetings import SearchMeetings
from .webhooks import CreateWebhook, DeleteWebhook

__all__ = [
    "CreateWebhook",
    "DeleteWebhook",
    "GetMeetingTranscript",
    "ListMeetings",
    "ListTeamMembers",
    "ListTeams",
    "SearchMeetings",
    "build_tools",
]


def build_tools(client: FathomClient) -> list[MCPTool[Any, Any]]:
    """Instantiate every tool against one shared client."""
    return [
        ListMeetings(client),
        SearchMeetings(client),
        GetMeetingTranscript(client),
        ListTeams(client),
        ListTeamMembers(client),
        CreateWebhook(client),
        DeleteWebhook(client),
    ]
