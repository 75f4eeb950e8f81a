"""
Pydantic models for the Fathom API contract.

Upstream records keep unknown fields (``extra="allow"``) so new API
attributes pass through to the assistant untouched. Request-side models
(filters, webhook config) are what the client serializes.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MeetingType = Literal["all", "internal", "external"]


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="allow")


# ─── Meetings ────────────────────────────────────────────────────────────────


class Meeting(_Upstream):
    """A meeting record as returned by ``GET /meetings``."""

    title: str | None = None
    meeting_title: str | None = None
    url: str | None = None
    share_url: str | None = None
    created_at: str | None = None
    scheduled_start_time: str | None = None
    scheduled_end_time: str | None = None
    recording_start_time: str | None = None
    recording_end_time: str | None = None
    meeting_type: str | None = None
    transcript_language: str | None = None
    calendar_invitees: list[Any] | None = None
    recorded_by: Any = None
    transcript: Any = None
    default_summary: Any = None
    action_items: list[Any] | None = None
    crm_matches: Any = None
    recording_id: str | int | None = None


class MeetingFilters(BaseModel):
    """Filters accepted by ``FathomClient.list_meetings``."""

    calendar_invitees: list[str] | None = None
    calendar_invitees_domains: list[str] | None = None
    created_after: str | None = None
    created_before: str | None = None
    cursor: str | None = None
    include_transcript: bool = False
    meeting_type: MeetingType | None = None
    recorded_by: list[str] | None = None
    teams: list[str] | None = None


class ListMeetingsResponse(_Upstream):
    items: list[Meeting] = Field(default_factory=list)
    limit: int | None = None
    next_cursor: str | None = None


# ─── Transcripts ─────────────────────────────────────────────────────────────


class Speaker(_Upstream):
    display_name: str | None = None
    matched_calendar_invitee_email: str | None = None


class TranscriptSegment(_Upstream):
    """A single transcript utterance."""

    speaker: Speaker | None = None
    text: str = ""
    timestamp: str = ""

    def render(self) -> str:
        name = (self.speaker.display_name if self.speaker else None) or "Unknown"
        return f"[{self.timestamp}] {name}: {self.text}"


# ─── Teams ───────────────────────────────────────────────────────────────────


class Team(_Upstream):
    id: str | int | None = None
    name: str | None = None
    created_at: str | None = None
    member_count: int | None = None


class ListTeamsResponse(_Upstream):
    items: list[Team] = Field(default_factory=list)
    next_cursor: str | None = None


class TeamMember(_Upstream):
    id: str | int | None = None
    email: str | None = None
    name: str | None = None
    role: str | None = None
    joined_at: str | None = None


class ListTeamMembersResponse(_Upstream):
    items: list[TeamMember] = Field(default_factory=list)
    next_cursor: str | None = None


# ─── Webhooks ────────────────────────────────────────────────────────────────


class WebhookConfig(BaseModel):
    url: str
    include_transcript: bool = False
    include_summary: bool = True
    include_action_items: bool = True


class Webhook(_Upstream):
    id: str | int | None = None
    url: str | None = None
    created_at: str | None = None
    include_transcript: bool | None = None
    include_summary: bool | None = None
    include_action_items: bool | None = None


class CreateWebhookResponse(BaseModel):
    webhook: Webhook
    secret: str
