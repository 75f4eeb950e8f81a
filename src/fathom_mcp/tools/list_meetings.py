"""
list_meetings — List Fathom meetings with optional filters.

The ``limit`` is applied after the upstream page is fetched. When
transcripts are requested they are backfilled per meeting by recording id.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from ..fathom_types import MeetingFilters, MeetingType
from ..mcp_base import MCPResult, ToolParams
from ..meetings import MeetingView, fetch_transcripts, project_meeting
from ..validation import assert_iso8601
from .base import FathomTool

logger = logging.getLogger(__name__)

# ─── Params / Result Models ──────────────────────────────────────────────────


class Params(ToolParams):
    """Parameters for list_meetings."""

    calendar_invitees: list[str] | None = Field(
        default=None, description="Filter by attendee email addresses"
    )
    calendar_invitees_domains: list[str] | None = Field(
        default=None, description="Filter by company domains"
    )
    created_after: str | None = Field(
        default=None, description="Filter meetings created after this date (ISO 8601)"
    )
    created_before: str | None = Field(
        default=None, description="Filter meetings created before this date (ISO 8601)"
    )
    include_transcript: bool = Field(default=False, description="Include meeting transcripts")
    meeting_type: MeetingType = Field(default="all", description="Filter by meeting type")
    recorded_by: list[str] | None = Field(
        default=None, description="Filter by meeting owner email addresses"
    )
    teams: list[str] | None = Field(default=None, description="Filter by team names")
    limit: int = Field(default=50, ge=1, description="Maximum number of meetings to return")

    @field_validator("created_after", "created_before")
    @classmethod
    def _iso_dates(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None:
            return value
        return assert_iso8601(value, info.field_name)


class Result(BaseModel):
    """Return value for list_meetings."""

    total_found: int
    showing: int
    meetings: list[MeetingView]
    has_more: bool


# ─── Tool Implementation ─────────────────────────────────────────────────────


class ListMeetings(FathomTool[Params, Result]):
    """List meetings, optionally with their transcripts."""

    name = "list_meetings"
    description = (
        "List Fathom meetings with optional filters. Returns meeting titles, "
        "summaries, dates, and participants."
    )

    async def execute(self, params: Params) -> MCPResult[Result]:
        filters = MeetingFilters(
            **params.model_dump(exclude={"limit"}, exclude_none=True)
        )
        logger.info("[list_meetings] Fetching meetings with filters: %s", filters.model_dump(exclude_none=True))
        response = await self.client.list_meetings(filters)
        logger.info("[list_meetings] Got %d meetings", len(response.items))

        shown = response.items[: params.limit]

        if params.include_transcript:
            with_recording = [m for m in shown if m.recording_id is not None]
            fetched = await fetch_transcripts(self.client, with_recording)
            by_meeting = {id(m): text for m, text in zip(with_recording, fetched)}
            views = [
                project_meeting(
                    m,
                    transcript=by_meeting.get(
                        id(m), m.transcript if isinstance(m.transcript, str) else None
                    ),
                )
                for m in shown
            ]
        else:
            views = [project_meeting(m) for m in shown]

        return MCPResult(
            success=True,
            data=Result(
                total_found=len(response.items),
                showing=len(shown),
                meetings=views,
                has_more=bool(response.next_cursor),
            ),
        )
