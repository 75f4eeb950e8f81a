"""
search_meetings — Keyword search over the last 30 days of meetings.

Without transcripts the whole 30-day listing is matched against titles,
summaries and action items. With transcripts (the default) only the 10
most recently listed meetings that have a recording id are considered;
their transcripts are fetched concurrently and searched as well.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field, field_validator

from ..fathom_types import MeetingFilters
from ..mcp_base import MCPResult, ToolParams
from ..meetings import (
    FOUND_IN_FIELDS,
    FOUND_IN_TRANSCRIPT,
    MeetingView,
    fetch_transcripts,
    matches_fields,
    project_meeting,
)
from ..validation import assert_not_blank
from .base import FathomTool

logger = logging.getLogger(__name__)

SEARCH_WINDOW = timedelta(days=30)
MAX_TRANSCRIPT_FETCHES = 10

# ─── Params / Result Models ──────────────────────────────────────────────────


class Params(ToolParams):
    """Parameters for search_meetings."""

    search_term: str = Field(
        description="Search term to find in meeting titles, summaries, action items, or transcripts"
    )
    include_transcript: bool = Field(
        default=True,
        description=(
            "Search within full meeting transcripts (default: true). When enabled, "
            f"fetches and searches transcripts of up to {MAX_TRANSCRIPT_FETCHES} recent meetings."
        ),
    )

    @field_validator("search_term")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        return assert_not_blank(value, "search_term")


class Result(BaseModel):
    """Return value for search_meetings."""

    search_term: str
    total_found: int
    meetings: list[MeetingView]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def window_start(now: datetime | None = None) -> str:
    """ISO-8601 (UTC, millisecond precision) start of the search window."""
    start = (now or _utcnow()) - SEARCH_WINDOW
    return start.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ─── Tool Implementation ─────────────────────────────────────────────────────


class SearchMeetings(FathomTool[Params, Result]):
    """Search recent meetings by keyword, optionally inside transcripts."""

    name = "search_meetings"
    description = (
        "Search for meetings containing keywords in titles, summaries, action items, "
        "AND full transcripts (default). Searches the last 30 days. By default, fetches "
        f"and searches transcripts of up to {MAX_TRANSCRIPT_FETCHES} recent meetings. Best "
        "for queries like 'discussed pricing' where the topic may not appear in "
        "titles or summaries."
    )

    async def execute(self, params: Params) -> MCPResult[Result]:
        logger.info(
            '[search_meetings] Searching for: "%s" (transcript=%s)',
            params.search_term,
            params.include_transcript,
        )
        response = await self.client.list_meetings(
            MeetingFilters(created_after=window_start(), include_transcript=False)
        )
        term = params.search_term.lower()

        if params.include_transcript:
            candidates = [m for m in response.items if m.recording_id is not None]
            candidates = candidates[:MAX_TRANSCRIPT_FETCHES]
            transcripts = await fetch_transcripts(self.client, candidates)

            matched: list[MeetingView] = []
            for meeting, transcript in zip(candidates, transcripts):
                in_transcript = term in transcript.lower()
                if in_transcript or matches_fields(meeting, term):
                    matched.append(
                        project_meeting(
                            meeting,
                            transcript=transcript,
                            relevance=FOUND_IN_TRANSCRIPT if in_transcript else FOUND_IN_FIELDS,
                        )
                    )
        else:
            matched = [project_meeting(m) for m in response.items if matches_fields(m, term)]

        logger.info("[search_meetings] Found %d matching meetings", len(matched))
        return MCPResult(
            success=True,
            data=Result(search_term=params.search_term, total_found=len(matched), meetings=matched),
        )
