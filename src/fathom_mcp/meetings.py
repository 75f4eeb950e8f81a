"""
Meeting helpers shared by the listing and search tools.

- project_meeting   — the view of a meeting returned to the assistant
- matches_fields    — case-insensitive match over title/summary/action items
- fetch_transcripts — concurrent transcript backfill with batch-abort policy
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import BaseModel

from .fathom_client import CRITICAL_ERRORS, FathomClient
from .fathom_types import Meeting

logger = logging.getLogger(__name__)

FOUND_IN_TRANSCRIPT = "Found in transcript"
FOUND_IN_FIELDS = "Found in title/summary"

# Upper bound on transcript requests in flight at once
MAX_CONCURRENT_FETCHES = 10


class MeetingView(BaseModel):
    """Projected meeting returned by list_meetings and search_meetings."""

    title: str | None = None
    date: str | None = None
    url: str | None = None
    recording_id: str | int | None = None
    attendees: list[Any] | None = None
    recorded_by: Any = None
    summary: Any = None
    action_items: list[Any] | None = None
    transcript: str | None = None
    relevance: str | None = None


def project_meeting(
    meeting: Meeting,
    transcript: str | None = None,
    relevance: str | None = None,
) -> MeetingView:
    return MeetingView(
        title=meeting.title or meeting.meeting_title,
        date=meeting.scheduled_start_time or meeting.created_at,
        url=meeting.share_url or meeting.url,
        recording_id=meeting.recording_id,
        attendees=meeting.calendar_invitees,
        recorded_by=meeting.recorded_by,
        summary=meeting.default_summary,
        action_items=meeting.action_items,
        transcript=transcript,
        relevance=relevance,
    )


def _contains(value: Any, term: str) -> bool:
    return isinstance(value, str) and term in value.lower()


def matches_fields(meeting: Meeting, term: str) -> bool:
    """True if *term* (already lowercased) occurs in a title, the summary or an action item."""
    if _contains(meeting.title, term) or _contains(meeting.meeting_title, term):
        return True
    if _contains(meeting.default_summary, term):
        return True
    return any(_contains(item, term) for item in meeting.action_items or [])


async def fetch_transcripts(
    client: FathomClient,
    meetings: list[Meeting],
    concurrency: int = MAX_CONCURRENT_FETCHES,
) -> list[str]:
    """
    Fetch transcripts for *meetings* concurrently, in input order.

    At most *concurrency* requests are in flight at a time.
    Every meeting must carry a ``recording_id``. An auth or rate-limit
    failure cancels the remaining fetches and propagates; any other failure
    leaves that meeting with an empty transcript.
    """
    limiter = asyncio.Semaphore(concurrency)

    async def _fetch(meeting: Meeting) -> str:
        try:
            async with limiter:
                return await client.get_meeting_transcript(str(meeting.recording_id))
        except CRITICAL_ERRORS:
            raise
        except Exception as exc:
            logger.warning("Transcript fetch failed for recording %s: %s", meeting.recording_id, exc)
            return ""

    tasks = [asyncio.ensure_future(_fetch(meeting)) for meeting in meetings]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        # Drain so stragglers' outcomes are retrieved
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
