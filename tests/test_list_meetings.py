"""Tests for the list_meetings tool."""

from __future__ import annotations

import pytest

from fathom_mcp.fathom_client import FathomAuthError
from fathom_mcp.meetings import MAX_CONCURRENT_FETCHES
from fathom_mcp.tools.list_meetings import ListMeetings


@pytest.fixture()
def tool(fake_client) -> ListMeetings:
    return ListMeetings(fake_client)


def _params(tool: ListMeetings, **kwargs):
    return tool.get_params_model()(**kwargs)


async def test_projection_fields(tool, fake_client, make_meeting) -> None:
    fake_client.meetings = [
        make_meeting(
            title=None,
            meeting_title="Quarterly planning",
            scheduled_start_time=None,
            created_at="2025-02-01T09:00:00Z",
            share_url=None,
            url="https://fathom.video/calls/9",
            action_items=["Draft the plan"],
        )
    ]

    result = await tool.execute(_params(tool))

    view = result.data.meetings[0]
    assert view.title == "Quarterly planning"
    assert view.date == "2025-02-01T09:00:00Z"
    assert view.url == "https://fathom.video/calls/9"
    assert view.action_items == ["Draft the plan"]
    assert view.transcript is None


async def test_limit_applied_after_fetch(tool, fake_client, make_meeting) -> None:
    fake_client.meetings = [make_meeting() for _ in range(5)]
    fake_client.next_cursor = "next"

    result = await tool.execute(_params(tool, limit=2))

    assert result.data.total_found == 5
    assert result.data.showing == 2
    assert len(result.data.meetings) == 2
    assert result.data.has_more is True


async def test_filters_forwarded(tool, fake_client) -> None:
    await tool.execute(
        _params(
            tool,
            recorded_by=["ada@example.com"],
            teams=["Sales"],
            created_before="2025-02-01T00:00:00Z",
            meeting_type="internal",
        )
    )

    (filters,) = fake_client.list_calls
    assert filters.recorded_by == ["ada@example.com"]
    assert filters.teams == ["Sales"]
    assert filters.created_before == "2025-02-01T00:00:00Z"
    assert filters.meeting_type == "internal"


async def test_no_transcript_fetch_by_default(tool, fake_client, make_meeting) -> None:
    fake_client.meetings = [make_meeting() for _ in range(3)]

    await tool.execute(_params(tool))

    assert fake_client.transcript_calls == []


async def test_transcripts_backfilled_for_recorded_meetings(tool, fake_client, make_meeting) -> None:
    recorded = make_meeting()
    unrecorded = make_meeting(recording_id=None, transcript="inline transcript")
    fake_client.meetings = [recorded, unrecorded]
    fake_client.transcripts[str(recorded.recording_id)] = "[00:00:01] Ada: hi"

    result = await tool.execute(_params(tool, include_transcript=True))

    assert fake_client.transcript_calls == [str(recorded.recording_id)]
    assert [m.transcript for m in result.data.meetings] == ["[00:00:01] Ada: hi", "inline transcript"]


async def test_auth_failure_during_backfill_propagates(tool, fake_client, make_meeting) -> None:
    meeting = make_meeting()
    fake_client.meetings = [meeting]
    fake_client.transcript_errors[str(meeting.recording_id)] = FathomAuthError()

    with pytest.raises(FathomAuthError):
        await tool.execute(_params(tool, include_transcript=True))


async def test_backfill_concurrency_is_bounded(tool, fake_client, make_meeting) -> None:
    fake_client.meetings = [make_meeting() for _ in range(25)]

    result = await tool.execute(_params(tool, include_transcript=True))

    assert len(fake_client.transcript_calls) == 25
    assert fake_client.max_in_flight == MAX_CONCURRENT_FETCHES
    assert result.data.showing == 25
