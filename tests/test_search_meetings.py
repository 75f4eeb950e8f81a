"""Tests for the search_meetings tool."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from fathom_mcp.fathom_client import FathomAuthError, FathomRateLimitError, FathomUnknownError
from fathom_mcp.meetings import FOUND_IN_FIELDS, FOUND_IN_TRANSCRIPT
from fathom_mcp.tools.search_meetings import MAX_TRANSCRIPT_FETCHES, SearchMeetings, window_start


@pytest.fixture()
def tool(fake_client) -> SearchMeetings:
    return SearchMeetings(fake_client)


def _params(tool: SearchMeetings, **kwargs):
    return tool.get_params_model()(**kwargs)


def test_window_start_is_thirty_days_back() -> None:
    now = datetime(2025, 3, 2, 12, 0, tzinfo=timezone.utc)
    assert window_start(now) == "2025-01-31T12:00:00.000Z"


async def test_pricing_example_matches_title_only(tool, fake_client, make_meeting) -> None:
    """One "Pricing Review" among ten meetings gives exactly one match."""
    fake_client.meetings = [make_meeting(title="Pricing Review")] + [make_meeting() for _ in range(9)]

    result = await tool.execute(_params(tool, search_term="pricing", include_transcript=False))

    assert result.success is True
    assert result.data.total_found == 1
    assert result.data.meetings[0].title == "Pricing Review"
    assert result.data.meetings[0].relevance is None
    assert fake_client.transcript_calls == []


async def test_search_uses_thirty_day_window(tool, fake_client) -> None:
    await tool.execute(_params(tool, search_term="anything", include_transcript=False))

    (filters,) = fake_client.list_calls
    assert filters.created_after is not None
    assert filters.created_after.endswith("Z")
    assert filters.include_transcript is False


async def test_field_match_is_case_insensitive(tool, fake_client, make_meeting) -> None:
    fake_client.meetings = [
        make_meeting(title=None, meeting_title="BUDGET planning"),
        make_meeting(default_summary="We reviewed the Budget."),
        make_meeting(action_items=["Send budget to finance", {"text": "not a string"}]),
        make_meeting(),
    ]

    result = await tool.execute(_params(tool, search_term="Budget", include_transcript=False))

    assert result.data.total_found == 3
    assert result.data.meetings[0].title == "BUDGET planning"


async def test_transcript_fetches_capped_and_require_recording(tool, fake_client, make_meeting) -> None:
    no_recording = [make_meeting(recording_id=None) for _ in range(2)]
    recorded = [make_meeting() for _ in range(15)]
    fake_client.meetings = no_recording + recorded

    await tool.execute(_params(tool, search_term="roadmap"))

    assert len(fake_client.transcript_calls) == MAX_TRANSCRIPT_FETCHES
    expected = {str(m.recording_id) for m in recorded[:MAX_TRANSCRIPT_FETCHES]}
    assert set(fake_client.transcript_calls) == expected


async def test_relevance_labels(tool, fake_client, make_meeting) -> None:
    in_transcript = make_meeting(title="Sales sync")
    in_title = make_meeting(title="Roadmap review")
    unrelated = make_meeting(title="Standup")
    fake_client.meetings = [in_transcript, in_title, unrelated]
    fake_client.transcripts = {
        str(in_transcript.recording_id): "[00:01:00] Ada: the ROADMAP slips a week",
        str(in_title.recording_id): "[00:00:10] Bob: hello",
    }

    result = await tool.execute(_params(tool, search_term="roadmap"))

    assert [m.title for m in result.data.meetings] == ["Sales sync", "Roadmap review"]
    assert result.data.meetings[0].relevance == FOUND_IN_TRANSCRIPT
    assert result.data.meetings[1].relevance == FOUND_IN_FIELDS
    assert "ROADMAP" in result.data.meetings[0].transcript


async def test_non_critical_fetch_failure_degrades(tool, fake_client, make_meeting) -> None:
    broken = make_meeting(title="Pricing deep dive")
    fine = make_meeting(title="Standup")
    fake_client.meetings = [broken, fine]
    fake_client.transcript_errors[str(broken.recording_id)] = FathomUnknownError("boom")
    fake_client.transcripts[str(fine.recording_id)] = "Bob: pricing is settled"

    result = await tool.execute(_params(tool, search_term="pricing"))

    assert result.success is True
    assert [m.relevance for m in result.data.meetings] == [FOUND_IN_FIELDS, FOUND_IN_TRANSCRIPT]
    assert result.data.meetings[0].transcript == ""


async def test_critical_failure_aborts_and_cancels(tool, fake_client, make_meeting) -> None:
    limited = make_meeting()
    stalled = make_meeting()
    fake_client.meetings = [limited, stalled]
    fake_client.transcript_errors[str(limited.recording_id)] = FathomRateLimitError()
    fake_client.transcript_gates[str(stalled.recording_id)] = asyncio.Event()

    with pytest.raises(FathomRateLimitError):
        await tool.execute(_params(tool, search_term="anything"))

    assert fake_client.cancelled_fetches == [str(stalled.recording_id)]


async def test_auth_failure_aborts_search(tool, fake_client, make_meeting) -> None:
    rejected = make_meeting(title="Pricing review")
    stalled = make_meeting()
    fake_client.meetings = [rejected, stalled]
    fake_client.transcript_errors[str(rejected.recording_id)] = FathomAuthError()
    fake_client.transcript_gates[str(stalled.recording_id)] = asyncio.Event()

    with pytest.raises(FathomAuthError):
        await tool.execute(_params(tool, search_term="pricing"))

    assert fake_client.cancelled_fetches == [str(stalled.recording_id)]


async def test_critical_failure_is_tool_error(server, fake_client, make_meeting) -> None:
    meeting = make_meeting()
    fake_client.meetings = [meeting]
    fake_client.transcript_errors[str(meeting.recording_id)] = FathomRateLimitError()

    result = await server.call_tool("search_meetings", {"search_term": "x"})

    assert result.success is False
    assert result.error == "Rate limit exceeded. Please try again later."
