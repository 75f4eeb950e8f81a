"""
get_meeting_transcript — Fetch the full transcript of one recording.

A recording without a transcript yet gets an explanatory message rather
than an error.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from ..mcp_base import MCPResult, ToolParams
from ..validation import assert_not_blank
from .base import FathomTool

logger = logging.getLogger(__name__)

SUMMARIZE_PREFIX = "Please summarize this meeting transcript:\n\n"


class Params(ToolParams):
    """Parameters for get_meeting_transcript."""

    recording_id: str | int = Field(description="The recording ID of the meeting")
    summarize: bool = Field(
        default=False,
        description="Whether to return a request for the assistant to summarize the transcript",
    )

    @field_validator("recording_id")
    @classmethod
    def _non_blank(cls, value: str | int) -> str | int:
        if isinstance(value, str):
            return assert_not_blank(value, "recording_id")
        return value


class GetMeetingTranscript(FathomTool[Params, BaseModel]):
    """Return a recording's transcript as plain text."""

    name = "get_meeting_transcript"
    description = (
        "Get the full transcript of a specific meeting by recording ID. Useful for "
        "detailed analysis or summarization of meeting content."
    )

    async def execute(self, params: Params) -> MCPResult[BaseModel]:
        recording_id = str(params.recording_id)
        logger.info("[get_meeting_transcript] Fetching transcript for recording: %s", recording_id)
        transcript = await self.client.get_meeting_transcript(recording_id)
        logger.info("[get_meeting_transcript] Got transcript (%d characters)", len(transcript))

        if not transcript:
            return MCPResult(
                success=True,
                data=(
                    f"No transcript available for recording {recording_id}. The meeting may "
                    "still be processing, or transcription may not be available."
                ),
            )

        text = SUMMARIZE_PREFIX + transcript if params.summarize else transcript
        return MCPResult(success=True, data=text)
