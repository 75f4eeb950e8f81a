"""list_team_members — List the members of one team."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from ..fathom_types import TeamMember
from ..mcp_base import MCPResult, ToolParams
from ..validation import assert_not_blank
from .base import FathomTool

logger = logging.getLogger(__name__)


class Params(ToolParams):
    """Parameters for list_team_members."""

    team_id: str = Field(description="The ID of the team to list members for")

    @field_validator("team_id")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        return assert_not_blank(value, "team_id")


class Result(BaseModel):
    team_id: str
    total_members: int
    members: list[TeamMember]
    has_more: bool


class ListTeamMembers(FathomTool[Params, Result]):
    name = "list_team_members"
    description = "List all members of a specific team."

    async def execute(self, params: Params) -> MCPResult[Result]:
        logger.info("[list_team_members] Fetching members for team: %s", params.team_id)
        response = await self.client.list_team_members(params.team_id)
        logger.info("[list_team_members] Got %d members", len(response.items))
        return MCPResult(
            success=True,
            data=Result(
                team_id=params.team_id,
                total_members=len(response.items),
                members=response.items,
                has_more=bool(response.next_cursor),
            ),
        )
