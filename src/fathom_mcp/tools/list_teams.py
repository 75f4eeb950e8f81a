"""list_teams — List the teams visible to the API key."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from ..fathom_types import Team
from ..mcp_base import MCPResult, ToolParams
from .base import FathomTool

logger = logging.getLogger(__name__)


class Params(ToolParams):
    """list_teams takes no arguments."""


class Result(BaseModel):
    total_teams: int
    teams: list[Team]
    has_more: bool


class ListTeams(FathomTool[Params, Result]):
    name = "list_teams"
    description = "List all teams accessible to the authenticated user."

    async def execute(self, params: Params) -> MCPResult[Result]:
        logger.info("[list_teams] Fetching teams")
        response = await self.client.list_teams()
        logger.info("[list_teams] Got %d teams", len(response.items))
        return MCPResult(
            success=True,
            data=Result(
                total_teams=len(response.items),
                teams=response.items,
                has_more=bool(response.next_cursor),
            ),
        )
