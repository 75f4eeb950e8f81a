"""
Fathom API Client

Thin async wrapper around the Fathom external API:
- Base URL: https://api.fathom.ai/external/v1
- Authentication: ``X-Api-Key`` header

Every remote failure is normalized here into the ``FathomError`` hierarchy;
callers never look at raw HTTP status codes.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .fathom_types import (
    CreateWebhookResponse,
    ListMeetingsResponse,
    ListTeamMembersResponse,
    ListTeamsResponse,
    MeetingFilters,
    TranscriptSegment,
    WebhookConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.fathom.ai/external/v1"
DEFAULT_TIMEOUT = 30.0

# Filters serialized as repeated ``key[]=value`` pairs
_ARRAY_FILTERS = ("calendar_invitees", "calendar_invitees_domains", "recorded_by", "teams")
# Shaping hints that are never forwarded upstream
_LOCAL_FILTERS = ("include_transcript",)


# ─── Errors ──────────────────────────────────────────────────────────────────


class FathomError(Exception):
    """Base class for normalized upstream failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FathomRateLimitError(FathomError):
    """Remote answered 429."""

    def __init__(self, status_code: int | None = 429) -> None:
        super().__init__("Rate limit exceeded. Please try again later.", status_code)


class FathomAuthError(FathomError):
    """Remote answered 401."""

    def __init__(self, status_code: int | None = 401) -> None:
        super().__init__("Invalid API key. Please check your Fathom API key.", status_code)


class FathomAPIError(FathomError):
    """Remote error body carried a message."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(f"Fathom API error: {message}", status_code)


class FathomUnknownError(FathomError):
    """Anything the other kinds do not cover."""


# Failures that abort a whole batch instead of degrading one item
CRITICAL_ERRORS: tuple[type[FathomError], ...] = (FathomAuthError, FathomRateLimitError)


# ─── Client ──────────────────────────────────────────────────────────────────


class FathomClient:
    """
    Client for the Fathom API.

    Holds one credential and one connection pool; otherwise stateless, so
    concurrent calls from different sessions are safe.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the Fathom client.

        Args:
            api_key: Fathom API key
            base_url: API root, overridable for testing
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        if not api_key:
            raise ValueError("Fathom API key is required")

        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"X-Api-Key": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Meetings ─────────────────────────────────────────────────────────────

    async def list_meetings(self, filters: MeetingFilters | None = None) -> ListMeetingsResponse:
        """
        List meetings matching the given filters.

        ``filters.include_transcript`` is not sent; transcripts are fetched
        separately through ``get_meeting_transcript``.
        """
        data = await self._request("GET", "/meetings", params=self.format_params(filters))
        return self._parse(ListMeetingsResponse, data)

    async def get_meeting_transcript(self, recording_id: str) -> str:
        """
        Fetch a recording's transcript as ``[timestamp] speaker: text`` lines.

        Returns:
            The flattened transcript, or ``""`` when none exists yet.

        Raises:
            FathomAuthError, FathomRateLimitError: must abort the caller's batch
            FathomError: any other failure
        """
        try:
            data = await self._request("GET", f"/recordings/{recording_id}/transcript")
        except FathomError as exc:
            if exc.status_code == 404:
                logger.info("No transcript yet for recording %s", recording_id)
                return ""
            raise

        segments = data.get("transcript") if isinstance(data, dict) else None
        if not segments:
            return ""
        try:
            parsed = [TranscriptSegment.model_validate(segment) for segment in segments]
        except ValidationError as exc:
            raise FathomUnknownError(f"Unexpected transcript format: {exc}") from exc
        return "\n".join(segment.render() for segment in parsed)

    # ── Teams ────────────────────────────────────────────────────────────────

    async def list_teams(self, cursor: str | None = None) -> ListTeamsResponse:
        params = {"cursor": cursor} if cursor else None
        data = await self._request("GET", "/teams", params=params)
        return self._parse(ListTeamsResponse, data)

    async def list_team_members(self, team_id: str, cursor: str | None = None) -> ListTeamMembersResponse:
        params: dict[str, str] = {"team": team_id}
        if cursor:
            params["cursor"] = cursor
        data = await self._request("GET", "/team_members", params=params)
        return self._parse(ListTeamMembersResponse, data)

    # ── Webhooks ─────────────────────────────────────────────────────────────

    async def create_webhook(self, config: WebhookConfig) -> CreateWebhookResponse:
        """
        Register a webhook.

        The signing secret is returned exactly once and is not kept here.
        """
        data = await self._request("POST", "/webhooks", json=config.model_dump())
        if not isinstance(data, dict):
            raise FathomUnknownError("Unexpected webhook response")
        # The secret may sit next to the webhook or inside it
        webhook = dict(data.get("webhook") or data)
        secret = data.get("secret") or webhook.pop("secret", None)
        if not secret:
            raise FathomUnknownError("Webhook response did not include a secret")
        webhook.pop("secret", None)
        return self._parse(CreateWebhookResponse, {"webhook": webhook, "secret": secret})

    async def delete_webhook(self, webhook_id: str) -> None:
        await self._request("DELETE", f"/webhooks/{webhook_id}")

    # ── Internals ────────────────────────────────────────────────────────────

    @staticmethod
    def format_params(filters: MeetingFilters | None) -> list[tuple[str, str]]:
        """Serialize filters: list values as repeated ``key[]`` pairs, scalars as-is."""
        if filters is None:
            return []

        formatted: list[tuple[str, str]] = []
        for key, value in filters.model_dump(exclude_none=True).items():
            if key in _LOCAL_FILTERS:
                continue
            if key in _ARRAY_FILTERS:
                formatted.extend((f"{key}[]", str(item)) for item in value)
            elif isinstance(value, bool):
                formatted.append((key, "true" if value else "false"))
            else:
                formatted.append((key, str(value)))
        return formatted

    async def _request(
        self,
        method: str,
        path: str,
        params: Any = None,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._normalize_error(exc.response) from exc
        except httpx.HTTPError as exc:
            logger.error("Request to Fathom API failed: %s %s: %s", method, path, exc)
            raise FathomUnknownError(f"Network error: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise FathomUnknownError("Fathom API returned a non-JSON response") from exc

    @staticmethod
    def _normalize_error(response: httpx.Response) -> FathomError:
        status = response.status_code
        if status == 429:
            return FathomRateLimitError(status)
        if status == 401:
            return FathomAuthError(status)

        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return FathomAPIError(str(body["message"]), status)

        return FathomUnknownError(f"Unknown error occurred (HTTP {status})", status)

    @staticmethod
    def _parse(model: Any, data: Any) -> Any:
        try:
            return model.model_validate(data or {})
        except ValidationError as exc:
            raise FathomUnknownError(f"Unexpected response from Fathom API: {exc}") from exc
