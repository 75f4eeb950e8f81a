"""
create_webhook / delete_webhook — Manage meeting-ready webhooks.

The signing secret from create_webhook is shown once and never stored.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from ..fathom_types import Webhook, WebhookConfig
from ..mcp_base import MCPResult, ToolParams
from ..validation import assert_http_url, assert_not_blank
from .base import FathomTool

logger = logging.getLogger(__name__)

SECRET_NOTE = (
    "Save this secret securely - it's needed to verify webhook signatures "
    "and won't be shown again."
)

# ─── create_webhook ──────────────────────────────────────────────────────────


class CreateParams(ToolParams):
    """Parameters for create_webhook."""

    url: str = Field(description="The URL to send webhook notifications to")
    include_transcript: bool = Field(
        default=False, description="Include meeting transcripts in webhook payload"
    )
    include_summary: bool = Field(
        default=True, description="Include meeting summaries in webhook payload"
    )
    include_action_items: bool = Field(
        default=True, description="Include action items in webhook payload"
    )

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        return assert_http_url(value, "url")


class CreateResult(BaseModel):
    webhook: Webhook
    secret: str
    note: str = SECRET_NOTE


class CreateWebhook(FathomTool[CreateParams, CreateResult]):
    name = "create_webhook"
    description = (
        "Create a webhook to receive real-time notifications when new meetings are "
        "ready. Returns webhook ID and secret for verification."
    )

    async def execute(self, params: CreateParams) -> MCPResult[CreateResult]:
        logger.info("[create_webhook] Creating webhook for URL: %s", params.url)
        response = await self.client.create_webhook(WebhookConfig(**params.model_dump()))
        logger.info("[create_webhook] Created webhook: %s", response.webhook.id)
        return MCPResult(
            success=True,
            data=CreateResult(webhook=response.webhook, secret=response.secret),
        )


# ─── delete_webhook ──────────────────────────────────────────────────────────


class DeleteParams(ToolParams):
    """Parameters for delete_webhook."""

    webhook_id: str = Field(description="The ID of the webhook to delete")

    @field_validator("webhook_id")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        return assert_not_blank(value, "webhook_id")


class DeleteResult(BaseModel):
    success: bool
    webhook_id: str
    message: str


class DeleteWebhook(FathomTool[DeleteParams, DeleteResult]):
    name = "delete_webhook"
    description = "Delete an existing webhook by its ID."

    async def execute(self, params: DeleteParams) -> MCPResult[DeleteResult]:
        logger.info("[delete_webhook] Deleting webhook: %s", params.webhook_id)
        await self.client.delete_webhook(params.webhook_id)
        logger.info("[delete_webhook] Deleted webhook: %s", params.webhook_id)
        return MCPResult(
            success=True,
            data=DeleteResult(
                success=True,
                webhook_id=params.webhook_id,
                message="Webhook deleted successfully",
            ),
        )
