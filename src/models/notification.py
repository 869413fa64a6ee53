"""Slack notification models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class WebhookEventType(str, Enum):
    """Event types accepted by POST /api/slack/webhook."""
    PROPERTY_CREATED = "property_created"
    PROPERTY_UPDATED = "property_updated"
    CONTACT_REQUEST = "contact_request"
    NEW_USER = "new_user"
    CUSTOM_MESSAGE = "custom_message"


class SlackWebhookRequest(BaseModel):
    """Inbound request asking the backend to post a Slack notification."""
    type: WebhookEventType
    data: dict[str, Any] = Field(..., description="Event payload (property, contact, user or message)")


@dataclass
class NotificationResult:
    """Outcome of a Slack delivery attempt. Never raised, only returned."""
    success: bool
    data: Any = None
    error: Optional[str] = None
