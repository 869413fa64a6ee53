"""Slack notification webhook (POST /api/slack/webhook).

Accepts ``{type, data}`` from the front office and relays a formatted message
to the configured Slack incoming webhook, synchronously, so the caller learns
whether delivery worked.
"""

import asyncio

from src.models.notification import NotificationResult, SlackWebhookRequest, WebhookEventType
from src.services.slack_notifier import SlackNotifier
from src.utils.errors import InputValidationError, NotificationError
from src.utils.http import ApiHandler, Request, Router, ok
from src.utils.logging import get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

router = Router()


def build_notifier() -> SlackNotifier:
    return SlackNotifier()


async def deliver(notifier: SlackNotifier, event: SlackWebhookRequest) -> NotificationResult:
    """Pick the message format for the event type and send it."""
    data = event.data
    if event.type == WebhookEventType.PROPERTY_CREATED:
        return await notifier.send_property_notification(data, created=True)
    if event.type == WebhookEventType.PROPERTY_UPDATED:
        return await notifier.send_property_notification(data, created=False)
    if event.type == WebhookEventType.CONTACT_REQUEST:
        return await notifier.send_contact_notification(data)
    if event.type == WebhookEventType.NEW_USER:
        return await notifier.send_user_notification(data)

    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        raise InputValidationError("data.message is required for custom_message")
    attachments = data.get("attachments") or []
    if not isinstance(attachments, list):
        raise InputValidationError("data.attachments must be a list")
    return await notifier.send_custom_message(message, attachments)


@router.add("POST", "/api/slack/webhook")
def slack_webhook(request: Request):
    event = SlackWebhookRequest.model_validate(request.json())
    logger.info("Slack webhook received", notification_event=event.type.value)

    result = asyncio.run(deliver(build_notifier(), event))
    if not result.success:
        logger.warning("Slack webhook delivery failed", notification_event=event.type.value, error=str(result.error)[:200])
        raise NotificationError(f"Could not deliver notification to Slack: {result.error}")

    return ok(result.data, message="Notification sent to Slack")


class handler(ApiHandler):
    """Vercel serverless function handler for /api/slack/webhook."""
    router = router
