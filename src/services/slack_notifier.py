"""Outbound Slack incoming-webhook notifications.

Delivery is best-effort: every send returns a NotificationResult and never
raises, and callers on the request path hand the send to a background thread
so the HTTP response does not wait on Slack.
"""

import asyncio
import atexit
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx

from src.models.notification import NotificationResult
from src.utils.logging import get_correlation_id, get_structured_logger
from src.utils.settings import get_settings

logger = get_structured_logger(__name__)

MESSAGE_PREVIEW_LENGTH = 100
ICON_EMOJI = ":house:"

_executor: Optional[ThreadPoolExecutor] = None


def _money(value: Any) -> str:
    return f"${value}" if value not in (None, "") else "N/A"


def _field(title: str, value: Any, short: bool = True) -> dict:
    return {"title": title, "value": "N/A" if value in (None, "") else str(value), "short": short}


def _format_day(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    if value:
        return str(value)[:10]
    return date.today().isoformat()


class SlackNotifier:
    """Posts formatted messages to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        channel: Optional[str] = None,
        username: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.webhook_url = webhook_url if webhook_url is not None else settings.slack_webhook_url
        self.channel = channel or settings.slack_channel
        self.username = username or settings.slack_username
        self.timeout = timeout if timeout is not None else settings.slack_timeout_seconds
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    def build_payload(self, text: str, attachments: Optional[list] = None) -> dict:
        return {
            "channel": self.channel,
            "username": self.username,
            "text": text,
            "attachments": attachments or [],
            "icon_emoji": ICON_EMOJI,
        }

    async def send_notification(self, text: str, attachments: Optional[list] = None) -> NotificationResult:
        """POST one message to the webhook. Failures come back in the result."""
        if not self.is_configured:
            logger.warning("Slack webhook URL not configured; notification skipped")
            return NotificationResult(success=False, error="Webhook not configured")

        payload = self.build_payload(text, attachments)
        start = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Slack rejected notification",
                status_code=e.response.status_code,
                body=e.response.text[:200],
            )
            return NotificationResult(success=False, error=e.response.text or f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning("Slack notification failed", error=str(e), error_type=type(e).__name__)
            return NotificationResult(success=False, error=str(e) or type(e).__name__)

        logger.info(
            "Slack notification sent",
            status_code=response.status_code,
            duration_ms=round((time.time() - start) * 1000, 2),
        )
        return NotificationResult(success=True, data=response.text)

    async def send_property_notification(self, prop: Mapping[str, Any], created: bool = True) -> NotificationResult:
        action = "created" if created else "updated"
        text = f"🏠 Property {action}: {prop.get('title')}"
        attachments = [
            {
                "color": "good" if created else "#36a64f",
                "fields": [
                    _field("Property", prop.get("title")),
                    _field("Price", _money(prop.get("price"))),
                    _field("Location", prop.get("location")),
                    _field("Type", "Land" if prop.get("property_type", "land") == "land" else "House"),
                    _field("Size", prop.get("size")),
                    _field("Seller", prop.get("seller_name")),
                ],
                "ts": int(time.time()),
            }
        ]
        return await self.send_notification(text, attachments)

    async def send_contact_notification(self, contact: Mapping[str, Any]) -> NotificationResult:
        text = f"📞 New contact request: {contact.get('name')}"
        fields = [
            _field("Name", contact.get("name")),
            _field("Email", contact.get("email")),
            _field("Phone", contact.get("phone") or "Not provided"),
            _field("Property", contact.get("property_title")),
            _field("Price", _money(contact.get("property_price"))),
            _field("Location", contact.get("property_location")),
        ]
        message = contact.get("message")
        if message:
            if len(message) > MESSAGE_PREVIEW_LENGTH:
                message = message[:MESSAGE_PREVIEW_LENGTH] + "..."
            fields.append(_field("Message", message, short=False))

        return await self.send_notification(text, [{"color": "#007bff", "fields": fields}])

    async def send_user_notification(self, user: Mapping[str, Any]) -> NotificationResult:
        text = f"👤 New user registered: {user.get('name')}"
        attachments = [
            {
                "color": "#28a745",
                "fields": [
                    _field("Name", user.get("name")),
                    _field("Email", user.get("email")),
                    _field("Role", user.get("role")),
                    _field("Date", _format_day(user.get("registration_date") or user.get("created_at"))),
                ],
            }
        ]
        return await self.send_notification(text, attachments)

    async def send_seller_notification(self, seller: Mapping[str, Any]) -> NotificationResult:
        text = f"🧑‍💼 New seller: {seller.get('name')}"
        attachments = [
            {
                "color": "#6f42c1",
                "fields": [
                    _field("Name", seller.get("name")),
                    _field("Email", seller.get("email")),
                    _field("Phone", seller.get("phone")),
                ],
            }
        ]
        return await self.send_notification(text, attachments)

    async def send_sale_notification(self, sale: Mapping[str, Any]) -> NotificationResult:
        text = f"💰 Sale recorded: {sale.get('property_title') or sale.get('property_id')}"
        attachments = [
            {
                "color": "#f0ad4e",
                "fields": [
                    _field("Property", sale.get("property_title")),
                    _field("Buyer", sale.get("buyer_name")),
                    _field("Amount", _money(sale.get("sale_amount"))),
                    _field("Commission", _money(sale.get("commission"))),
                    _field("Seller", sale.get("seller_name")),
                    _field("Date", _format_day(sale.get("sale_date"))),
                ],
            }
        ]
        return await self.send_notification(text, attachments)

    async def log_action(self, action: str, entity: str, details: Optional[Mapping[str, Any]] = None) -> NotificationResult:
        """Generic audit-style message for actions without a dedicated format."""
        fields = [_field(str(key).replace("_", " ").title(), value) for key, value in (details or {}).items()]
        attachments = [{"color": "#6c757d", "fields": fields}] if fields else []
        return await self.send_notification(f"📝 {entity} {action}", attachments)

    async def send_custom_message(self, message: str, attachments: Optional[list] = None) -> NotificationResult:
        return await self.send_notification(message, attachments or [])


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="slack-notify")
        atexit.register(_executor.shutdown, wait=False)
    return _executor


def _run_and_log(factory: Callable[[], Awaitable[NotificationResult]], event: str, correlation_id: Optional[str]) -> NotificationResult:
    result = asyncio.run(factory())
    if result.success:
        logger.debug("Background notification delivered", notification_event=event, request_id=correlation_id)
    else:
        logger.warning(
            "Background notification not delivered",
            notification_event=event,
            request_id=correlation_id,
            error=str(result.error)[:200],
        )
    return result


def dispatch_notification(
    event: str,
    send: Callable[[SlackNotifier], Awaitable[NotificationResult]],
    notifier: Optional[SlackNotifier] = None,
) -> Optional[Future]:
    """
    Fire-and-forget a notification after a successful mutation.

    ``send`` receives the notifier and returns the coroutine to run. Returns
    the Future (tests may wait on it) or None when Slack is not configured.
    """
    notifier = notifier or SlackNotifier()
    if not notifier.is_configured:
        logger.debug("Slack not configured; skipping notification", notification_event=event)
        return None

    return _get_executor().submit(_run_and_log, lambda: send(notifier), event, get_correlation_id())

