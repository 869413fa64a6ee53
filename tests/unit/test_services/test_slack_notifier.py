"""Tests for the Slack notifier."""

import json

import httpx
import pytest

from src.services.slack_notifier import SlackNotifier, dispatch_notification

WEBHOOK = "https://hooks.slack.test/services/T000/B000/XXX"


def _recording_transport(status_code=200, body="ok"):
    captured = []

    def handle(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handle), captured


@pytest.mark.unit
@pytest.mark.asyncio
async def test_send_notification_posts_full_payload():
    transport, captured = _recording_transport()
    notifier = SlackNotifier(webhook_url=WEBHOOK, channel="#ventas", username="Bot", transport=transport)

    result = await notifier.send_notification("hola", [{"color": "good"}])

    assert result.success is True
    assert result.data == "ok"
    assert captured == [{
        "channel": "#ventas",
        "username": "Bot",
        "text": "hola",
        "attachments": [{"color": "good"}],
        "icon_emoji": ":house:",
    }]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unconfigured_webhook_returns_failure():
    result = await SlackNotifier(webhook_url="").send_notification("hola")

    assert result.success is False
    assert "not configured" in result.error


@pytest.mark.unit
@pytest.mark.asyncio
async def test_http_error_status_is_returned_not_raised():
    transport, _ = _recording_transport(status_code=404, body="no_service")
    notifier = SlackNotifier(webhook_url=WEBHOOK, transport=transport)

    result = await notifier.send_notification("hola")

    assert result.success is False
    assert result.error == "no_service"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transport_failure_is_returned_not_raised():
    def explode(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    notifier = SlackNotifier(webhook_url=WEBHOOK, transport=httpx.MockTransport(explode))

    result = await notifier.send_notification("hola")

    assert result.success is False
    assert "timed out" in result.error


@pytest.mark.unit
@pytest.mark.asyncio
async def test_property_notification_fields():
    transport, captured = _recording_transport()
    notifier = SlackNotifier(webhook_url=WEBHOOK, transport=transport)

    await notifier.send_property_notification(
        {"title": "Lote 5", "price": "1000.00", "location": "Leon", "property_type": "house", "size": "200 m2"},
        created=False,
    )

    payload = captured[0]
    assert payload["text"].endswith("Property updated: Lote 5")
    fields = {f["title"]: f["value"] for f in payload["attachments"][0]["fields"]}
    assert fields["Price"] == "$1000.00"
    assert fields["Type"] == "House"
    assert fields["Seller"] == "N/A"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_contact_notification_truncates_long_message():
    transport, captured = _recording_transport()
    notifier = SlackNotifier(webhook_url=WEBHOOK, transport=transport)

    await notifier.send_contact_notification({"name": "Luis", "email": "l@example.com", "message": "x" * 150})

    fields = {f["title"]: f for f in captured[0]["attachments"][0]["fields"]}
    assert fields["Message"]["value"] == "x" * 100 + "..."
    assert fields["Message"]["short"] is False
    assert fields["Phone"]["value"] == "Not provided"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_custom_message_and_action_log():
    transport, captured = _recording_transport()
    notifier = SlackNotifier(webhook_url=WEBHOOK, transport=transport)

    await notifier.send_custom_message("Deploy listo")
    await notifier.log_action("deleted", "Contact", {"contact_id": 3})

    assert captured[0]["text"] == "Deploy listo"
    assert captured[0]["attachments"] == []
    assert captured[1]["attachments"][0]["fields"][0] == {"title": "Contact Id", "value": "3", "short": True}


@pytest.mark.unit
def test_dispatch_skips_when_not_configured():
    assert dispatch_notification("new_user", lambda n: n.send_custom_message("x"), SlackNotifier(webhook_url="")) is None


@pytest.mark.unit
def test_dispatch_runs_in_background():
    transport, captured = _recording_transport()
    notifier = SlackNotifier(webhook_url=WEBHOOK, transport=transport)

    future = dispatch_notification("sale_recorded", lambda n: n.send_sale_notification({"buyer_name": "Marta"}), notifier)

    result = future.result(timeout=5)
    assert result.success is True
    assert captured[0]["text"].startswith("💰 Sale recorded")
