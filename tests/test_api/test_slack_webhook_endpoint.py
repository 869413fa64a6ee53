"""Tests for POST /api/slack/webhook."""

import json

import httpx
import pytest

from api.slack import webhook
from src.services.slack_notifier import SlackNotifier
from tests.utils.assertions import assert_failure, assert_success
from tests.utils.helpers import call_handler

WEBHOOK_URL = "https://hooks.slack.test/services/T000/B000/XXX"
PATH = "/api/slack/webhook"


@pytest.fixture
def slack_requests(monkeypatch):
    """Route the endpoint's notifier through a mock transport; yields (sent payloads, reply state)."""
    sent = []
    state = {"status": 200, "body": "ok"}

    def handle(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(state["status"], text=state["body"])

    transport = httpx.MockTransport(handle)
    monkeypatch.setattr(webhook, "build_notifier", lambda: SlackNotifier(webhook_url=WEBHOOK_URL, transport=transport))
    return sent, state


@pytest.mark.unit
def test_property_created_is_relayed(slack_requests):
    sent, _ = slack_requests

    response = call_handler(webhook.handler, "POST", PATH, {
        "type": "property_created",
        "data": {"title": "Lote Norte", "price": "25000.00", "location": "Leon"},
    })

    assert_success(response)
    assert response.body["message"] == "Notification sent to Slack"
    assert sent[0]["text"].endswith("Lote Norte")


@pytest.mark.unit
def test_custom_message(slack_requests):
    sent, _ = slack_requests

    response = call_handler(webhook.handler, "POST", PATH, {"type": "custom_message", "data": {"message": "Reunion a las 5"}})

    assert_success(response)
    assert sent[0]["text"] == "Reunion a las 5"


@pytest.mark.unit
def test_custom_message_requires_text(slack_requests):
    sent, _ = slack_requests

    response = call_handler(webhook.handler, "POST", PATH, {"type": "custom_message", "data": {}})

    assert_failure(response, 400, error_contains="data.message")
    assert sent == []


@pytest.mark.unit
@pytest.mark.parametrize("body", [
    {"data": {"title": "x"}},
    {"type": "party_started", "data": {}},
    {"type": "new_user"},
])
def test_malformed_requests(slack_requests, body):
    assert_failure(call_handler(webhook.handler, "POST", PATH, body), 400)


@pytest.mark.unit
def test_slack_failure_is_bad_gateway(slack_requests):
    _, state = slack_requests
    state.update(status=500, body="invalid_payload")

    response = call_handler(webhook.handler, "POST", PATH, {"type": "new_user", "data": {"name": "Ana", "email": "a@b.co"}})

    assert_failure(response, 502, error_contains="invalid_payload")


@pytest.mark.unit
def test_unconfigured_webhook_is_bad_gateway():
    response = call_handler(webhook.handler, "POST", PATH, {"type": "custom_message", "data": {"message": "hola"}})

    assert_failure(response, 502, error_contains="not configured")
