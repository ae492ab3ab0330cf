"""Unit tests for the FastAPI integration."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from actions_bridge import ProtocolAdapter
from actions_bridge.integrations import create_app, create_webhook_router


@pytest.fixture
def adapter(settings):
    def welcome(conv, params, arg):
        conv.ask("Welcome! Guess a number.")

    return ProtocolAdapter({"input.welcome": welcome, "actions.intent.MAIN": "input.welcome"}, settings)


@pytest.fixture
def client(adapter, settings) -> TestClient:
    return TestClient(create_app(adapter, settings))


class TestWebhookEndpoint:
    """Tests for the webhook route."""

    def test_health(self, client):
        """Test the health endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "actions-bridge"

    def test_dialogflow_ask(self, client, make_current_dialogflow, make_actions_sdk_gen2):
        """Test a Dialogflow call through HTTP."""
        response = client.post("/webhook", json=make_current_dialogflow(embedded=make_actions_sdk_gen2()))

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json()["fulfillmentText"] == "Welcome! Guess a number."

    def test_actions_sdk_headers_echoed(self, client, make_actions_sdk_gen2, gen2_headers):
        """Test version headers come back on the response."""
        response = client.post("/webhook", json=make_actions_sdk_gen2(), headers=gen2_headers)

        assert response.status_code == 200
        assert response.headers["google-actions-api-version"] == "2"
        assert response.json()["expectUserResponse"] is True

    def test_invalid_json(self, client):
        """Test undecodable bodies get the text error response."""
        response = client.post("/webhook", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text.startswith("Action Error: ")

    def test_custom_path(self, adapter, make_legacy_dialogflow):
        """Test mounting the router on another app and path."""
        app = FastAPI()
        app.include_router(create_webhook_router(adapter, "/fulfillment"))

        response = TestClient(app).post("/fulfillment", json=make_legacy_dialogflow())

        assert response.status_code == 200
        assert response.json()["speech"] == "Welcome! Guess a number."
