"""Shared pytest fixtures for testing."""

import json
from typing import Any, Dict, List, Optional

import pytest

from actions_bridge.core.config import AdapterSettings


GEN2_HEADERS = {"Google-Actions-API-Version": "2", "Google-Assistant-API-Version": "v2"}


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def settings() -> AdapterSettings:
    """Adapter settings independent of the environment."""
    return AdapterSettings(
        _env_file=None,
        verification_header=None,
        verification_value=None,
        log_payloads=True,
    )


@pytest.fixture
def gen2_headers() -> Dict[str, str]:
    return dict(GEN2_HEADERS)


# =============================================================================
# Actions SDK Bodies
# =============================================================================


def _app_request_gen2(
    intent: str = "actions.intent.MAIN",
    query: Optional[str] = "talk to number genie",
    arguments: Optional[List[Dict[str, Any]]] = None,
    token: Optional[str] = None,
    conversation_type: str = "ACTIVE",
    user_storage: Optional[str] = None,
) -> Dict[str, Any]:
    user: Dict[str, Any] = {
        "userId": "user-123",
        "locale": "en-US",
        "lastSeen": "2018-03-01T10:00:00Z",
        "accessToken": "token-abc",
        "profile": {"displayName": "Ada Lovelace", "givenName": "Ada", "familyName": "Lovelace"},
    }
    if user_storage is not None:
        user["userStorage"] = user_storage
    conversation: Dict[str, Any] = {"conversationId": "conv-1", "type": conversation_type}
    if token is not None:
        conversation["conversationToken"] = token
    return {
        "user": user,
        "device": {"location": {"coordinates": {"latitude": 37.4, "longitude": -122.1}, "city": "Mountain View"}},
        "surface": {
            "capabilities": [
                {"name": "actions.capability.AUDIO_OUTPUT"},
                {"name": "actions.capability.SCREEN_OUTPUT"},
            ]
        },
        "availableSurfaces": [
            {"capabilities": [{"name": "actions.capability.SCREEN_OUTPUT"}, {"name": "actions.capability.AUDIO_OUTPUT"}]}
        ],
        "conversation": conversation,
        "inputs": [
            {
                "intent": intent,
                "rawInputs": [{"inputType": "VOICE", "query": query}],
                "arguments": arguments or [],
            }
        ],
        "isInSandbox": True,
    }


@pytest.fixture
def make_actions_sdk_gen2():
    """Factory for generation 2 Actions SDK bodies."""
    return _app_request_gen2


@pytest.fixture
def make_actions_sdk_gen1():
    """Factory for generation 1 (snake_case) Actions SDK bodies."""

    def make(
        intent: str = "assistant.intent.action.MAIN",
        arguments: Optional[List[Dict[str, Any]]] = None,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        conversation: Dict[str, Any] = {"conversation_id": "conv-1", "type": 2}
        if token is not None:
            conversation["conversation_token"] = token
        return {
            "user": {"user_id": "user-123", "profile": {"display_name": "Ada Lovelace", "given_name": "Ada"}},
            "conversation": conversation,
            "inputs": [
                {
                    "intent": intent,
                    "raw_inputs": [{"input_type": 2, "query": "hello"}],
                    "arguments": arguments or [],
                }
            ],
        }

    return make


# =============================================================================
# Dialogflow Bodies
# =============================================================================


@pytest.fixture
def make_legacy_dialogflow():
    """Factory for ``result`` envelope bodies (generation 2 when embedded is given)."""

    def make(
        action: Optional[str] = "input.welcome",
        contexts: Optional[List[Dict[str, Any]]] = None,
        parameters: Optional[Dict[str, Any]] = None,
        embedded: Optional[Dict[str, Any]] = None,
        version: str = "2",
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "id": "req-1",
            "sessionId": "session-1",
            "lang": "en",
            "result": {
                "source": "agent",
                "resolvedQuery": "hello",
                "action": action,
                "parameters": parameters or {},
                "contexts": contexts or [],
                "metadata": {"intentId": "intent-1", "intentName": "Default Welcome Intent"},
            },
        }
        if embedded is not None:
            body["originalRequest"] = {"source": "google", "version": version, "data": embedded}
        return body

    return make


@pytest.fixture
def make_current_dialogflow():
    """Factory for ``queryResult`` envelope bodies."""

    def make(
        action: Optional[str] = "input.welcome",
        contexts: Optional[List[Dict[str, Any]]] = None,
        parameters: Optional[Dict[str, Any]] = None,
        embedded: Optional[Dict[str, Any]] = None,
        intent_name: str = "Default Welcome Intent",
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "responseId": "resp-1",
            "session": "projects/genie/agent/sessions/abc",
            "queryResult": {
                "queryText": "hello",
                "action": action,
                "parameters": parameters or {},
                "outputContexts": contexts or [],
                "intent": {"name": "projects/genie/agent/intents/1", "displayName": intent_name},
                "languageCode": "en",
            },
        }
        if embedded is not None:
            body["originalDetectIntentRequest"] = {"source": "google", "version": "2", "payload": embedded}
        return body

    return make


@pytest.fixture
def session_token():
    """Encode a conversation token the way the platform echoes it."""

    def encode(data: Dict[str, Any], state: Optional[str] = None, **extra: Any) -> str:
        token: Dict[str, Any] = dict(extra)
        token["state"] = state
        token["data"] = data
        return json.dumps(token)

    return encode
