"""Unit tests for wire serialization across all request shapes."""

import copy
import json

import pytest

from actions_bridge.conversation.conversation import Conversation
from actions_bridge.conversation.turns import build_turn
from actions_bridge.core.exceptions import InvalidResponseError
from actions_bridge.responses import BasicCard, RichResponse
from actions_bridge.serialization import Serializer, response_headers, to_gen1
from actions_bridge.wire.detector import detect


SESSION = "projects/genie/agent/sessions/abc"


def _conversation(body, headers=None):
    headers = headers or {}
    return Conversation(build_turn(detect(headers, body), body), headers)


@pytest.fixture
def serializer(settings):
    return Serializer(settings)


class TestLegacyDialogflow:
    """Tests for the ``result`` envelope."""

    def test_gen1_tell_golden(self, make_legacy_dialogflow, serializer):
        """Test the generation 1 tell matches the expected bytes."""
        conv = _conversation(make_legacy_dialogflow(action="check_guess"))
        conv.tell("hello")

        body = conv.serialize(serializer)

        assert json.dumps(body, separators=(",", ":")) == (
            '{"speech":"hello","data":{"google":{"expect_user_response":false,'
            '"is_ssml":false,"no_input_prompts":[]}},"contextOut":[]}'
        )

    def test_ask_emits_reserved_context(self, make_legacy_dialogflow, make_actions_sdk_gen2, serializer):
        """Test an ask appends the reserved context with lifespan 100."""
        conv = _conversation(make_legacy_dialogflow(embedded=make_actions_sdk_gen2()))
        conv.data["answer"] = 42
        conv.ask("Guess a number")

        body = conv.serialize(serializer)

        assert body["speech"] == "Guess a number"
        assert body["data"]["google"] == {
            "expectUserResponse": True,
            "isSsml": False,
            "noInputPrompts": [],
        }
        assert body["contextOut"] == [
            {"name": "_actions_on_google_", "lifespan": 100, "parameters": {"answer": 42}}
        ]

    def test_session_data_hydrated(self, make_legacy_dialogflow):
        """Test session data is read back from the reserved context."""
        contexts = [
            {"name": "_actions_on_google_", "lifespan": 99, "parameters": {"answer": 42}},
            {"name": "game", "lifespan": 2, "parameters": {"guess": "50", "guess.original": "fifty"}},
        ]
        conv = _conversation(make_legacy_dialogflow(contexts=contexts))

        assert conv.data == {"answer": 42}
        assert conv.get_context_argument("game", "guess") == {"value": "50", "original": "fifty"}
        assert [entry.name for entry in conv.get_contexts()] == ["game"]

    def test_deleted_context_is_omitted(self, make_legacy_dialogflow, serializer):
        """Test deletions are expressed by omission."""
        conv = _conversation(make_legacy_dialogflow(contexts=[{"name": "game", "lifespan": 2}]))
        conv.set_context("hint", 3, {"n": 1})
        conv.delete_context("game")
        conv.tell("Bye")

        body = conv.serialize(serializer)

        assert body["contextOut"] == [{"name": "hint", "lifespan": 3, "parameters": {"n": 1}}]

    def test_gen2_rich_response(self, make_legacy_dialogflow, make_actions_sdk_gen2, serializer):
        """Test generation 2 emits the rich response."""
        conv = _conversation(make_legacy_dialogflow(embedded=make_actions_sdk_gen2()))
        rich = RichResponse().add_simple_response("Here").add_basic_card(BasicCard(formatted_text="Card"))
        conv.ask(rich, no_input=["Still there?"])

        google = conv.serialize(serializer)["data"]["google"]

        assert [next(iter(item)) for item in google["richResponse"]["items"]] == ["simpleResponse", "basicCard"]
        assert google["noInputPrompts"] == [{"textToSpeech": "Still there?"}]
        assert "isSsml" not in google

    def test_followup(self, make_legacy_dialogflow, serializer):
        """Test followup events replace speech."""
        conv = _conversation(make_legacy_dialogflow())
        conv.followup("REPEAT", {"count": 2})

        body = conv.serialize(serializer)

        assert body["followupEvent"] == {"name": "REPEAT", "data": {"count": 2}}
        assert "speech" not in body


class TestCurrentDialogflow:
    """Tests for the ``queryResult`` envelope."""

    def test_ask_emits_reserved_context(self, make_current_dialogflow, make_actions_sdk_gen2, serializer):
        """Test an ask appends the session-qualified reserved context."""
        conv = _conversation(make_current_dialogflow(embedded=make_actions_sdk_gen2()))
        conv.data["answer"] = 42
        conv.ask("Guess")

        body = conv.serialize(serializer)

        assert body["fulfillmentText"] == "Guess"
        assert body["payload"]["google"] == {
            "expectUserResponse": True,
            "richResponse": {"items": [{"simpleResponse": {"textToSpeech": "Guess"}}], "suggestions": []},
        }
        assert body["outputContexts"] == [
            {
                "name": f"{SESSION}/contexts/_actions_on_google",
                "lifespanCount": 99,
                "parameters": {"data": '{"answer":42}'},
            }
        ]

    def test_state_round_trip(self, make_current_dialogflow, make_actions_sdk_gen2, serializer):
        """Test data and state survive a follow-up call."""
        first = _conversation(make_current_dialogflow(embedded=make_actions_sdk_gen2()))
        first.data = {"answer": 42, "guesses": [1, 2]}
        first.state = "guessing"
        first.ask("Guess")
        contexts = first.serialize(serializer)["outputContexts"]

        second = _conversation(make_current_dialogflow(contexts=contexts, embedded=make_actions_sdk_gen2()))

        assert second.data == {"answer": 42, "guesses": [1, 2]}
        assert second.state == "guessing"
        assert second.state_lost is False

    def test_contexts(self, make_current_dialogflow, make_actions_sdk_gen2, serializer):
        """Test inbound names are shortened and deletions sent with lifespan 0."""
        inbound = [{"name": f"{SESSION}/contexts/game", "lifespanCount": 3, "parameters": {"x": 1}}]
        conv = _conversation(make_current_dialogflow(contexts=inbound, embedded=make_actions_sdk_gen2()))

        assert conv.get_context("game").parameters == {"x": 1}

        conv.delete_context("game")
        conv.set_context("hint", 1)
        conv.tell("Bye")
        body = conv.serialize(serializer)

        assert body["outputContexts"] == [
            {"name": f"{SESSION}/contexts/game", "lifespanCount": 0},
            {"name": f"{SESSION}/contexts/hint", "lifespanCount": 1},
        ]

    def test_tell_without_contexts(self, make_current_dialogflow, make_actions_sdk_gen2, serializer):
        """Test a tell without contexts omits outputContexts."""
        conv = _conversation(make_current_dialogflow(embedded=make_actions_sdk_gen2()))
        conv.tell("Bye")

        body = conv.serialize(serializer)

        assert "outputContexts" not in body
        assert body["payload"]["google"]["expectUserResponse"] is False

    def test_system_intent(self, make_current_dialogflow, make_actions_sdk_gen2, serializer):
        """Test system intents use the data form in generation 2."""
        conv = _conversation(make_current_dialogflow(embedded=make_actions_sdk_gen2()))
        conv.ask_for_permission("To greet you", "NAME")

        google = conv.serialize(serializer)["payload"]["google"]

        assert google["systemIntent"]["intent"] == "actions.intent.PERMISSION"
        assert google["systemIntent"]["data"]["permissions"] == ["NAME"]
        assert google["richResponse"]["items"][0] == {
            "simpleResponse": {"textToSpeech": "PLACEHOLDER_FOR_PERMISSION"}
        }

    def test_followup(self, make_current_dialogflow, serializer):
        """Test followup events carry the request language."""
        conv = _conversation(make_current_dialogflow())
        conv.followup("REPEAT")

        body = conv.serialize(serializer)

        assert body["followupEventInput"] == {"name": "REPEAT", "parameters": {}, "languageCode": "en"}


class TestActionsSdk:
    """Tests for the Actions SDK shapes."""

    def test_gen2_ask(self, make_actions_sdk_gen2, gen2_headers, serializer):
        """Test a generation 2 ask."""
        conv = _conversation(make_actions_sdk_gen2(), gen2_headers)
        conv.data["answer"] = 7
        conv.ask("Hi", no_input=["<speak>Hello?</speak>"], speech_biasing_hints=["seven"])

        body = conv.serialize(serializer)

        assert json.loads(body["conversationToken"]) == {"state": None, "data": {"answer": 7}}
        assert body["expectUserResponse"] is True
        expected = body["expectedInputs"][0]
        assert expected["inputPrompt"] == {
            "initialPrompts": [{"textToSpeech": "Hi"}],
            "noInputPrompts": [{"ssml": "<speak>Hello?</speak>"}],
        }
        assert expected["possibleIntents"] == [{"intent": "actions.intent.TEXT"}]
        assert expected["speechBiasingHints"] == ["seven"]

    def test_token_round_trip(self, make_actions_sdk_gen2, gen2_headers, session_token, serializer):
        """Test the dialog token survives a follow-up call."""
        body = make_actions_sdk_gen2(token=session_token({"answer": 7}, "guessing", extra={"keep": 1}))
        conv = _conversation(body, gen2_headers)

        assert conv.data == {"answer": 7}
        assert conv.state == "guessing"

        conv.data["tries"] = 1
        conv.ask("Again")
        token = json.loads(conv.serialize(serializer)["conversationToken"])

        assert token == {"extra": {"keep": 1}, "state": "guessing", "data": {"answer": 7, "tries": 1}}

    def test_gen2_rich_ask_reprompts(self, make_actions_sdk_gen2, gen2_headers, serializer):
        """Test a rich ask emits its no-input and no-match prompts."""
        conv = _conversation(make_actions_sdk_gen2(), gen2_headers)
        conv.ask(RichResponse().add_simple_response("Pick"), no_input=["Still there?"], no_match=["Say again"])

        prompt = conv.serialize(serializer)["expectedInputs"][0]["inputPrompt"]

        assert prompt["richInitialPrompt"]["items"] == [{"simpleResponse": {"textToSpeech": "Pick"}}]
        assert prompt["noInputPrompts"] == [{"textToSpeech": "Still there?"}]
        assert prompt["noMatchPrompts"] == [{"textToSpeech": "Say again"}]

    def test_gen2_rich_tell(self, make_actions_sdk_gen2, gen2_headers, serializer):
        """Test a generation 2 rich tell."""
        conv = _conversation(make_actions_sdk_gen2(), gen2_headers)
        conv.tell(RichResponse().add_simple_response("Bye").add_suggestions("Again"))

        body = conv.serialize(serializer)

        assert "conversationToken" not in body
        assert body["finalResponse"]["richResponse"]["suggestions"] == [{"title": "Again"}]

    def test_gen1_tell(self, make_actions_sdk_gen1, serializer):
        """Test generation 1 uses snake_case and plain speech."""
        conv = _conversation(make_actions_sdk_gen1())
        conv.tell("Bye")

        assert conv.serialize(serializer) == {
            "expect_user_response": False,
            "final_response": {"speech_response": {"text_to_speech": "Bye"}},
        }

    def test_gen1_rich_collapses(self, make_actions_sdk_gen1, serializer):
        """Test generation 1 keeps only the first simple item."""
        conv = _conversation(make_actions_sdk_gen1())
        rich = RichResponse().add_simple_response("First").add_simple_response("Second")
        rich.add_basic_card(BasicCard(formatted_text="Card"))
        conv.tell(rich)

        assert conv.serialize(serializer)["final_response"] == {"speech_response": {"text_to_speech": "First"}}

    def test_gen1_permission(self, make_actions_sdk_gen1, serializer):
        """Test generation 1 system intents use the value spec form."""
        conv = _conversation(make_actions_sdk_gen1())
        conv.ask_for_permission("To greet you", "NAME")

        expected = conv.serialize(serializer)["expected_inputs"][0]

        assert expected["possible_intents"] == [
            {
                "intent": "assistant.intent.action.PERMISSION",
                "input_value_spec": {
                    "permission_value_spec": {"opt_context": "To greet you", "permissions": ["NAME"]}
                },
            }
        ]
        assert expected["input_prompt"]["initial_prompts"] == [{"text_to_speech": "PLACEHOLDER_FOR_PERMISSION"}]

    def test_followup_not_supported(self, make_actions_sdk_gen2, gen2_headers):
        """Test followup events are Dialogflow only."""
        conv = _conversation(make_actions_sdk_gen2(), gen2_headers)

        with pytest.raises(InvalidResponseError):
            conv.followup("REPEAT")

    def test_user_storage_only_when_changed(self, make_actions_sdk_gen2, gen2_headers, serializer):
        """Test user storage is emitted only after a change."""
        body = make_actions_sdk_gen2(user_storage='{"data":{"visits":1}}')
        conv = _conversation(body, gen2_headers)

        assert conv.user_storage == {"visits": 1}
        conv.tell("Bye")
        assert "userStorage" not in conv.serialize(serializer)

        conv.user_storage["visits"] = 2
        assert conv.serialize(serializer)["userStorage"] == '{"data":{"visits":2}}'


class TestSerializerPurity:
    """Tests for deterministic, side-effect-free serialization."""

    def test_deterministic(self, make_current_dialogflow, make_actions_sdk_gen2, serializer):
        """Test identical inputs give identical output without mutation."""
        conv = _conversation(make_current_dialogflow(embedded=make_actions_sdk_gen2()))
        conv.data["answer"] = 1
        conv.ask(RichResponse().add_simple_response("Hi").add_suggestions("Yes"))
        before = copy.deepcopy(conv.response.rich_response.to_wire())

        first = conv.serialize(serializer)
        second = conv.serialize(serializer)

        assert first == second
        assert conv.response.rich_response.to_wire() == before
        assert conv.data == {"answer": 1}

    def test_response_headers(self):
        """Test version headers are echoed with a JSON content type."""
        headers = response_headers({"google-assistant-api-version": "v2", "X-Other": "1"})

        assert headers == {"Content-Type": "application/json", "Google-Assistant-API-Version": "v2"}

    def test_gen1_field_table(self):
        """Test unknown keys pass through the generation 1 rename."""
        assert to_gen1({"expectUserResponse": True, "myKey": {"textToSpeech": "x"}}) == {
            "expect_user_response": True,
            "myKey": {"text_to_speech": "x"},
        }

    def test_gen1_developer_payloads_untouched(self):
        """Test keys inside orders and update arguments are not renamed."""
        order = {"id": "o-1", "cart": {"lineItems": [{"displayText": "Tea"}]}}
        body = {
            "structuredResponse": {"orderUpdate": {"orderId": "o-1", "userNotification": {"displayText": "Sent"}}},
            "inputValueData": {"proposedOrder": order, "arguments": [{"textValue": "x"}]},
        }

        converted = to_gen1(body)

        assert converted["structured_response"]["order_update"] == {
            "orderId": "o-1",
            "userNotification": {"displayText": "Sent"},
        }
        assert converted["input_value_data"]["proposedOrder"] == order
        assert converted["input_value_data"]["arguments"] == [{"textValue": "x"}]
        assert converted["input_value_data"]["proposedOrder"] is not order
