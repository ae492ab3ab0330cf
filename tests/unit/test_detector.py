"""Unit tests for wire format detection."""

import pytest

from actions_bridge.wire.detector import detect, header_value, is_known_shape
from actions_bridge.wire.models import ApiGeneration, DialogflowEnvelope, FrontEnd, WireFormat
from actions_bridge.wire.transform import camel_case, to_camel_case


class TestHeaderLookup:
    """Tests for case-insensitive header access."""

    def test_exact_and_case_insensitive(self):
        """Test header lookup ignores case."""
        headers = {"google-actions-api-version": "2"}

        assert header_value(headers, "Google-Actions-API-Version") == "2"
        assert header_value(headers, "missing") is None
        assert header_value(None, "anything") is None


class TestDetect:
    """Tests for generation and front end detection."""

    def test_gen2_header_actions_sdk(self, make_actions_sdk_gen2, gen2_headers):
        """Test the version header selects generation 2."""
        wire_format = detect(gen2_headers, make_actions_sdk_gen2())

        assert wire_format == WireFormat(ApiGeneration.GEN2, FrontEnd.ACTIONS_SDK)
        assert wire_format.envelope is None

    def test_gen1_without_marker(self, make_actions_sdk_gen1):
        """Test absence of a marker means generation 1."""
        wire_format = detect({}, make_actions_sdk_gen1())

        assert wire_format.generation == ApiGeneration.GEN1
        assert wire_format.front_end == FrontEnd.ACTIONS_SDK

    def test_header_other_than_two_is_gen1(self, make_actions_sdk_gen2):
        """Test only the value "2" marks generation 2."""
        wire_format = detect({"Google-Actions-API-Version": "1"}, make_actions_sdk_gen2())

        assert wire_format.generation == ApiGeneration.GEN1

    def test_embedded_version_legacy_envelope(self, make_legacy_dialogflow, make_actions_sdk_gen2):
        """Test originalRequest.version 2 selects generation 2."""
        body = make_legacy_dialogflow(embedded=make_actions_sdk_gen2())

        wire_format = detect({}, body)

        assert wire_format.generation == ApiGeneration.GEN2
        assert wire_format.front_end == FrontEnd.DIALOGFLOW
        assert wire_format.envelope == DialogflowEnvelope.LEGACY

    def test_embedded_integer_version(self, make_legacy_dialogflow, make_actions_sdk_gen2):
        """Test an integer embedded version is accepted."""
        body = make_legacy_dialogflow(embedded=make_actions_sdk_gen2())
        body["originalRequest"]["version"] = 2

        assert detect({}, body).generation == ApiGeneration.GEN2

    def test_current_envelope(self, make_current_dialogflow, make_actions_sdk_gen2):
        """Test queryResult selects the current envelope."""
        wire_format = detect({}, make_current_dialogflow(embedded=make_actions_sdk_gen2()))

        assert wire_format.front_end == FrontEnd.DIALOGFLOW
        assert wire_format.envelope == DialogflowEnvelope.CURRENT
        assert wire_format.generation == ApiGeneration.GEN2

    def test_legacy_without_embedded_request(self, make_legacy_dialogflow):
        """Test a bare result envelope is generation 1 Dialogflow."""
        wire_format = detect({}, make_legacy_dialogflow())

        assert wire_format.label == "dialogflow/gen1/result"

    @pytest.mark.parametrize("body", [None, "text", [], {}, {"inputs": "nope"}])
    def test_unknown_shape_never_raises(self, body):
        """Test unknown bodies fall back to a best guess."""
        wire_format = detect({}, body)

        assert wire_format.generation == ApiGeneration.GEN1
        assert wire_format.front_end == FrontEnd.DIALOGFLOW
        assert is_known_shape(body) is False

    def test_known_shapes(self, make_actions_sdk_gen2, make_legacy_dialogflow, make_current_dialogflow):
        """Test all request shapes are recognized."""
        assert is_known_shape(make_actions_sdk_gen2())
        assert is_known_shape(make_legacy_dialogflow())
        assert is_known_shape(make_current_dialogflow())


class TestKeyTransforms:
    """Tests for generation 1 key transforms."""

    def test_camel_case(self):
        """Test converting snake_case keys to camelCase."""
        assert camel_case("conversation_token") == "conversationToken"
        assert camel_case("userId") == "userId"
        assert camel_case("@type") == "@type"

    def test_nested_transform(self):
        """Test nested mappings and lists are converted."""
        converted = to_camel_case({"raw_inputs": [{"input_type": 2}], "user": {"user_id": "u"}})

        assert converted == {"rawInputs": [{"inputType": 2}], "user": {"userId": "u"}}
