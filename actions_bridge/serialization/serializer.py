"""
Serializer

Projects a ResponseModel and the conversation state into the exact JSON
shape of the detected wire format. Serialization is pure: inputs are never
mutated and identical inputs give identical output.

Shapes produced:

    Actions SDK    conversationToken / expectedInputs / finalResponse
    Dialogflow     speech / data.google / contextOut               (result)
                   fulfillmentText / payload.google / outputContexts (queryResult)

Generation 1 renames fields to snake_case (the whole Actions SDK body, the
``data`` block on Dialogflow) and collapses rich responses to their first
simple item.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import structlog

from actions_bridge.conversation.state import ContextEntry, ConversationState
from actions_bridge.core.config import AdapterSettings
from actions_bridge.core.exceptions import InvalidResponseError
from actions_bridge.responses.builder import ResponseModel
from actions_bridge.responses.rich import RichResponse, SimpleResponse
from actions_bridge.responses.ssml import is_ssml, speech_fields
from actions_bridge.serialization.fields import to_gen1
from actions_bridge.wire.detector import header_value
from actions_bridge.wire.models import (
    ACTIONS_API_VERSION_HEADER,
    ASSISTANT_API_VERSION_HEADER,
    CONTENT_TYPE_HEADER,
    CONTENT_TYPE_JSON,
    CURRENT_DATA_CONTEXT,
    LEGACY_DATA_CONTEXT,
    ApiGeneration,
    DialogflowEnvelope,
    FrontEnd,
    WireFormat,
    standard_intents,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Outbound:
    """Everything the serializer reads for one turn."""

    wire_format: WireFormat
    state: ConversationState
    response: ResponseModel
    session: Optional[str] = None
    language: Optional[str] = None
    user_storage: Optional[str] = None


def response_headers(request_headers: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """JSON content type plus the version headers the request carried."""
    headers = {CONTENT_TYPE_HEADER: CONTENT_TYPE_JSON}
    for name in (ASSISTANT_API_VERSION_HEADER, ACTIONS_API_VERSION_HEADER):
        value = header_value(request_headers, name)
        if value is not None:
            headers[name] = str(value)
    return headers


def _collapsed_speech(response: ResponseModel) -> str:
    speech = response.speech()
    if speech is None:
        raise InvalidResponseError()
    return speech


class Serializer:
    """Wire JSON projection for all four request shapes."""

    def __init__(self, settings: Optional[AdapterSettings] = None) -> None:
        self.settings = settings or AdapterSettings()

    def serialize(self, outbound: Outbound) -> Dict[str, Any]:
        wire_format = outbound.wire_format
        if wire_format.front_end == FrontEnd.ACTIONS_SDK:
            body = self.actions_sdk(outbound)
        elif wire_format.envelope == DialogflowEnvelope.CURRENT:
            body = self.dialogflow_current(outbound)
        else:
            body = self.dialogflow_legacy(outbound)
        logger.debug("response_serialized", format=wire_format.label, ask=outbound.response.expect_user_response)
        return body

    # =========================================================================
    # Shared pieces
    # =========================================================================

    @staticmethod
    def _rich(response: ResponseModel, generation: ApiGeneration) -> Optional[RichResponse]:
        """The rich response to emit, or None when plain speech is used."""
        if generation == ApiGeneration.GEN2:
            return response.rich_response
        return None

    @staticmethod
    def _as_rich(response: ResponseModel, generation: ApiGeneration) -> RichResponse:
        rich = Serializer._rich(response, generation)
        if rich is not None:
            return rich
        return RichResponse().add_simple_response(SimpleResponse(speech=_collapsed_speech(response)))

    @staticmethod
    def _initial_prompts(response: ResponseModel) -> List[Dict[str, Any]]:
        if response.prompt is not None:
            return response.prompt.initial_prompts()
        return [speech_fields(_collapsed_speech(response))]

    # =========================================================================
    # Actions SDK
    # =========================================================================

    def _input_prompt(self, response: ResponseModel, generation: ApiGeneration) -> Dict[str, Any]:
        rich = self._rich(response, generation)
        if rich is not None:
            prompt: Dict[str, Any] = {
                "richInitialPrompt": rich.to_wire(),
                "noInputPrompts": response.no_input_prompts(),
            }
        else:
            prompt = {
                "initialPrompts": self._initial_prompts(response),
                "noInputPrompts": response.no_input_prompts(),
            }
        no_match = response.no_match_prompts()
        if no_match:
            prompt["noMatchPrompts"] = no_match
        return prompt

    def actions_sdk(self, outbound: Outbound) -> Dict[str, Any]:
        generation = outbound.wire_format.generation
        response = outbound.response
        if response.followup is not None:
            raise InvalidResponseError("Followup events require the Dialogflow front end")

        body: Dict[str, Any] = {}
        if response.expect_user_response:
            body["conversationToken"] = outbound.state.dialog_token_out()
            body["expectUserResponse"] = True
            if response.system_intent is not None:
                possible = [response.system_intent.expected_intent(generation)]
            else:
                possible = [{"intent": standard_intents(generation).TEXT}]
            expected_input: Dict[str, Any] = {
                "inputPrompt": self._input_prompt(response, generation),
                "possibleIntents": possible,
            }
            if response.speech_biasing_hints:
                expected_input["speechBiasingHints"] = list(response.speech_biasing_hints)
            body["expectedInputs"] = [expected_input]
        else:
            body["expectUserResponse"] = False
            rich = self._rich(response, generation)
            if rich is not None:
                body["finalResponse"] = {"richResponse": rich.to_wire()}
            else:
                body["finalResponse"] = {"speechResponse": speech_fields(_collapsed_speech(response))}
        if outbound.user_storage is not None:
            body["userStorage"] = outbound.user_storage

        return body if generation == ApiGeneration.GEN2 else to_gen1(body)

    # =========================================================================
    # Dialogflow
    # =========================================================================

    def _google(self, outbound: Outbound, always_rich: bool) -> Dict[str, Any]:
        generation = outbound.wire_format.generation
        response = outbound.response
        google: Dict[str, Any] = {"expectUserResponse": response.expect_user_response}

        rich = self._as_rich(response, generation) if always_rich else self._rich(response, generation)
        if rich is not None:
            google["richResponse"] = rich.to_wire()
            no_input = response.no_input_prompts()
            if no_input:
                google["noInputPrompts"] = no_input
        else:
            google["isSsml"] = is_ssml(_collapsed_speech(response))
            google["noInputPrompts"] = response.no_input_prompts()

        if response.system_intent is not None:
            google["systemIntent"] = response.system_intent.dialogflow_system_intent(generation)
        if response.speech_biasing_hints:
            google["speechBiasingHints"] = list(response.speech_biasing_hints)
        if outbound.user_storage is not None:
            google["userStorage"] = outbound.user_storage
        return google

    def dialogflow_legacy(self, outbound: Outbound) -> Dict[str, Any]:
        response = outbound.response
        if response.followup is not None:
            body: Dict[str, Any] = {
                "followupEvent": {
                    "name": response.followup.name,
                    "data": dict(response.followup.parameters),
                }
            }
        else:
            data = {"google": self._google(outbound, always_rich=False)}
            if outbound.wire_format.generation == ApiGeneration.GEN1:
                data = to_gen1(data)
            body = {"speech": _collapsed_speech(response), "data": data}

        context_out: List[Dict[str, Any]] = []
        if response.expect_user_response:
            reserved = outbound.state.legacy_reserved_context(
                LEGACY_DATA_CONTEXT, self.settings.legacy_context_lifespan
            )
            context_out.append(reserved.to_dict())
        # The v1 envelope expresses deletion by omission
        for entry in outbound.state.contexts.outgoing():
            if not entry.is_expired:
                context_out.append(entry.to_dict())
        body["contextOut"] = context_out
        return body

    @staticmethod
    def _current_context(entry: ContextEntry, session: Optional[str]) -> Dict[str, Any]:
        context: Dict[str, Any] = {
            "name": f"{session}/contexts/{entry.name}" if session else entry.name,
            "lifespanCount": entry.lifespan,
        }
        if entry.parameters:
            context["parameters"] = entry.to_dict()["parameters"]
        return context

    def dialogflow_current(self, outbound: Outbound) -> Dict[str, Any]:
        response = outbound.response
        if response.followup is not None:
            body: Dict[str, Any] = {
                "followupEventInput": {
                    "name": response.followup.name,
                    "parameters": dict(response.followup.parameters),
                    "languageCode": response.followup.language or outbound.language,
                }
            }
        else:
            payload = {"google": self._google(outbound, always_rich=True)}
            if outbound.wire_format.generation == ApiGeneration.GEN1:
                payload = to_gen1(payload)
            body = {"fulfillmentText": response.display_text() or "", "payload": payload}

        output_contexts: List[Dict[str, Any]] = []
        if response.expect_user_response:
            reserved = outbound.state.current_reserved_context(
                CURRENT_DATA_CONTEXT, self.settings.current_context_lifespan
            )
            output_contexts.append(self._current_context(reserved, outbound.session))
        # The v2 envelope expresses deletion with lifespanCount 0
        for entry in outbound.state.contexts.outgoing():
            output_contexts.append(self._current_context(entry, outbound.session))
        if output_contexts:
            body["outputContexts"] = output_contexts
        return body
