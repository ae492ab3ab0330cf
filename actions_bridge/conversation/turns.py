"""
Turn Variants

One turn variant per front end. Both expose the same capabilities
(dispatch key, arguments, contexts, serialization); the façade picks the
variant once, from the detected wire format, and never branches on the
front end again.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import structlog

from actions_bridge.conversation.arguments import Arguments
from actions_bridge.conversation.state import ContextEntry, ContextSet, ConversationState
from actions_bridge.responses.builder import ResponseModel
from actions_bridge.serialization.serializer import Outbound, Serializer
from actions_bridge.wire.models import (
    CURRENT_DATA_CONTEXT,
    LEGACY_DATA_CONTEXT,
    ApiGeneration,
    DialogflowEnvelope,
    FrontEnd,
    WireFormat,
)
from actions_bridge.wire.schemas import (
    AppRequest,
    CurrentWebhookRequest,
    Input,
    LegacyWebhookRequest,
)
from actions_bridge.wire.transform import to_camel_case

logger = structlog.get_logger(__name__)

_CONTEXT_NAME = re.compile(r"([^/]+)?$")


def _app_request(raw: Any, generation: ApiGeneration) -> Optional[AppRequest]:
    """Validate an embedded Actions request; generation 1 keys are camelized first."""
    if not isinstance(raw, Mapping):
        return None
    if generation == ApiGeneration.GEN1:
        raw = to_camel_case(dict(raw))
    return AppRequest.model_validate(raw)


class Turn(ABC):
    """
    Capability interface shared by the turn variants.

    Attributes:
        wire_format: Detected wire format
        raw_body: The untouched inbound body
        app_request: Actions request (direct, or embedded by Dialogflow)
        state: Hydrated conversation state
    """

    def __init__(self, wire_format: WireFormat, body: Mapping[str, Any]) -> None:
        self.wire_format = wire_format
        self.raw_body = body
        self.app_request: Optional[AppRequest] = None
        self.state = ConversationState()

    @property
    def first_input(self) -> Optional[Input]:
        if self.app_request is None or not self.app_request.inputs:
            return None
        return self.app_request.inputs[0]

    @abstractmethod
    def intent_key(self) -> Optional[str]:
        """Dispatch key for this turn."""

    def arguments_of(self) -> Arguments:
        first = self.first_input
        if first is None:
            return Arguments()
        return Arguments.from_wire(first.arguments)

    def contexts(self) -> ContextSet:
        return self.state.contexts

    def query(self) -> Optional[str]:
        first = self.first_input
        if first is None or not first.raw_inputs:
            return None
        return first.raw_inputs[0].query

    def parameters(self) -> Dict[str, Any]:
        return {}

    @property
    def session(self) -> Optional[str]:
        return None

    @property
    def language(self) -> Optional[str]:
        if self.app_request and self.app_request.user:
            return self.app_request.user.locale
        return None

    def serialize(
        self,
        serializer: Serializer,
        response: ResponseModel,
        user_storage: Optional[str] = None,
    ) -> Dict[str, Any]:
        return serializer.serialize(
            Outbound(
                wire_format=self.wire_format,
                state=self.state,
                response=response,
                session=self.session,
                language=self.language,
                user_storage=user_storage,
            )
        )


class ActionsSdkTurn(Turn):
    """Turn from the Actions SDK: ``inputs`` at the top level."""

    def __init__(self, wire_format: WireFormat, body: Mapping[str, Any]) -> None:
        super().__init__(wire_format, body)
        self.app_request = _app_request(body, wire_format.generation)
        conversation = self.app_request.conversation if self.app_request else None
        self.state = ConversationState.from_dialog_token(
            conversation.conversation_token if conversation else None
        )

    def intent_key(self) -> Optional[str]:
        first = self.first_input
        if first is None or not first.intent:
            logger.warning("missing_input", field="inputs[0].intent")
            return None
        return first.intent


class DialogflowTurn(Turn):
    """Turn from Dialogflow, in either the ``result`` or ``queryResult`` envelope."""

    def __init__(self, wire_format: WireFormat, body: Mapping[str, Any]) -> None:
        super().__init__(wire_format, body)
        self.envelope = wire_format.envelope or DialogflowEnvelope.LEGACY
        self._action: Optional[str] = None
        self._intent_name: Optional[str] = None
        self._query: Optional[str] = None
        self._parameters: Dict[str, Any] = {}
        self._session: Optional[str] = None
        self._language: Optional[str] = None

        if self.envelope == DialogflowEnvelope.CURRENT:
            self._read_current(body)
        else:
            self._read_legacy(body)

    def _read_legacy(self, body: Mapping[str, Any]) -> None:
        request = LegacyWebhookRequest.model_validate(body)
        result = request.result
        self._action = result.action
        self._intent_name = result.metadata.intent_name if result.metadata else None
        self._query = result.resolved_query
        self._parameters = dict(result.parameters)
        self._session = request.session_id
        self._language = request.lang
        if request.original_request is not None:
            self.app_request = _app_request(request.original_request.data, self.wire_format.generation)
        contexts = [
            ContextEntry(
                name=context.name,
                lifespan=context.lifespan,
                parameters=dict(context.parameters or {}),
            )
            for context in result.contexts
        ]
        self.state = ConversationState.from_legacy_contexts(contexts, LEGACY_DATA_CONTEXT)

    def _read_current(self, body: Mapping[str, Any]) -> None:
        request = CurrentWebhookRequest.model_validate(body)
        result = request.query_result
        self._action = result.action
        self._intent_name = result.intent.display_name if result.intent else None
        self._query = result.query_text
        self._parameters = dict(result.parameters)
        self._session = request.session
        self._language = result.language_code
        if request.original_detect_intent_request is not None:
            self.app_request = _app_request(
                request.original_detect_intent_request.payload, self.wire_format.generation
            )
        contexts: List[ContextEntry] = []
        for context in result.output_contexts:
            # Names arrive as <session>/contexts/<name>
            match = _CONTEXT_NAME.search(context.name)
            contexts.append(
                ContextEntry(
                    name=match.group(0) if match and match.group(0) else context.name,
                    lifespan=context.lifespan_count,
                    parameters=dict(context.parameters or {}),
                )
            )
        self.state = ConversationState.from_current_contexts(contexts, CURRENT_DATA_CONTEXT)

    @property
    def action(self) -> Optional[str]:
        return self._action

    @property
    def intent_name(self) -> Optional[str]:
        return self._intent_name

    def intent_key(self) -> Optional[str]:
        key = self._action or self._intent_name
        if not key:
            logger.warning("missing_input", field="action")
        return key or None

    def query(self) -> Optional[str]:
        return self._query if self._query is not None else super().query()

    def parameters(self) -> Dict[str, Any]:
        return dict(self._parameters)

    @property
    def session(self) -> Optional[str]:
        return self._session

    @property
    def language(self) -> Optional[str]:
        return self._language or super().language


def build_turn(wire_format: WireFormat, body: Mapping[str, Any]) -> Turn:
    """Construct the turn variant for a detected wire format."""
    if wire_format.front_end == FrontEnd.ACTIONS_SDK:
        return ActionsSdkTurn(wire_format, body)
    return DialogflowTurn(wire_format, body)
