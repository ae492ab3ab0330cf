"""
Conversation

The unified per-turn model handed to intent handlers. A Conversation is
built fresh from each inbound body, owned by that one request, and thrown
away when the response is written. Handlers read the turn through its
accessors and answer through exactly one ``ask``/``tell`` family call; any
later call is ignored.

A Conversation is not safe for concurrent use: a handler must not mutate it
from overlapping tasks.
"""

import copy
import hmac
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import structlog

from actions_bridge.conversation.arguments import Argument, Arguments
from actions_bridge.conversation.state import ContextEntry, ContextSet, decode_payload, encode_json
from actions_bridge.conversation.turns import DialogflowTurn, Turn
from actions_bridge.core.exceptions import InvalidResponseError, MissingInputError
from actions_bridge.responses.builder import (
    ResponseInput,
    ResponseModel,
    build_ask,
    build_followup,
    build_system_intent,
    build_tell,
)
from actions_bridge.responses.options import CarouselSelect, ListSelect
from actions_bridge.responses.rich import RichResponse, SimpleResponse
from actions_bridge.responses.system_intents import (
    confirmation_intent,
    datetime_intent,
    deep_link_intent,
    delivery_address_intent,
    new_surface_intent,
    option_intent,
    permission_intent,
    place_intent,
    register_update_intent,
    sign_in_intent,
    transaction_decision_intent,
    transaction_requirements_intent,
    update_permission_intent,
)
from actions_bridge.responses.transactions import TransactionConfig
from actions_bridge.serialization.serializer import Serializer
from actions_bridge.wire.detector import header_value
from actions_bridge.wire.models import (
    AGENT_VERSION_LABEL_HEADER,
    OPTION_SELECT_CONTEXT,
    ORIGINAL_SUFFIX,
    ApiGeneration,
    ConversationType,
    DeliveryAddressDecision,
    FrontEnd,
    InputType,
    SignInStatus,
    TransactionRequirementsResult,
    WireFormat,
    built_in_arg_names,
    standard_intents,
)

logger = structlog.get_logger(__name__)


class Conversation:
    """
    Normalized view of one webhook turn.

    Attributes:
        wire_format: Detected generation, front end and envelope
        raw_body: The untouched inbound payload
        headers: Inbound HTTP headers
        arguments: System-intent arguments of the first input
        response: The committed response, once a handler answered
    """

    def __init__(self, turn: Turn, headers: Optional[Mapping[str, Any]] = None) -> None:
        self.turn = turn
        self.wire_format: WireFormat = turn.wire_format
        self.raw_body = turn.raw_body
        self.headers: Dict[str, Any] = dict(headers or {})
        self.arguments: Arguments = turn.arguments_of()
        self.response: Optional[ResponseModel] = None
        self._state = turn.state

        raw_storage = None
        user = turn.app_request.user if turn.app_request else None
        if user is not None:
            raw_storage = user.user_storage
        stored, _ = decode_payload(raw_storage, source="user_storage")
        stored_data = stored.get("data")
        self.user_storage: Dict[str, Any] = dict(stored_data) if isinstance(stored_data, dict) else {}
        self._user_storage_in = encode_json({"data": self.user_storage})

        self.logger = logger.bind(format=self.wire_format.label, intent=self.intent)

    # =========================================================================
    # Turn Identity
    # =========================================================================

    @property
    def api_generation(self) -> ApiGeneration:
        return self.wire_format.generation

    @property
    def front_end(self) -> FrontEnd:
        return self.wire_format.front_end

    @property
    def standard_intents(self) -> type:
        return standard_intents(self.api_generation)

    @property
    def built_in_arg_names(self) -> type:
        return built_in_arg_names(self.api_generation)

    @property
    def intent(self) -> Optional[str]:
        """Dispatch key: the intent (Actions SDK) or action (Dialogflow)."""
        return self.turn.intent_key()

    @property
    def action(self) -> Optional[str]:
        if isinstance(self.turn, DialogflowTurn):
            return self.turn.action
        return None

    @property
    def intent_name(self) -> Optional[str]:
        if isinstance(self.turn, DialogflowTurn):
            return self.turn.intent_name
        return self.intent

    @property
    def query(self) -> Optional[str]:
        return self.turn.query()

    @property
    def parameters(self) -> Dict[str, Any]:
        """NLU slot values (Dialogflow only)."""
        return self.turn.parameters()

    def get_parameter(self, name: str) -> Any:
        return self.parameters.get(name)

    # =========================================================================
    # Session State
    # =========================================================================

    @property
    def data(self) -> Dict[str, Any]:
        """Session data round-tripped through the dialog token or reserved context."""
        return self._state.data

    @data.setter
    def data(self, value: Dict[str, Any]) -> None:
        if not isinstance(value, dict):
            raise TypeError("Session data must be a dict")
        self._state.data = value

    @property
    def state(self) -> Optional[str]:
        return self._state.state

    @state.setter
    def state(self, value: Any) -> None:
        self._state.set_state(value)

    @property
    def state_lost(self) -> bool:
        """True when a persisted payload arrived but could not be decoded."""
        return self._state.state_lost

    @property
    def dialog_token(self) -> Dict[str, Any]:
        return copy.deepcopy(self._state.dialog_token)

    def user_storage_out(self) -> Optional[str]:
        """Serialized user storage, or None when unchanged."""
        out = encode_json({"data": self.user_storage}, source="user storage")
        return None if out == self._user_storage_in else out

    # =========================================================================
    # Contexts
    # =========================================================================

    @property
    def contexts(self) -> ContextSet:
        return self.turn.contexts()

    def _warn_contexts(self) -> None:
        if self.front_end != FrontEnd.DIALOGFLOW:
            self.logger.debug("contexts_unsupported", front_end=self.front_end.value)

    def set_context(self, name: str, lifespan: int = 1, parameters: Optional[Dict[str, Any]] = None) -> ContextEntry:
        self._warn_contexts()
        return self.contexts.set(name, lifespan, parameters)

    def delete_context(self, name: str) -> ContextEntry:
        self._warn_contexts()
        return self.contexts.delete(name)

    def get_context(self, name: str) -> Optional[ContextEntry]:
        return self.contexts.get(name)

    def get_contexts(self) -> List[ContextEntry]:
        return self.contexts.inbound()

    def get_context_argument(self, context_name: str, argument_name: str) -> Optional[Dict[str, Any]]:
        """
        Read one parameter of an inbound context.

        Returns:
            ``{"value": ..., "original": ...}`` or None when absent
        """
        context = self.contexts.get(context_name)
        if context is None:
            self.logger.debug("context_missing", context=context_name)
            return None
        if argument_name not in context.parameters:
            return None
        result = {"value": context.parameters[argument_name]}
        original = context.parameters.get(argument_name + ORIGINAL_SUFFIX)
        if original is not None:
            result["original"] = original
        return result

    # =========================================================================
    # User, Device and Surface
    # =========================================================================

    @property
    def _app(self) -> Any:
        return self.turn.app_request

    @property
    def user_id(self) -> Optional[str]:
        return self._app.user.user_id if self._app and self._app.user else None

    @property
    def user_locale(self) -> Optional[str]:
        return self._app.user.locale if self._app and self._app.user else None

    @property
    def user_name(self) -> Optional[Dict[str, Optional[str]]]:
        """Display, given and family name once NAME permission was granted."""
        if not (self._app and self._app.user and self._app.user.profile):
            return None
        profile = self._app.user.profile
        return {
            "display_name": profile.display_name,
            "given_name": profile.given_name,
            "family_name": profile.family_name,
        }

    @property
    def access_token(self) -> Optional[str]:
        return self._app.user.access_token if self._app and self._app.user else None

    @property
    def last_seen(self) -> Optional[str]:
        return self._app.user.last_seen if self._app and self._app.user else None

    @property
    def device_location(self) -> Optional[Dict[str, Any]]:
        if not (self._app and self._app.device and self._app.device.location):
            return None
        return self._app.device.location.model_dump(exclude_none=True)

    @property
    def surface_capabilities(self) -> List[str]:
        if not (self._app and self._app.surface):
            return []
        return [capability.name for capability in self._app.surface.capabilities]

    def has_surface_capability(self, capability: str) -> bool:
        return capability in self.surface_capabilities

    @property
    def available_surfaces(self) -> List[List[str]]:
        if not self._app:
            return []
        return [[capability.name for capability in surface.capabilities] for surface in self._app.available_surfaces]

    def has_available_surface_capabilities(self, *capabilities: str) -> bool:
        """True when one available surface has every capability."""
        return any(all(cap in surface for cap in capabilities) for surface in self.available_surfaces)

    @property
    def is_in_sandbox(self) -> bool:
        return bool(self._app and self._app.is_in_sandbox)

    @property
    def conversation_id(self) -> Optional[str]:
        if self._app and self._app.conversation:
            return self._app.conversation.conversation_id
        return None

    @property
    def conversation_type(self) -> ConversationType:
        if self._app and self._app.conversation:
            return ConversationType.parse(self._app.conversation.type)
        return ConversationType.UNSPECIFIED

    @property
    def input_type(self) -> InputType:
        first = self.turn.first_input
        if first is None or not first.raw_inputs:
            return InputType.UNSPECIFIED
        return InputType.parse(first.raw_inputs[0].input_type)

    @property
    def action_version_label(self) -> Optional[str]:
        return header_value(self.headers, AGENT_VERSION_LABEL_HEADER)

    def is_request_from(self, key: str, value: str) -> bool:
        """Compare a header against a developer-configured value."""
        actual = header_value(self.headers, key)
        if actual is None or value is None:
            return False
        return hmac.compare_digest(str(actual), str(value))

    # =========================================================================
    # System Intent Results
    # =========================================================================

    def get_argument(self, name: str) -> Any:
        value = self.arguments.value(name)
        if value is None:
            self.logger.debug("argument_missing", argument=name)
        return value

    def require_argument(self, name: str) -> Argument:
        argument = self.arguments.get(name)
        if argument is None:
            raise MissingInputError(f"argument {name}")
        return argument

    def _extension(self, name: str) -> Dict[str, Any]:
        argument = self.arguments.get(name)
        if argument is None or not argument.extension:
            return {}
        return argument.extension

    def is_permission_granted(self) -> bool:
        argument = self.arguments.get(self.built_in_arg_names.PERMISSION_GRANTED)
        if argument is None:
            return False
        if argument.bool_value is not None:
            return argument.bool_value
        return argument.text_value == "true"

    def get_sign_in_status(self) -> SignInStatus:
        status = self._extension(self.built_in_arg_names.SIGN_IN).get("status")
        try:
            return SignInStatus(status)
        except ValueError:
            return SignInStatus.UNSPECIFIED

    def get_user_confirmation(self) -> Optional[bool]:
        argument = self.arguments.get(self.built_in_arg_names.CONFIRMATION)
        return argument.bool_value if argument else None

    def get_date_time(self) -> Optional[Dict[str, Any]]:
        argument = self.arguments.get(self.built_in_arg_names.DATETIME)
        return argument.datetime_value if argument else None

    def get_selected_option(self) -> Optional[str]:
        argument = self.arguments.get(self.built_in_arg_names.OPTION)
        if argument and argument.text_value:
            return argument.text_value
        selected = self.get_context_argument(OPTION_SELECT_CONTEXT, self.built_in_arg_names.OPTION)
        return selected["value"] if selected else None

    def get_delivery_address(self) -> Optional[Dict[str, Any]]:
        extension = self._extension(self.built_in_arg_names.DELIVERY_ADDRESS_VALUE)
        if extension.get("userDecision") != DeliveryAddressDecision.ACCEPTED.value:
            return None
        return extension.get("location")

    def get_transaction_decision(self) -> Optional[Dict[str, Any]]:
        return self._extension(self.built_in_arg_names.TRANSACTION_DECISION_VALUE) or None

    def get_transaction_requirements_result(self) -> Optional[TransactionRequirementsResult]:
        result_type = self._extension(self.built_in_arg_names.TRANSACTION_REQ_CHECK_RESULT).get("resultType")
        if result_type is None:
            return None
        try:
            return TransactionRequirementsResult(result_type)
        except ValueError:
            return TransactionRequirementsResult.UNSPECIFIED

    def get_place(self) -> Optional[Dict[str, Any]]:
        argument = self.arguments.get(self.built_in_arg_names.PLACE)
        return argument.place_value if argument else None

    def is_new_surface(self) -> bool:
        return self._extension(self.built_in_arg_names.NEW_SURFACE).get("status") == "OK"

    def is_update_registered(self) -> bool:
        return self._extension(self.built_in_arg_names.REGISTER_UPDATE).get("status") == "OK"

    def get_media_status(self) -> Optional[str]:
        return self._extension(self.built_in_arg_names.MEDIA_STATUS).get("status")

    def get_reprompt_count(self) -> Optional[int]:
        argument = self.arguments.get(self.built_in_arg_names.REPROMPT_COUNT)
        return argument.int_value if argument else None

    def is_final_reprompt(self) -> bool:
        argument = self.arguments.get(self.built_in_arg_names.IS_FINAL_REPROMPT)
        return bool(argument and argument.bool_value)

    # =========================================================================
    # Responding
    # =========================================================================

    @property
    def responded(self) -> bool:
        return self.response is not None

    def _respond(self, build: Callable[..., ResponseModel], *args: Any, **kwargs: Any) -> Optional[ResponseModel]:
        if self.response is not None:
            self.logger.info("response_ignored", reason="already_responded")
            return None
        model = build(*args, **kwargs)
        model.validate()
        self.response = model
        self.logger.debug("response_committed", ask=model.expect_user_response)
        return model

    def ask(
        self,
        response: ResponseInput,
        no_input: Optional[Sequence[str]] = None,
        no_match: Optional[Sequence[str]] = None,
        speech_biasing_hints: Optional[Sequence[str]] = None,
    ) -> Optional[ResponseModel]:
        """
        Respond and keep listening.

        Args:
            response: Text/SSML, a SimpleResponse, a RichResponse or an InputPrompt
            no_input: Reprompts for silence (max 3)
            no_match: Reprompts for unrecognized input (max 3)
            speech_biasing_hints: Phrases that bias recognition

        Returns:
            The committed response, or None if this turn already responded
        """
        return self._respond(build_ask, response, no_input, no_match, speech_biasing_hints)

    def tell(self, response: Union[str, SimpleResponse, RichResponse]) -> Optional[ResponseModel]:
        """Respond and end the conversation."""
        return self._respond(build_tell, response)

    def ask_with_list(self, prompt: ResponseInput, options: ListSelect) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(option_intent(options), prompt))

    def ask_with_carousel(self, prompt: ResponseInput, options: CarouselSelect) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(option_intent(options), prompt))

    def ask_for_permission(self, context: str, permission: str) -> Optional[ResponseModel]:
        return self.ask_for_permissions(context, [permission])

    def ask_for_permissions(self, context: str, permissions: Sequence[str]) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(permission_intent(context, permissions)))

    def ask_for_update_permission(
        self, intent: str, arguments: Optional[List[Dict[str, Any]]] = None
    ) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(update_permission_intent(intent, arguments)))

    def ask_for_sign_in(self, action_phrase: str) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(sign_in_intent(action_phrase)))

    def ask_for_confirmation(self, prompt: Optional[str] = None) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(confirmation_intent(prompt)))

    def ask_for_date_time(
        self,
        initial_prompt: Optional[str] = None,
        date_prompt: Optional[str] = None,
        time_prompt: Optional[str] = None,
    ) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(datetime_intent(initial_prompt, date_prompt, time_prompt)))

    def ask_for_delivery_address(self, reason: str) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(delivery_address_intent(reason)))

    def ask_for_transaction_requirements(
        self, config: Union[TransactionConfig, Mapping[str, Any], None] = None
    ) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(transaction_requirements_intent(config)))

    def ask_for_transaction_decision(
        self, order: Mapping[str, Any], config: Union[TransactionConfig, Mapping[str, Any]]
    ) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(transaction_decision_intent(order, config)))

    def ask_for_place(self, request_prompt: str, permission_context: str) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(place_intent(request_prompt, permission_context)))

    def ask_to_deep_link(
        self,
        destination: str,
        url: str,
        package_name: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(deep_link_intent(destination, url, package_name, reason)))

    def ask_for_new_surface(
        self, context: str, notification_title: str, capabilities: Union[str, Sequence[str]]
    ) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(new_surface_intent(context, notification_title, capabilities)))

    def ask_to_register_daily_update(
        self, intent: str, arguments: Optional[List[Dict[str, Any]]] = None
    ) -> Optional[ResponseModel]:
        return self._respond(lambda: build_system_intent(register_update_intent(intent, arguments)))

    def followup(
        self, event: str, parameters: Optional[Dict[str, Any]] = None, lang: Optional[str] = None
    ) -> Optional[ResponseModel]:
        """Trigger a Dialogflow event instead of speaking."""
        if self.front_end != FrontEnd.DIALOGFLOW:
            raise InvalidResponseError("Followup events require the Dialogflow front end")
        return self._respond(build_followup, event, parameters, lang)

    # =========================================================================
    # Serialization
    # =========================================================================

    def serialize(self, serializer: Serializer, response: Optional[ResponseModel] = None) -> Dict[str, Any]:
        """
        Wire JSON for ``response`` (defaults to the committed response).

        Raises:
            UnserializableDataError: Developer data in the body is not JSON encodable
        """
        model = response or self.response
        if model is None:
            raise InvalidResponseError("No response was produced for this turn")
        body = self.turn.serialize(serializer, model, self.user_storage_out())
        encode_json(body, source="response body")
        return body

    def __repr__(self) -> str:
        return f"Conversation(format={self.wire_format.label!r}, intent={self.intent!r}, state={self.state!r})"
