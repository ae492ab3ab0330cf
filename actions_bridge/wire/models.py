"""
Wire Format Model

Enumerations and protocol constants shared by both API generations and both
front ends (Actions SDK and Dialogflow).
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


# =============================================================================
# Format Identification
# =============================================================================


class ApiGeneration(IntEnum):
    """Actions conversation API generation."""

    GEN1 = 1  # snake_case proto2 payloads
    GEN2 = 2  # camelCase proto3 payloads


class FrontEnd(str, Enum):
    """Integration that produced the webhook call."""

    ACTIONS_SDK = "actions_sdk"
    DIALOGFLOW = "dialogflow"


class DialogflowEnvelope(str, Enum):
    """Shape of the Dialogflow request envelope."""

    LEGACY = "result"        # API.AI v1: result / contexts / contextOut
    CURRENT = "queryResult"  # v2: queryResult / outputContexts


@dataclass(frozen=True)
class WireFormat:
    """Detected wire format of one turn."""

    generation: ApiGeneration
    front_end: FrontEnd
    envelope: Optional[DialogflowEnvelope] = None

    @property
    def label(self) -> str:
        parts = [self.front_end.value, f"gen{int(self.generation)}"]
        if self.envelope is not None:
            parts.append(self.envelope.value)
        return "/".join(parts)


# =============================================================================
# HTTP
# =============================================================================

ACTIONS_API_VERSION_HEADER = "Google-Actions-API-Version"
ASSISTANT_API_VERSION_HEADER = "Google-Assistant-API-Version"
AGENT_VERSION_LABEL_HEADER = "Agent-Version-Label"
CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_TEXT = "text/plain; charset=utf-8"

RESPONSE_CODE_OK = 200


# =============================================================================
# Protocol Constants
# =============================================================================

ANY_TYPE_PROPERTY = "@type"

# Reserved Dialogflow context holding session data
LEGACY_DATA_CONTEXT = "_actions_on_google_"
CURRENT_DATA_CONTEXT = "_actions_on_google"

# Dialogflow context carrying the selected option
OPTION_SELECT_CONTEXT = "actions_intent_option"
ORIGINAL_SUFFIX = ".original"

PLACEHOLDER_PROMPTS = {
    "PERMISSION": "PLACEHOLDER_FOR_PERMISSION",
    "OPTION": "PLACEHOLDER_FOR_OPTION",
    "TRANSACTION_REQUIREMENTS_CHECK": "PLACEHOLDER_FOR_TXN_REQUIREMENTS",
    "TRANSACTION_DECISION": "PLACEHOLDER_FOR_TXN_DECISION",
    "DELIVERY_ADDRESS": "PLACEHOLDER_FOR_DELIVERY_ADDRESS",
    "CONFIRMATION": "PLACEHOLDER_FOR_CONFIRMATION",
    "DATETIME": "PLACEHOLDER_FOR_DATETIME",
    "SIGN_IN": "PLACEHOLDER_FOR_SIGN_IN",
    "PLACE": "PLACEHOLDER_FOR_PLACE",
    "NEW_SURFACE": "PLACEHOLDER_FOR_NEW_SURFACE",
    "REGISTER_UPDATE": "PLACEHOLDER_FOR_REGISTER_UPDATE",
    "LINK": "PLACEHOLDER_FOR_LINK",
}


class StandardIntents:
    """Built-in intents for generation 2."""

    MAIN = "actions.intent.MAIN"
    TEXT = "actions.intent.TEXT"
    PERMISSION = "actions.intent.PERMISSION"
    OPTION = "actions.intent.OPTION"
    TRANSACTION_REQUIREMENTS_CHECK = "actions.intent.TRANSACTION_REQUIREMENTS_CHECK"
    DELIVERY_ADDRESS = "actions.intent.DELIVERY_ADDRESS"
    TRANSACTION_DECISION = "actions.intent.TRANSACTION_DECISION"
    PLACE = "actions.intent.PLACE"
    CONFIRMATION = "actions.intent.CONFIRMATION"
    DATETIME = "actions.intent.DATETIME"
    SIGN_IN = "actions.intent.SIGN_IN"
    NO_INPUT = "actions.intent.NO_INPUT"
    CANCEL = "actions.intent.CANCEL"
    NEW_SURFACE = "actions.intent.NEW_SURFACE"
    REGISTER_UPDATE = "actions.intent.REGISTER_UPDATE"
    CONFIGURE_UPDATES = "actions.intent.CONFIGURE_UPDATES"
    LINK = "actions.intent.LINK"
    MEDIA_STATUS = "actions.intent.MEDIA_STATUS"


class LegacyStandardIntents(StandardIntents):
    """Generation 1 renames the three original intents."""

    MAIN = "assistant.intent.action.MAIN"
    TEXT = "assistant.intent.action.TEXT"
    PERMISSION = "assistant.intent.action.PERMISSION"


def standard_intents(generation: ApiGeneration) -> type:
    """Get the intent name table for a generation."""
    if generation == ApiGeneration.GEN2:
        return StandardIntents
    return LegacyStandardIntents


class BuiltInArgNames:
    """Argument names populated by system intents."""

    PERMISSION_GRANTED = "PERMISSION"
    OPTION = "OPTION"
    TRANSACTION_REQ_CHECK_RESULT = "TRANSACTION_REQUIREMENTS_CHECK_RESULT"
    DELIVERY_ADDRESS_VALUE = "DELIVERY_ADDRESS_VALUE"
    TRANSACTION_DECISION_VALUE = "TRANSACTION_DECISION_VALUE"
    PLACE = "PLACE"
    CONFIRMATION = "CONFIRMATION"
    DATETIME = "DATETIME"
    SIGN_IN = "SIGN_IN"
    REPROMPT_COUNT = "REPROMPT_COUNT"
    IS_FINAL_REPROMPT = "IS_FINAL_REPROMPT"
    NEW_SURFACE = "NEW_SURFACE"
    REGISTER_UPDATE = "REGISTER_UPDATE"
    LINK = "LINK"
    MEDIA_STATUS = "MEDIA_STATUS"
    TEXT = "text"


class LegacyBuiltInArgNames(BuiltInArgNames):
    PERMISSION_GRANTED = "permission_granted"


def built_in_arg_names(generation: ApiGeneration) -> type:
    if generation == ApiGeneration.GEN2:
        return BuiltInArgNames
    return LegacyBuiltInArgNames


class InputValueDataTypes:
    """``@type`` values of system-intent payloads."""

    PERMISSION = "type.googleapis.com/google.actions.v2.PermissionValueSpec"
    OPTION = "type.googleapis.com/google.actions.v2.OptionValueSpec"
    TRANSACTION_REQ_CHECK = "type.googleapis.com/google.actions.v2.TransactionRequirementsCheckSpec"
    DELIVERY_ADDRESS = "type.googleapis.com/google.actions.v2.DeliveryAddressValueSpec"
    TRANSACTION_DECISION = "type.googleapis.com/google.actions.v2.TransactionDecisionValueSpec"
    PLACE = "type.googleapis.com/google.actions.v2.PlaceValueSpec"
    CONFIRMATION = "type.googleapis.com/google.actions.v2.ConfirmationValueSpec"
    DATETIME = "type.googleapis.com/google.actions.v2.DateTimeValueSpec"
    NEW_SURFACE = "type.googleapis.com/google.actions.v2.NewSurfaceValueSpec"
    REGISTER_UPDATE = "type.googleapis.com/google.actions.v2.RegisterUpdateValueSpec"
    LINK = "type.googleapis.com/google.actions.v2.LinkValueSpec"
    SIGN_IN = "type.googleapis.com/google.actions.v2.SignInValueSpec"


class DialogSpecTypes:
    PLACE = "type.googleapis.com/google.actions.v2.PlaceValueSpec.PlaceDialogSpec"
    LINK = "type.googleapis.com/google.actions.v2.LinkValueSpec.LinkDialogSpec"


class SupportedPermissions(str, Enum):
    NAME = "NAME"
    DEVICE_PRECISE_LOCATION = "DEVICE_PRECISE_LOCATION"
    DEVICE_COARSE_LOCATION = "DEVICE_COARSE_LOCATION"
    UPDATE = "UPDATE"


class SignInStatus(str, Enum):
    UNSPECIFIED = "SIGN_IN_STATUS_UNSPECIFIED"
    OK = "OK"
    CANCELLED = "CANCELLED"
    ERROR = "ERROR"


class SurfaceCapabilities:
    AUDIO_OUTPUT = "actions.capability.AUDIO_OUTPUT"
    SCREEN_OUTPUT = "actions.capability.SCREEN_OUTPUT"
    MEDIA_RESPONSE_AUDIO = "actions.capability.MEDIA_RESPONSE_AUDIO"
    WEB_BROWSER = "actions.capability.WEB_BROWSER"


class ConversationType(str, Enum):
    """Conversation stage; generation 1 sends these as integers."""

    UNSPECIFIED = "UNSPECIFIED"
    NEW = "NEW"
    ACTIVE = "ACTIVE"

    @classmethod
    def parse(cls, value: object) -> "ConversationType":
        legacy = {0: cls.UNSPECIFIED, 1: cls.NEW, 2: cls.ACTIVE}
        if isinstance(value, int) and not isinstance(value, bool):
            return legacy.get(value, cls.UNSPECIFIED)
        if isinstance(value, str):
            if value.isdigit():
                return legacy.get(int(value), cls.UNSPECIFIED)
            try:
                return cls(value.upper())
            except ValueError:
                return cls.UNSPECIFIED
        return cls.UNSPECIFIED


class InputType(str, Enum):
    """How the user provided input; generation 1 sends integers."""

    UNSPECIFIED = "UNSPECIFIED"
    TOUCH = "TOUCH"
    VOICE = "VOICE"
    KEYBOARD = "KEYBOARD"

    @classmethod
    def parse(cls, value: object) -> "InputType":
        legacy = {0: cls.UNSPECIFIED, 1: cls.TOUCH, 2: cls.VOICE, 3: cls.KEYBOARD}
        if isinstance(value, int) and not isinstance(value, bool):
            return legacy.get(value, cls.UNSPECIFIED)
        if isinstance(value, str):
            if value.isdigit():
                return legacy.get(int(value), cls.UNSPECIFIED)
            try:
                return cls(value.upper())
            except ValueError:
                return cls.UNSPECIFIED
        return cls.UNSPECIFIED


class DeliveryAddressDecision(str, Enum):
    UNKNOWN = "UNKNOWN_USER_DECISION"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class TransactionDecision(str, Enum):
    UNKNOWN = "UNKNOWN_USER_DECISION"
    ACCEPTED = "ORDER_ACCEPTED"
    REJECTED = "ORDER_REJECTED"
    DELIVERY_ADDRESS_UPDATED = "DELIVERY_ADDRESS_UPDATED"
    CART_CHANGE_REQUESTED = "CART_CHANGE_REQUESTED"


class TransactionRequirementsResult(str, Enum):
    UNSPECIFIED = "RESULT_TYPE_UNSPECIFIED"
    OK = "OK"
    USER_ACTION_REQUIRED = "USER_ACTION_REQUIRED"
    ASSISTANT_SURFACE_NOT_SUPPORTED = "ASSISTANT_SURFACE_NOT_SUPPORTED"
    REGION_NOT_SUPPORTED = "REGION_NOT_SUPPORTED"
