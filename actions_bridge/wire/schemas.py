"""
Pydantic schemas for inbound webhook bodies.

Generation 1 Actions payloads are camelized before validation, so every schema
reads camelCase keys. Unknown fields are kept (``extra="allow"``) so that the
raw shape survives for handlers that need it.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base schema: camelCase aliases, unknown fields retained."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# =============================================================================
# Actions SDK
# =============================================================================


class UserProfile(WireModel):
    display_name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None


class User(WireModel):
    user_id: Optional[str] = None
    profile: Optional[UserProfile] = None
    access_token: Optional[str] = None
    locale: Optional[str] = None
    last_seen: Optional[str] = None
    user_storage: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)


class Coordinates(WireModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class DeviceLocation(WireModel):
    coordinates: Optional[Coordinates] = None
    formatted_address: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None


class Device(WireModel):
    location: Optional[DeviceLocation] = None


class Capability(WireModel):
    name: str = ""


class Surface(WireModel):
    capabilities: List[Capability] = Field(default_factory=list)


class ConversationInfo(WireModel):
    conversation_id: Optional[str] = None
    type: Optional[Union[int, str]] = None
    conversation_token: Optional[str] = None


class RawInput(WireModel):
    input_type: Optional[Union[int, str]] = None
    query: Optional[str] = None


class ArgumentValue(WireModel):
    name: str = ""
    raw_text: Optional[str] = None
    text_value: Optional[str] = None
    bool_value: Optional[bool] = None
    int_value: Optional[Union[int, str]] = None
    float_value: Optional[float] = None
    datetime_value: Optional[Dict[str, Any]] = None
    place_value: Optional[Dict[str, Any]] = None
    structured_value: Optional[Dict[str, Any]] = None
    extension: Optional[Dict[str, Any]] = None
    status: Optional[Dict[str, Any]] = None


class Input(WireModel):
    intent: Optional[str] = None
    raw_inputs: List[RawInput] = Field(default_factory=list)
    arguments: List[ArgumentValue] = Field(default_factory=list)


class AppRequest(WireModel):
    """Actions SDK request, also embedded in Dialogflow bodies."""

    user: Optional[User] = None
    device: Optional[Device] = None
    surface: Optional[Surface] = None
    available_surfaces: List[Surface] = Field(default_factory=list)
    conversation: Optional[ConversationInfo] = None
    inputs: List[Input] = Field(default_factory=list)
    is_in_sandbox: Optional[bool] = None


# =============================================================================
# Dialogflow
# =============================================================================


class LegacyContext(WireModel):
    name: str = ""
    lifespan: Optional[int] = None
    parameters: Optional[Dict[str, Any]] = None


class LegacyMetadata(WireModel):
    intent_id: Optional[str] = None
    intent_name: Optional[str] = None


class LegacyResult(WireModel):
    source: Optional[str] = None
    resolved_query: Optional[str] = None
    action: Optional[str] = None
    action_incomplete: Optional[bool] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    contexts: List[LegacyContext] = Field(default_factory=list)
    metadata: Optional[LegacyMetadata] = None
    fulfillment: Optional[Dict[str, Any]] = None


class LegacyOriginalRequest(WireModel):
    source: Optional[str] = None
    version: Optional[Union[int, str]] = None
    data: Optional[Dict[str, Any]] = None


class LegacyWebhookRequest(WireModel):
    """API.AI v1 webhook request (``result`` envelope)."""

    id: Optional[str] = None
    session_id: Optional[str] = None
    lang: Optional[str] = None
    result: LegacyResult
    original_request: Optional[LegacyOriginalRequest] = None


class CurrentContext(WireModel):
    name: str = ""
    lifespan_count: Optional[int] = None
    parameters: Optional[Dict[str, Any]] = None


class IntentInfo(WireModel):
    name: Optional[str] = None
    display_name: Optional[str] = None


class QueryResult(WireModel):
    query_text: Optional[str] = None
    action: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    output_contexts: List[CurrentContext] = Field(default_factory=list)
    intent: Optional[IntentInfo] = None
    language_code: Optional[str] = None
    fulfillment_messages: List[Dict[str, Any]] = Field(default_factory=list)


class OriginalDetectIntentRequest(WireModel):
    source: Optional[str] = None
    version: Optional[Union[int, str]] = None
    payload: Optional[Dict[str, Any]] = None


class CurrentWebhookRequest(WireModel):
    """Dialogflow v2 webhook request (``queryResult`` envelope)."""

    response_id: Optional[str] = None
    session: Optional[str] = None
    query_result: QueryResult
    original_detect_intent_request: Optional[OriginalDetectIntentRequest] = None
