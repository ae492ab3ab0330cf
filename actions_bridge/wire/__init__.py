# Wire format model, inbound schemas and version detection

from actions_bridge.wire.detector import detect, header_value, is_known_shape
from actions_bridge.wire.models import (
    ApiGeneration,
    BuiltInArgNames,
    ConversationType,
    DialogflowEnvelope,
    FrontEnd,
    InputType,
    InputValueDataTypes,
    StandardIntents,
    SupportedPermissions,
    SurfaceCapabilities,
    WireFormat,
    built_in_arg_names,
    standard_intents,
)

__all__ = [
    "ApiGeneration",
    "BuiltInArgNames",
    "ConversationType",
    "DialogflowEnvelope",
    "FrontEnd",
    "InputType",
    "InputValueDataTypes",
    "StandardIntents",
    "SupportedPermissions",
    "SurfaceCapabilities",
    "WireFormat",
    "built_in_arg_names",
    "detect",
    "header_value",
    "is_known_shape",
    "standard_intents",
]
