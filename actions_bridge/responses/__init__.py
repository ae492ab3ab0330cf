# Response construction and validation

from actions_bridge.responses.builder import (
    FollowupEvent,
    ResponseModel,
    build_ask,
    build_followup,
    build_system_intent,
    build_tell,
)
from actions_bridge.responses.options import CarouselSelect, ListSelect, OptionItem
from actions_bridge.responses.prompts import INPUTS_MAX, InputPrompt
from actions_bridge.responses.rich import (
    BasicCard,
    BrowseCarousel,
    BrowseItem,
    Button,
    Image,
    Limits,
    MediaObject,
    MediaResponse,
    RichResponse,
    SimpleResponse,
    TableCard,
    TableColumn,
)
from actions_bridge.responses.ssml import is_ssml
from actions_bridge.responses.system_intents import SystemIntent
from actions_bridge.responses.transactions import (
    ActionPaymentTransactionConfig,
    CardNetwork,
    CustomerInfoProperty,
    GooglePaymentTransactionConfig,
    PaymentType,
    TokenizationType,
)

__all__ = [
    # Builder
    "FollowupEvent",
    "ResponseModel",
    "build_ask",
    "build_followup",
    "build_system_intent",
    "build_tell",
    # Items
    "BasicCard",
    "BrowseCarousel",
    "BrowseItem",
    "Button",
    "CarouselSelect",
    "Image",
    "INPUTS_MAX",
    "InputPrompt",
    "Limits",
    "ListSelect",
    "MediaObject",
    "MediaResponse",
    "OptionItem",
    "RichResponse",
    "SimpleResponse",
    "SystemIntent",
    "TableCard",
    "TableColumn",
    "is_ssml",
    # Transactions
    "ActionPaymentTransactionConfig",
    "CardNetwork",
    "CustomerInfoProperty",
    "GooglePaymentTransactionConfig",
    "PaymentType",
    "TokenizationType",
]
