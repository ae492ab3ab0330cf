"""
Actions Bridge

Conversation protocol adapter and intent dispatch engine for Actions on
Google fulfillment webhooks. One handler table serves both API generations
and both front ends (Actions SDK and Dialogflow).

Example:
    from actions_bridge import ProtocolAdapter, WebhookRequest

    async def welcome(conv, params, arg):
        conv.ask("Hi! What would you like to do?")

    adapter = ProtocolAdapter({"input.welcome": welcome})
    response = await adapter.handle(WebhookRequest(body=body, headers=headers))
"""

__version__ = "1.0.0"

from actions_bridge.adapter import (
    HeaderVerifier,
    ProtocolAdapter,
    ResponseWriter,
    WebhookRequest,
    WebhookResponse,
)
from actions_bridge.conversation import Argument, Arguments, ContextSet, ConversationState, State
from actions_bridge.conversation.conversation import Conversation
from actions_bridge.core import (
    ActionsBridgeError,
    AdapterSettings,
    ConfigurationError,
    configure_logging,
    get_settings,
)
from actions_bridge.responses import (
    BasicCard,
    BrowseCarousel,
    BrowseItem,
    Button,
    CarouselSelect,
    Image,
    InputPrompt,
    ListSelect,
    MediaObject,
    MediaResponse,
    OptionItem,
    RichResponse,
    SimpleResponse,
    TableCard,
    TableColumn,
)
from actions_bridge.routing import HandlerTable, IntentRouter
from actions_bridge.wire import ApiGeneration, DialogflowEnvelope, FrontEnd, WireFormat

__all__ = [
    "__version__",
    # Adapter
    "HeaderVerifier",
    "ProtocolAdapter",
    "ResponseWriter",
    "WebhookRequest",
    "WebhookResponse",
    # Conversation
    "Argument",
    "Arguments",
    "ContextSet",
    "Conversation",
    "ConversationState",
    "State",
    # Routing
    "HandlerTable",
    "IntentRouter",
    # Responses
    "BasicCard",
    "BrowseCarousel",
    "BrowseItem",
    "Button",
    "CarouselSelect",
    "Image",
    "InputPrompt",
    "ListSelect",
    "MediaObject",
    "MediaResponse",
    "OptionItem",
    "RichResponse",
    "SimpleResponse",
    "TableCard",
    "TableColumn",
    # Wire
    "ApiGeneration",
    "DialogflowEnvelope",
    "FrontEnd",
    "WireFormat",
    # Core
    "ActionsBridgeError",
    "AdapterSettings",
    "ConfigurationError",
    "configure_logging",
    "get_settings",
]
