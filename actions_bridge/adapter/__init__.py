# Webhook façade: verification, lifecycle and the write-once transport

from actions_bridge.adapter.app import ProtocolAdapter
from actions_bridge.adapter.transport import ResponseWriter, WebhookRequest, WebhookResponse
from actions_bridge.adapter.verification import HeaderVerifier, is_request_from

__all__ = [
    "HeaderVerifier",
    "ProtocolAdapter",
    "ResponseWriter",
    "WebhookRequest",
    "WebhookResponse",
    "is_request_from",
]
