# Wire JSON projection of responses

from actions_bridge.serialization.fields import GEN1_FIELD_NAMES, to_gen1
from actions_bridge.serialization.serializer import Outbound, Serializer, response_headers

__all__ = [
    "GEN1_FIELD_NAMES",
    "Outbound",
    "Serializer",
    "response_headers",
    "to_gen1",
]
