# Conversation model: state, contexts and system-intent arguments
#
# Conversation and the turn variants import the serializer, which imports this
# package, so they are exposed from actions_bridge and their own modules.

from actions_bridge.conversation.arguments import Argument, Arguments
from actions_bridge.conversation.base import State, state_name
from actions_bridge.conversation.state import ContextEntry, ContextSet, ConversationState

__all__ = [
    "Argument",
    "Arguments",
    "ContextEntry",
    "ContextSet",
    "ConversationState",
    "State",
    "state_name",
]
