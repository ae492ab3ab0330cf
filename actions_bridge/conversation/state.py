"""
Conversation State

Session data, dialog state and Dialogflow contexts for one turn. Nothing is
kept between calls: intake reads the dialog token or the reserved context
from the inbound body, and outtake threads the same values back to the
platform, which resends them on the next call.
"""

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import structlog

from actions_bridge.conversation.base import state_name
from actions_bridge.core.exceptions import UnserializableDataError

logger = structlog.get_logger(__name__)


def encode_json(value: Any, source: str = "response") -> str:
    """
    Compact JSON, matching what the platform stores.

    Raises:
        UnserializableDataError: ``value`` holds something JSON cannot represent
    """
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise UnserializableDataError(source, e) from e


def decode_payload(raw: Any, source: str) -> Tuple[Dict[str, Any], bool]:
    """
    Leniently decode a persisted JSON object.

    Args:
        raw: JSON string, already-decoded mapping, or None
        source: Where the payload came from (for logging)

    Returns:
        Tuple of (decoded object, lost). ``lost`` is True when a payload was
        present but could not be decoded into an object.
    """
    if raw is None or raw == "":
        return {}, False
    if isinstance(raw, dict):
        return dict(raw), False
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError as e:
            logger.warning("state_decode_failed", source=source, error=str(e))
            return {}, True
        if isinstance(decoded, dict):
            return decoded, False
    logger.warning("state_decode_failed", source=source, error="not a JSON object")
    return {}, True


# =============================================================================
# Contexts
# =============================================================================


@dataclass
class ContextEntry:
    """A named, lifespan-bounded bag of parameters."""

    name: str
    lifespan: Optional[int]
    parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_expired(self) -> bool:
        return self.lifespan is not None and self.lifespan <= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "lifespan": self.lifespan,
            "parameters": copy.deepcopy(self.parameters),
        }


class ContextSet:
    """
    Inbound contexts plus the contexts set or deleted during this turn.

    Inbound entries are read-only and kept whatever their lifespan; the
    platform omits it on its own capability and intent contexts. ``set`` and
    ``delete`` only touch the outgoing set, where lifespan 0 means deletion.
    """

    def __init__(self, inbound: Optional[Iterable[ContextEntry]] = None) -> None:
        self._input: Dict[str, ContextEntry] = {}
        for entry in inbound or []:
            self._input[entry.name] = entry
        self._output: Dict[str, ContextEntry] = {}

    def get(self, name: str) -> Optional[ContextEntry]:
        """Get an inbound context by name."""
        return self._input.get(name)

    def set(self, name: str, lifespan: int = 1, parameters: Optional[Dict[str, Any]] = None) -> ContextEntry:
        """Create or overwrite an outgoing context."""
        if not name:
            raise ValueError("Context name must not be empty")
        if not isinstance(lifespan, int) or isinstance(lifespan, bool) or lifespan < 0:
            raise ValueError(f"Context lifespan must be a non-negative integer, got {lifespan!r}")
        entry = ContextEntry(name=name, lifespan=lifespan, parameters=dict(parameters or {}))
        self._output[name] = entry
        logger.debug("context_set", context=name, lifespan=lifespan)
        return entry

    def delete(self, name: str) -> ContextEntry:
        """Expire a context on the next call."""
        entry = ContextEntry(name=name, lifespan=0)
        self._output[name] = entry
        logger.debug("context_deleted", context=name)
        return entry

    def inbound(self) -> List[ContextEntry]:
        return list(self._input.values())

    def outgoing(self) -> List[ContextEntry]:
        """Outgoing contexts in insertion order, deletions included."""
        return list(self._output.values())

    def __contains__(self, name: object) -> bool:
        return name in self._input

    def __iter__(self) -> Iterator[ContextEntry]:
        return iter(self._input.values())

    def __len__(self) -> int:
        return len(self._input)


# =============================================================================
# Conversation State
# =============================================================================


@dataclass
class ConversationState:
    """
    State hydrated on intake and serialized on outtake.

    Attributes:
        data: Developer session data
        state: Developer-assigned conversation state name
        contexts: Inbound and outgoing Dialogflow contexts
        dialog_token: Decoded Actions SDK conversation token (other keys
            round-trip untouched)
        state_lost: True when a persisted payload was present but unreadable
    """

    data: Dict[str, Any] = field(default_factory=dict)
    state: Optional[str] = None
    contexts: ContextSet = field(default_factory=ContextSet)
    dialog_token: Dict[str, Any] = field(default_factory=dict)
    state_lost: bool = False

    # -------------------------------------------------------------------------
    # Intake
    # -------------------------------------------------------------------------

    @classmethod
    def from_dialog_token(cls, token: Any) -> "ConversationState":
        """Hydrate from an Actions SDK ``conversationToken``."""
        decoded, lost = decode_payload(token, source="conversation_token")
        data = decoded.get("data")
        if not isinstance(data, dict):
            data = {}
        raw_state = decoded.get("state")
        return cls(
            data=data,
            state=raw_state if isinstance(raw_state, str) and raw_state else None,
            contexts=ContextSet(),
            dialog_token=decoded,
            state_lost=lost,
        )

    @classmethod
    def from_legacy_contexts(cls, contexts: List[ContextEntry], reserved: str) -> "ConversationState":
        """Hydrate from a ``result.contexts`` list; the reserved context holds the data."""
        data: Dict[str, Any] = {}
        lost = False
        developer: List[ContextEntry] = []
        for entry in contexts:
            if entry.name == reserved:
                data, lost = decode_payload(entry.parameters, source=reserved)
                continue
            developer.append(entry)
        return cls(data=data, contexts=ContextSet(developer), state_lost=lost)

    @classmethod
    def from_current_contexts(cls, contexts: List[ContextEntry], reserved: str) -> "ConversationState":
        """Hydrate from ``queryResult.outputContexts``; data is a JSON string parameter."""
        data: Dict[str, Any] = {}
        state: Optional[str] = None
        lost = False
        developer: List[ContextEntry] = []
        for entry in contexts:
            if entry.name == reserved:
                params = entry.parameters or {}
                data, lost = decode_payload(params.get("data"), source=reserved)
                raw_state = params.get("state")
                state = raw_state if isinstance(raw_state, str) and raw_state else None
                continue
            developer.append(entry)
        return cls(data=data, state=state, contexts=ContextSet(developer), state_lost=lost)

    # -------------------------------------------------------------------------
    # Outtake
    # -------------------------------------------------------------------------

    def set_state(self, value: Any) -> None:
        self.state = state_name(value)

    def dialog_token_out(self) -> str:
        """Serialize the Actions SDK token, replacing only state and data."""
        token = copy.deepcopy(self.dialog_token)
        token["state"] = self.state
        token["data"] = copy.deepcopy(self.data)
        return encode_json(token, source="session data")

    def legacy_reserved_context(self, name: str, lifespan: int) -> ContextEntry:
        encode_json(self.data, source="session data")
        return ContextEntry(name=name, lifespan=lifespan, parameters=copy.deepcopy(self.data))

    def current_reserved_context(self, name: str, lifespan: int) -> ContextEntry:
        parameters: Dict[str, Any] = {"data": encode_json(self.data, source="session data")}
        if self.state is not None:
            parameters["state"] = self.state
        return ContextEntry(name=name, lifespan=lifespan, parameters=parameters)
