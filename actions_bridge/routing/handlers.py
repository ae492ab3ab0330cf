"""
Handler Table

Maps a dispatch key to an entry that is either a handler (Direct) or the
name of another key (Redirect). Per-state tables are flattened into one
table keyed by (state, intent); ``None`` is the stateless scope.

    HandlerTable.from_mapping({
        "input.welcome": welcome,
        "input.unknown": "input.welcome",          # redirect
        State("guessing"): {"check_guess": check},  # only while in state
    })
"""

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

from actions_bridge.conversation.base import State, state_name
from actions_bridge.core.exceptions import ConfigurationError

Handler = Callable[..., Union[None, Awaitable[None]]]


# =============================================================================
# Entries
# =============================================================================


@dataclass(frozen=True)
class Direct:
    """Entry that invokes a handler."""

    handler: Handler


@dataclass(frozen=True)
class Redirect:
    """Entry that resolves to another dispatch key."""

    target: str


Entry = Union[Direct, Redirect]


@dataclass(frozen=True)
class DispatchKey:
    state: Optional[str]
    intent: str

    def __str__(self) -> str:
        return self.intent if self.state is None else f"{self.state}:{self.intent}"


# =============================================================================
# Handler Outcome
# =============================================================================


@dataclass(frozen=True)
class Immediate:
    """Handler finished synchronously."""

    value: Any = None


@dataclass(frozen=True)
class Deferred:
    """Handler returned an awaitable that must settle before responding."""

    awaitable: Awaitable[Any]


HandlerOutcome = Union[Immediate, Deferred]


def classify(result: Any) -> HandlerOutcome:
    """Classify a handler's return value once."""
    if inspect.isawaitable(result):
        return Deferred(result)
    return Immediate(result)


# =============================================================================
# Table
# =============================================================================


def _entry(key: Any, value: Any) -> Entry:
    if isinstance(value, (Direct, Redirect)):
        return value
    if isinstance(value, str):
        if not value:
            raise ConfigurationError(f"Empty redirect for intent {key}")
        return Redirect(value)
    if callable(value):
        return Direct(value)
    raise ConfigurationError(f"Invalid handler for intent {key}: {value!r}")


def _intent_key(key: Any) -> str:
    if isinstance(key, str) and key:
        return key
    raise ConfigurationError(f"Invalid intent key: {key!r}")


class HandlerTable:
    """
    Flat (state, intent) handler table.

    A table built with ``single()`` has one default handler that receives
    every turn regardless of its dispatch key.
    """

    def __init__(
        self,
        entries: Optional[Dict[DispatchKey, Entry]] = None,
        default: Optional[Direct] = None,
    ) -> None:
        self._entries: Dict[DispatchKey, Entry] = dict(entries or {})
        self.default = default

    @classmethod
    def single(cls, handler: Handler) -> "HandlerTable":
        if not callable(handler):
            raise ConfigurationError("Handler must be callable")
        return cls(default=Direct(handler))

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> "HandlerTable":
        """
        Flatten a nested mapping.

        Keys map to a callable (Direct), a string (Redirect), or a nested
        mapping, in which case the key is a state (State, str or None) and
        the nested mapping holds that state's intents.
        """
        entries: Dict[DispatchKey, Entry] = {}
        for key, value in mapping.items():
            if isinstance(value, Mapping):
                if key is not None and not isinstance(key, (State, str)):
                    raise ConfigurationError(f"Invalid state key: {key!r}")
                scope = state_name(key)
                for intent, nested in value.items():
                    if isinstance(nested, Mapping):
                        raise ConfigurationError(f"State tables cannot nest: {key} -> {intent}")
                    entries[DispatchKey(scope, _intent_key(intent))] = _entry(intent, nested)
            else:
                entries[DispatchKey(None, _intent_key(key))] = _entry(key, value)
        return cls(entries)

    @classmethod
    def coerce(cls, handlers: Any) -> "HandlerTable":
        """Accept a HandlerTable, a mapping or a single callable."""
        if isinstance(handlers, HandlerTable):
            return handlers
        if isinstance(handlers, Mapping):
            return cls.from_mapping(handlers)
        if callable(handlers):
            return cls.single(handlers)
        raise ConfigurationError(f"Invalid handler table: {type(handlers).__name__}")

    def add(self, intent: str, entry: Any, state: Any = None) -> None:
        self._entries[DispatchKey(state_name(state), _intent_key(intent))] = _entry(intent, entry)

    def lookup(self, intent: Optional[str], state: Optional[str] = None) -> Tuple[Optional[DispatchKey], Optional[Entry]]:
        """Find the entry for ``intent``: the state's scope first, then stateless."""
        if intent is None:
            return None, None
        if state is not None:
            key = DispatchKey(state, intent)
            if key in self._entries:
                return key, self._entries[key]
        key = DispatchKey(None, intent)
        return (key, self._entries[key]) if key in self._entries else (None, None)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[DispatchKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
