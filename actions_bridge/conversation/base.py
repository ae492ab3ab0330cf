"""
Conversation Model - Base Types

Named state tokens and small helpers shared by the conversation model and the
handler table.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class State:
    """
    Named conversation state.

    Handlers may assign either a plain string or a State to
    ``conversation.state``; both serialize to the same name.
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("State name must be a non-empty string")

    def __str__(self) -> str:
        return self.name


StateLike = Union[State, str, None]


def state_name(value: Any) -> Optional[str]:
    """Normalize a State, string or None to a state name."""
    if value is None:
        return None
    if isinstance(value, State):
        return value.name
    if isinstance(value, str):
        return value or None
    raise TypeError(f"Unsupported state value: {value!r}")
