"""
Arguments supplied by built-in system intents.

The platform sends each argument with one typed value populated (boolean
for confirmations, a datetime struct for date-time requests, an ``@type``
extension for sign-in and transactions). ``Argument.value`` picks whichever
one is present.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from actions_bridge.wire.schemas import ArgumentValue


@dataclass
class Argument:
    """One argument of the first input."""

    name: str
    raw_text: Optional[str] = None
    text_value: Optional[str] = None
    bool_value: Optional[bool] = None
    int_value: Optional[int] = None
    float_value: Optional[float] = None
    datetime_value: Optional[Dict[str, Any]] = None
    place_value: Optional[Dict[str, Any]] = None
    structured_value: Optional[Dict[str, Any]] = None
    extension: Optional[Dict[str, Any]] = None
    status: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_wire(cls, wire: ArgumentValue) -> "Argument":
        int_value = wire.int_value
        if isinstance(int_value, str):
            # proto3 JSON renders int64 as a string
            int_value = int(int_value) if int_value.lstrip("-").isdigit() else None
        return cls(
            name=wire.name,
            raw_text=wire.raw_text,
            text_value=wire.text_value,
            bool_value=wire.bool_value,
            int_value=int_value,
            float_value=wire.float_value,
            datetime_value=wire.datetime_value,
            place_value=wire.place_value,
            structured_value=wire.structured_value,
            extension=wire.extension,
            status=wire.status,
            raw=wire.model_dump(by_alias=True, exclude_none=True),
        )

    @property
    def value(self) -> Any:
        """The typed value carried by this argument."""
        for candidate in (
            self.extension,
            self.bool_value,
            self.datetime_value,
            self.place_value,
            self.int_value,
            self.float_value,
            self.structured_value,
            self.text_value,
            self.raw_text,
        ):
            if candidate is not None:
                return candidate
        return None


class Arguments:
    """Ordered, name-indexed view over the arguments of one turn."""

    def __init__(self, items: Optional[List[Argument]] = None) -> None:
        self._items: List[Argument] = list(items or [])
        self._by_name: Dict[str, Argument] = {}
        for item in self._items:
            self._by_name.setdefault(item.name, item)

    @classmethod
    def from_wire(cls, values: List[ArgumentValue]) -> "Arguments":
        return cls([Argument.from_wire(value) for value in values])

    def get(self, name: str) -> Optional[Argument]:
        return self._by_name.get(name)

    def value(self, name: str) -> Any:
        """Typed value of the named argument, or None."""
        argument = self._by_name.get(name)
        return argument.value if argument else None

    def first(self) -> Optional[Argument]:
        return self._items[0] if self._items else None

    def names(self) -> List[str]:
        return [item.name for item in self._items]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Argument]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Arguments({self.names()!r})"
