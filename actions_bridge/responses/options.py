"""
Selectable options: lists and carousels.

Both require at least two items; extra items beyond the platform maximum are
dropped with a warning.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import structlog

from actions_bridge.core.exceptions import InvalidResponseError, OptionCountError
from actions_bridge.responses.rich import Image, Limits

logger = structlog.get_logger(__name__)


@dataclass
class OptionItem:
    """One selectable entry; ``key`` comes back as the OPTION argument."""

    key: str
    title: str
    description: Optional[str] = None
    image: Optional[Image] = None
    synonyms: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.key:
            raise InvalidResponseError("Option item requires a key")

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {
            "optionInfo": {"key": self.key, "synonyms": list(self.synonyms)},
            "title": self.title,
        }
        if self.description:
            wire["description"] = self.description
        if self.image:
            wire["image"] = self.image.to_wire()
        return wire


def _checked(kind: str, items: List[OptionItem], maximum: int) -> List[OptionItem]:
    items = list(items or [])
    if len(items) < Limits.OPTIONS_MIN:
        raise OptionCountError(kind, len(items), Limits.OPTIONS_MIN)
    if len(items) > maximum:
        logger.warning("options_truncated", kind=kind, count=len(items), limit=maximum)
        items = items[:maximum]
    keys = [item.key for item in items]
    if len(set(keys)) != len(keys):
        raise InvalidResponseError(f"{kind} option keys must be unique")
    return items


@dataclass
class ListSelect:
    items: List[OptionItem]
    title: Optional[str] = None

    def __post_init__(self) -> None:
        self.items = _checked("List", self.items, Limits.LIST_ITEM_MAX)

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {"items": [item.to_wire() for item in self.items]}
        if self.title:
            wire["title"] = self.title
        return wire


@dataclass
class CarouselSelect:
    items: List[OptionItem]

    def __post_init__(self) -> None:
        self.items = _checked("Carousel", self.items, Limits.CAROUSEL_ITEM_MAX)

    def to_wire(self) -> Dict[str, Any]:
        return {"items": [item.to_wire() for item in self.items]}
