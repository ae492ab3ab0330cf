"""
Rich Responses

Item types for generation 2 rich responses and the RichResponse accumulator.
Every ``to_wire()`` returns generation 2 (camelCase) JSON; the serializer
renames keys for generation 1.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import structlog

from actions_bridge.core.exceptions import InvalidResponseError, MissingSimpleResponseError
from actions_bridge.responses.ssml import speech_fields

logger = structlog.get_logger(__name__)


class Limits:
    """Platform limits on rich response content."""

    SIMPLE_RESPONSE_MAX = 2
    BASIC_CARD_MAX = 1
    MEDIA_RESPONSE_MAX = 1
    SUGGESTION_TEXT_MAX = 25
    LIST_ITEM_MAX = 30
    CAROUSEL_ITEM_MAX = 10
    BROWSE_ITEM_MAX = 10
    OPTIONS_MIN = 2


def _prune(value: Dict[str, Any]) -> Dict[str, Any]:
    return {key: item for key, item in value.items() if item is not None and item != [] and item != ""}


# =============================================================================
# Building Blocks
# =============================================================================


@dataclass
class Image:
    url: str
    accessibility_text: str = ""
    width: Optional[int] = None
    height: Optional[int] = None

    def to_wire(self) -> Dict[str, Any]:
        return _prune({
            "url": self.url,
            "accessibilityText": self.accessibility_text,
            "width": self.width,
            "height": self.height,
        })


@dataclass
class Button:
    title: str
    url: str

    def to_wire(self) -> Dict[str, Any]:
        return {"title": self.title, "openUrlAction": {"url": self.url}}


@dataclass
class SimpleResponse:
    """Spoken text or SSML with optional display text."""

    speech: str
    display_text: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.speech, str) or not self.speech.strip():
            raise InvalidResponseError("Invalid simpleResponse")

    def to_wire(self) -> Dict[str, Any]:
        return {"simpleResponse": speech_fields(self.speech, self.display_text)}


@dataclass
class BasicCard:
    title: Optional[str] = None
    subtitle: Optional[str] = None
    formatted_text: Optional[str] = None
    image: Optional[Image] = None
    buttons: List[Button] = field(default_factory=list)
    image_display_options: Optional[str] = None

    def __post_init__(self) -> None:
        if not (self.formatted_text or self.image):
            raise InvalidResponseError("BasicCard requires formatted text or an image")

    def to_wire(self) -> Dict[str, Any]:
        return {"basicCard": _prune({
            "title": self.title,
            "subtitle": self.subtitle,
            "formattedText": self.formatted_text,
            "image": self.image.to_wire() if self.image else None,
            "buttons": [button.to_wire() for button in self.buttons],
            "imageDisplayOptions": self.image_display_options,
        })}


@dataclass
class TableColumn:
    header: str
    horizontal_alignment: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return _prune({"header": self.header, "horizontalAlignment": self.horizontal_alignment})


@dataclass
class TableCard:
    rows: List[List[str]]
    columns: List[Union[TableColumn, str]] = field(default_factory=list)
    title: Optional[str] = None
    subtitle: Optional[str] = None
    image: Optional[Image] = None
    buttons: List[Button] = field(default_factory=list)
    divider_after: bool = False

    def __post_init__(self) -> None:
        if not self.rows:
            raise InvalidResponseError("TableCard requires at least one row")

    def to_wire(self) -> Dict[str, Any]:
        columns = [
            column if isinstance(column, TableColumn) else TableColumn(header=column)
            for column in self.columns
        ]
        return {"tableCard": _prune({
            "title": self.title,
            "subtitle": self.subtitle,
            "image": self.image.to_wire() if self.image else None,
            "columnProperties": [column.to_wire() for column in columns],
            "rows": [
                {
                    "cells": [{"text": str(cell)} for cell in row],
                    "dividerAfter": self.divider_after,
                }
                for row in self.rows
            ],
            "buttons": [button.to_wire() for button in self.buttons],
        })}


@dataclass
class MediaObject:
    name: str
    content_url: str
    description: Optional[str] = None
    large_image: Optional[Image] = None
    icon: Optional[Image] = None

    def to_wire(self) -> Dict[str, Any]:
        return _prune({
            "name": self.name,
            "contentUrl": self.content_url,
            "description": self.description,
            "largeImage": self.large_image.to_wire() if self.large_image else None,
            "icon": self.icon.to_wire() if self.icon else None,
        })


@dataclass
class MediaResponse:
    media_objects: List[MediaObject]
    media_type: str = "AUDIO"

    def __post_init__(self) -> None:
        if not self.media_objects:
            raise InvalidResponseError("MediaResponse requires at least one media object")

    def to_wire(self) -> Dict[str, Any]:
        return {"mediaResponse": {
            "mediaType": self.media_type,
            "mediaObjects": [media.to_wire() for media in self.media_objects],
        }}


@dataclass
class BrowseItem:
    title: str
    url: str
    description: Optional[str] = None
    footer: Optional[str] = None
    image: Optional[Image] = None

    def to_wire(self) -> Dict[str, Any]:
        return _prune({
            "title": self.title,
            "description": self.description,
            "footer": self.footer,
            "image": self.image.to_wire() if self.image else None,
            "openUrlAction": {"url": self.url},
        })


@dataclass
class BrowseCarousel:
    items: List[BrowseItem]

    def __post_init__(self) -> None:
        if len(self.items) > Limits.BROWSE_ITEM_MAX:
            logger.warning("browse_carousel_truncated", count=len(self.items), limit=Limits.BROWSE_ITEM_MAX)
            self.items = self.items[:Limits.BROWSE_ITEM_MAX]

    def to_wire(self) -> Dict[str, Any]:
        return {"carouselBrowse": {"items": [item.to_wire() for item in self.items]}}


# =============================================================================
# Rich Response
# =============================================================================


class RichResponse:
    """
    Ordered rich response items plus suggestion chips.

    Adders return the instance so calls can be chained. Items that exceed a
    platform limit are skipped with a warning.
    """

    def __init__(self) -> None:
        self.items: List[Dict[str, Any]] = []
        self.suggestions: List[Dict[str, str]] = []
        self.link_out_suggestion: Optional[Dict[str, str]] = None

    def _count(self, kind: str) -> int:
        return sum(1 for item in self.items if kind in item)

    def add_simple_response(self, response: Union[SimpleResponse, str], display_text: Optional[str] = None) -> "RichResponse":
        if isinstance(response, str):
            response = SimpleResponse(speech=response, display_text=display_text)
        if self._count("simpleResponse") >= Limits.SIMPLE_RESPONSE_MAX:
            logger.warning("simple_response_limit", limit=Limits.SIMPLE_RESPONSE_MAX)
            return self
        item = response.to_wire()
        # A card or order update may not lead the response
        if self.items and ("basicCard" in self.items[0] or "structuredResponse" in self.items[0]):
            self.items.insert(0, item)
        else:
            self.items.append(item)
        return self

    def add_basic_card(self, card: BasicCard) -> "RichResponse":
        if self._count("basicCard") >= Limits.BASIC_CARD_MAX:
            logger.warning("basic_card_limit", limit=Limits.BASIC_CARD_MAX)
            return self
        self.items.append(card.to_wire())
        return self

    def add_table_card(self, card: TableCard) -> "RichResponse":
        self.items.append(card.to_wire())
        return self

    def add_media_response(self, media: MediaResponse) -> "RichResponse":
        if self._count("mediaResponse") >= Limits.MEDIA_RESPONSE_MAX:
            logger.warning("media_response_limit", limit=Limits.MEDIA_RESPONSE_MAX)
            return self
        self.items.append(media.to_wire())
        return self

    def add_browse_carousel(self, carousel: BrowseCarousel) -> "RichResponse":
        self.items.append(carousel.to_wire())
        return self

    def add_order_update(self, order_update: Dict[str, Any]) -> "RichResponse":
        if not order_update:
            raise InvalidResponseError("Invalid orderUpdate")
        if self._count("structuredResponse"):
            logger.warning("structured_response_limit", limit=1)
            return self
        self.items.append({"structuredResponse": {"orderUpdate": copy.deepcopy(order_update)}})
        return self

    def add_suggestions(self, *titles: Union[str, List[str]]) -> "RichResponse":
        for entry in titles:
            for title in ([entry] if isinstance(entry, str) else entry):
                if not title or len(title) > Limits.SUGGESTION_TEXT_MAX:
                    logger.warning("suggestion_skipped", suggestion=title, limit=Limits.SUGGESTION_TEXT_MAX)
                    continue
                self.suggestions.append({"title": title})
        return self

    def add_suggestion_link(self, destination_name: str, url: str) -> "RichResponse":
        if not destination_name or not url:
            raise InvalidResponseError("Link out suggestion requires a destination name and url")
        self.link_out_suggestion = {"destinationName": destination_name, "url": url}
        return self

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def simple_responses(self) -> List[Dict[str, Any]]:
        return [item["simpleResponse"] for item in self.items if "simpleResponse" in item]

    def first_simple_response(self) -> Optional[Dict[str, Any]]:
        simple = self.simple_responses()
        return simple[0] if simple else None

    def validate(self) -> None:
        """Raise MissingSimpleResponseError when no simple item is present."""
        if not self.simple_responses():
            raise MissingSimpleResponseError()

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {
            "items": copy.deepcopy(self.items),
            "suggestions": copy.deepcopy(self.suggestions),
        }
        if self.link_out_suggestion:
            wire["linkOutSuggestion"] = dict(self.link_out_suggestion)
        return wire

    def __repr__(self) -> str:
        kinds = [next(iter(item)) for item in self.items]
        return f"RichResponse(items={kinds!r}, suggestions={len(self.suggestions)})"
