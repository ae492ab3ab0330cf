"""
Transport Boundary

Plain request/response objects exchanged with whatever HTTP layer hosts the
adapter, plus the write-once guard: a turn's response is written exactly
once and every later write is ignored.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import structlog

from actions_bridge.wire.detector import header_value

logger = structlog.get_logger(__name__)


@dataclass
class WebhookRequest:
    """Inbound webhook call: headers and decoded JSON body."""

    body: Any
    headers: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Union[str, bytes, None], headers: Optional[Mapping[str, Any]] = None) -> "WebhookRequest":
        """Decode a raw body; undecodable bodies are kept as None."""
        body: Any = None
        if raw:
            try:
                body = json.loads(raw)
            except ValueError:
                logger.warning("request_body_not_json", length=len(raw))
        return cls(body=body, headers=dict(headers or {}))

    def header(self, name: str) -> Optional[str]:
        return header_value(self.headers, name)


@dataclass
class WebhookResponse:
    """Outbound response: a JSON document, or plain text on errors."""

    status: int
    body: Union[Dict[str, Any], str]
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_json(self) -> bool:
        return isinstance(self.body, dict)

    def text(self) -> str:
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body, separators=(",", ":"), ensure_ascii=False)


class ResponseWriter:
    """
    Holds the single response of a turn.

    ``send`` returns False and changes nothing once a response was written.
    """

    def __init__(self) -> None:
        self.response: Optional[WebhookResponse] = None
        self.writes = 0

    @property
    def responded(self) -> bool:
        return self.response is not None

    def send(self, status: int, body: Union[Dict[str, Any], str], headers: Optional[Dict[str, str]] = None) -> bool:
        if self.response is not None:
            logger.info("response_write_ignored", status=status)
            return False
        self.response = WebhookResponse(status=status, body=body, headers=dict(headers or {}))
        self.writes += 1
        logger.debug("response_written", status=status)
        return True
