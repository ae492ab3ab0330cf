"""
Version Detector

Decides which API generation and front end produced a webhook call by looking
at the request headers and the top-level body shape. Detection is pure and
never raises; bodies of unknown shape fall back to GEN1 and a best guess.
"""

from typing import Any, Mapping, Optional

import structlog

from actions_bridge.wire.models import (
    ACTIONS_API_VERSION_HEADER,
    ApiGeneration,
    DialogflowEnvelope,
    FrontEnd,
    WireFormat,
)

logger = structlog.get_logger(__name__)

GEN2_MARKER = "2"


def header_value(headers: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    """Case-insensitive header lookup over any mapping."""
    if not headers:
        return None
    if name in headers:
        return headers[name]
    lowered = name.lower()
    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _embedded_version(body: Mapping[str, Any]) -> Optional[str]:
    for envelope in ("originalRequest", "original_request", "originalDetectIntentRequest"):
        embedded = body.get(envelope)
        if isinstance(embedded, Mapping) and embedded.get("version") is not None:
            return str(embedded["version"])
    return None


def detect_generation(headers: Optional[Mapping[str, Any]], body: Any) -> ApiGeneration:
    marker = header_value(headers, ACTIONS_API_VERSION_HEADER)
    if marker is not None and str(marker).strip() == GEN2_MARKER:
        return ApiGeneration.GEN2
    if isinstance(body, Mapping) and _embedded_version(body) == GEN2_MARKER:
        return ApiGeneration.GEN2
    return ApiGeneration.GEN1


def detect_envelope(body: Any) -> Optional[DialogflowEnvelope]:
    if not isinstance(body, Mapping):
        return None
    if "queryResult" in body:
        return DialogflowEnvelope.CURRENT
    if "result" in body:
        return DialogflowEnvelope.LEGACY
    return None


def is_known_shape(body: Any) -> bool:
    """True when the body carries an ``inputs`` array or a Dialogflow envelope."""
    if not isinstance(body, Mapping):
        return False
    return isinstance(body.get("inputs"), list) or detect_envelope(body) is not None


def detect(headers: Optional[Mapping[str, Any]], body: Any) -> WireFormat:
    """
    Detect the wire format of an inbound call.

    Precedence:
        1. GEN2 marker header equal to "2", or embedded request version 2
        2. otherwise GEN1
        3. ``inputs`` array -> Actions SDK; ``result``/``queryResult`` -> Dialogflow

    Args:
        headers: Request headers (any mapping, matched case-insensitively)
        body: Decoded JSON body

    Returns:
        Detected WireFormat
    """
    generation = detect_generation(headers, body)
    envelope = detect_envelope(body)

    if isinstance(body, Mapping) and isinstance(body.get("inputs"), list):
        front_end = FrontEnd.ACTIONS_SDK
        envelope = None
    elif envelope is not None:
        front_end = FrontEnd.DIALOGFLOW
    else:
        # Best guess: Dialogflow agents are the common deployment.
        front_end = FrontEnd.DIALOGFLOW
        envelope = DialogflowEnvelope.CURRENT if generation == ApiGeneration.GEN2 else DialogflowEnvelope.LEGACY
        logger.debug("wire_format_guessed", generation=int(generation), front_end=front_end.value)

    wire_format = WireFormat(generation=generation, front_end=front_end, envelope=envelope)
    logger.debug("wire_format_detected", format=wire_format.label)
    return wire_format
