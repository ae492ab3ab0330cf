"""SSML detection and speech field selection."""

import re
from typing import Dict, Optional

# Surrounding whitespace is tolerated; the tag may carry attributes.
SSML_PATTERN = re.compile(r"^\s*<speak\b[^>]*>.*</speak>\s*$", re.IGNORECASE | re.DOTALL)


def is_ssml(text: Optional[str]) -> bool:
    """True when ``text`` is wrapped in a <speak> element."""
    if not isinstance(text, str):
        return False
    return SSML_PATTERN.match(text) is not None


def speech_fields(text: str, display_text: Optional[str] = None) -> Dict[str, str]:
    """
    Build the speech part of a simple response.

    SSML goes to ``ssml``; anything else to ``textToSpeech``.
    """
    fields = {"ssml": text} if is_ssml(text) else {"textToSpeech": text}
    if display_text:
        fields["displayText"] = display_text
    return fields
