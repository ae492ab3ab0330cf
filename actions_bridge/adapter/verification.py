"""
Request Verification

Checks a developer-configured header name/value pair, as set in the agent
console's fulfillment headers. This is a shared-secret comparison, not a
cryptographic signature check.
"""

import hmac
from typing import Any, Mapping, Optional, Tuple

from actions_bridge.wire.detector import header_value


class HeaderVerifier:
    """Verifies that a request carries an expected header value."""

    def __init__(self, header: str, expected: str):
        """
        Initialize verifier.

        Args:
            header: Header name (matched case-insensitively)
            expected: Value the header must carry
        """
        if not header or not expected:
            raise ValueError("Verification header and value must be non-empty")
        self.header = header
        self.expected = expected

    def verify(self, headers: Optional[Mapping[str, Any]]) -> Tuple[bool, Optional[str]]:
        """
        Verify request headers.

        Returns:
            Tuple of (is_valid, error_message)
        """
        actual = header_value(headers, self.header)
        if actual is None:
            return False, f"Missing header {self.header}"
        if not hmac.compare_digest(str(actual).encode(), self.expected.encode()):
            return False, f"Unexpected value for header {self.header}"
        return True, None


def is_request_from(headers: Optional[Mapping[str, Any]], key: str, value: str) -> bool:
    """True when header ``key`` equals ``value``."""
    try:
        valid, _ = HeaderVerifier(key, value).verify(headers)
    except ValueError:
        return False
    return valid
