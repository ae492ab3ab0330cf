"""
Actions Bridge - Exceptions

This module contains the exceptions raised while adapting a webhook turn.

Configuration errors stem from developer code (handler tables, response
construction) and fail the current turn with an HTTP 400. Handler errors and
unknown dispatch keys are recoverable and end the turn with an apology.
"""

from typing import Any, Dict, Optional


class ActionsBridgeError(Exception):
    """
    Base exception for all Actions Bridge errors.

    Attributes:
        message: Human-readable error message
        code: Error code
        details: Additional error details
        http_status: Status code used when the error ends the turn
    """

    http_status: int = 400

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', code='{self.code}')"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ActionsBridgeError):
    """Raised when developer-supplied configuration cannot produce a turn."""

    def __init__(
        self,
        message: str,
        code: str = "CONFIGURATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class CircularRedirectError(ConfigurationError):
    """
    Raised when string redirects in a handler table loop back on themselves.

    Attributes:
        chain: Dispatch keys visited before the loop was detected
    """

    def __init__(self, chain: list) -> None:
        rendered = " -> ".join(str(key) for key in chain)
        super().__init__(
            f"Circular intent map: {rendered}",
            code="CIRCULAR_REDIRECT",
            details={"chain": list(chain)},
        )
        self.chain = list(chain)


class ResponseValidationError(ConfigurationError):
    """Raised when a response violates the platform's structural constraints."""

    def __init__(
        self,
        message: str,
        code: str = "RESPONSE_VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class MissingSimpleResponseError(ResponseValidationError):
    """Raised when a rich response has no simple (text/SSML) item."""

    def __init__(self, message: str = "Invalid RichResponse. A SimpleResponse item is required") -> None:
        super().__init__(message, code="MISSING_SIMPLE_RESPONSE")


class OptionCountError(ResponseValidationError):
    """Raised when a list or carousel carries fewer than two options."""

    def __init__(self, kind: str, count: int, minimum: int = 2) -> None:
        super().__init__(
            f"{kind} requires at least {minimum} items",
            code="OPTION_COUNT",
            details={"kind": kind, "count": count, "minimum": minimum},
        )
        self.kind = kind
        self.count = count


class PromptLimitError(ResponseValidationError):
    """Raised when a reprompt array exceeds the platform ceiling."""

    def __init__(self, kind: str, count: int, maximum: int = 3) -> None:
        super().__init__(
            f"Invalid number of {kind} prompts: {count} (maximum {maximum})",
            code="PROMPT_LIMIT",
            details={"kind": kind, "count": count, "maximum": maximum},
        )
        self.kind = kind
        self.count = count


class SystemIntentError(ResponseValidationError):
    """Raised when a system-intent request is missing a required sub-field."""

    def __init__(self, message: str, intent: Optional[str] = None) -> None:
        super().__init__(message, code="SYSTEM_INTENT_ERROR", details={"intent": intent})
        self.intent = intent


class InvalidResponseError(ResponseValidationError):
    """Raised when a response payload is empty or of an unsupported type."""

    def __init__(self, message: str = "Invalid speech response") -> None:
        super().__init__(message, code="INVALID_RESPONSE")


class UnserializableDataError(ResponseValidationError):
    """Raised when session data, storage or payloads cannot be encoded as JSON."""

    def __init__(self, source: str, error: Exception) -> None:
        super().__init__(
            f"Cannot serialize {source}: {error}",
            code="UNSERIALIZABLE_DATA",
            details={"source": source},
        )
        self.source = source


# =============================================================================
# Request Errors
# =============================================================================


class MalformedRequestError(ActionsBridgeError):
    """Raised when the inbound body cannot be read as any known wire shape."""

    def __init__(self, message: str = "Malformed request body") -> None:
        super().__init__(message, code="MALFORMED_REQUEST")


class VerificationError(ActionsBridgeError):
    """Raised when the configured verification header does not match."""

    def __init__(self, header: str) -> None:
        super().__init__(
            f"Request verification failed for header {header}",
            code="VERIFICATION_FAILED",
            details={"header": header},
        )


class MissingInputError(ActionsBridgeError):
    """
    Raised by ``require_*`` accessors when a required field is absent.

    Plain accessors never raise this; they log and return None.
    """

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing {field} from request body", code="MISSING_INPUT", details={"field": field})
        self.field = field


# =============================================================================
# Dispatch Errors
# =============================================================================


class HandlerNotFoundError(ActionsBridgeError):
    """Raised when no handler matches the dispatch key."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"no matching intent handler for: {key}", code="HANDLER_NOT_FOUND", details={"key": key})
        self.key = key


class HandlerExecutionError(ActionsBridgeError):
    """
    Raised when a handler failed and the error handler re-raised.

    Attributes:
        original: The exception raised by the handler
    """

    def __init__(self, key: Any, original: BaseException) -> None:
        super().__init__(
            f"intent handler failed: {original}",
            code="HANDLER_FAILED",
            details={"key": key, "type": type(original).__name__},
        )
        self.key = key
        self.original = original
