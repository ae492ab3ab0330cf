# Adapter core: configuration, logging and error taxonomy

from actions_bridge.core.config import AdapterSettings, get_settings
from actions_bridge.core.exceptions import (
    ActionsBridgeError,
    CircularRedirectError,
    ConfigurationError,
    HandlerExecutionError,
    HandlerNotFoundError,
    InvalidResponseError,
    MalformedRequestError,
    MissingInputError,
    MissingSimpleResponseError,
    OptionCountError,
    PromptLimitError,
    ResponseValidationError,
    SystemIntentError,
    UnserializableDataError,
    VerificationError,
)
from actions_bridge.core.logging import LogFormat, LogLevel, configure_logging, get_logger

__all__ = [
    # Config
    "AdapterSettings",
    "get_settings",
    # Logging
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "get_logger",
    # Errors
    "ActionsBridgeError",
    "CircularRedirectError",
    "ConfigurationError",
    "HandlerExecutionError",
    "HandlerNotFoundError",
    "InvalidResponseError",
    "MalformedRequestError",
    "MissingInputError",
    "MissingSimpleResponseError",
    "OptionCountError",
    "PromptLimitError",
    "ResponseValidationError",
    "SystemIntentError",
    "UnserializableDataError",
    "VerificationError",
]
